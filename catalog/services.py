"""
Catalog — Service Layer

Create / update / status toggle / soft delete for categories, suppliers,
warehouses and products. Every write is audited. Warehouses and
products still holding stock cannot be deleted, and a category with
live products cannot either.

@file catalog/services.py
"""

import logging

from django.db import transaction

from core.constants import (
    AUDIT_ACTION_CREATE,
    AUDIT_ACTION_SOFT_DELETE,
    AUDIT_ACTION_STATUS_CHANGE,
)
from core.exceptions import BusinessRuleViolation, ResourceNotFoundError
from core.services import AuditService

from .models import Category, Product, Supplier, Warehouse

logger = logging.getLogger('stockpoint')


class CatalogService:
    """Shared write path; subclasses bind the model."""

    model = None
    # Kept in the audit entry of a soft delete.
    label_field = 'name'

    @classmethod
    def _get_locked(cls, pk):
        try:
            return cls.model.objects.select_for_update().get(pk=pk, is_deleted=False)
        except cls.model.DoesNotExist:
            raise ResourceNotFoundError(detail=f'{cls.model.__name__} not found.')

    @classmethod
    @transaction.atomic
    def create(cls, *, actor=None, **fields):
        instance = cls.model(**fields)
        instance.created_by = actor
        instance.updated_by = actor
        instance.full_clean()
        instance.save()
        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_CREATE,
            model_name=cls.model.__name__,
            object_id=str(instance.pk),
            new_values=AuditService.snapshot(instance),
        )
        return instance

    @classmethod
    @transaction.atomic
    def update(cls, *, pk, actor=None, **fields):
        instance = cls._get_locked(pk)
        old_snapshot = AuditService.snapshot(instance)

        for field, value in fields.items():
            if hasattr(instance, field) and field not in ('id', 'pk'):
                setattr(instance, field, value)

        instance.updated_by = actor
        instance.full_clean()
        instance.save()

        AuditService.log_update(
            actor=actor,
            model_name=cls.model.__name__,
            object_id=instance.pk,
            old_snapshot=old_snapshot,
            new_snapshot=AuditService.snapshot(instance),
        )
        return instance

    @classmethod
    @transaction.atomic
    def toggle_status(cls, *, pk, actor=None):
        instance = cls._get_locked(pk)
        is_active = instance.toggle_active(user=actor)
        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_STATUS_CHANGE,
            model_name=cls.model.__name__,
            object_id=str(instance.pk),
            old_values={'is_active': not is_active},
            new_values={'is_active': is_active},
        )
        logger.info('%s %s is_active=%s by %s', cls.model.__name__, instance.pk, is_active, actor)
        return instance

    @classmethod
    def check_deletable(cls, instance):
        """Hook: raise BusinessRuleViolation to block a delete."""

    @classmethod
    @transaction.atomic
    def delete(cls, *, pk, actor=None):
        instance = cls._get_locked(pk)
        cls.check_deletable(instance)
        instance.soft_delete(user=actor)
        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_SOFT_DELETE,
            model_name=cls.model.__name__,
            object_id=str(instance.pk),
            old_values=AuditService.snapshot(instance, fields=[cls.label_field]),
        )
        return instance


class CategoryService(CatalogService):
    model = Category

    @classmethod
    def check_deletable(cls, instance):
        if instance.products.filter(is_deleted=False).exists():
            raise BusinessRuleViolation(
                detail='Category still has products. Move or delete them first.',
            )


class SupplierService(CatalogService):
    model = Supplier


class WarehouseService(CatalogService):
    model = Warehouse

    @classmethod
    def check_deletable(cls, instance):
        if instance.stock_records.filter(quantity__gt=0).exists():
            raise BusinessRuleViolation(detail='Warehouse still holds stock.')


class ProductService(CatalogService):
    model = Product

    @classmethod
    def check_deletable(cls, instance):
        if instance.stock_records.filter(quantity__gt=0).exists():
            raise BusinessRuleViolation(detail='Product still has stock on hand.')
