"""
Core — Model Tests

AuditLog, snapshots and the TrackedModel soft delete / toggle.

@file core/tests/test_models.py
"""

from decimal import Decimal

import pytest

from core.models import AuditLog
from core.services import AuditService
from tests.factories import AuditLogFactory, CategoryFactory, ProductFactory, UserFactory


@pytest.mark.django_db
class TestAuditLog:
    def test_create_audit_log(self):
        user = UserFactory()
        log = AuditService.log(
            actor=user,
            action=AuditLog.ActionChoices.CREATE,
            model_name='Purchase',
            object_id='test-123',
            new_values={'key': 'value'},
        )
        assert log.pk is not None
        assert log.action == 'CREATE'
        assert log.actor == user

    def test_audit_log_is_insert_only(self):
        log = AuditLogFactory()
        log.model_name = 'Other'
        with pytest.raises(NotImplementedError):
            log.save()

    def test_snapshot_is_json_ready(self):
        product = ProductFactory(selling_price=Decimal('12.50'))
        snapshot = AuditService.snapshot(product)
        assert snapshot['selling_price'] == '12.50'
        assert snapshot['category'] == str(product.category_id)

    def test_snapshot_field_subset(self):
        category = CategoryFactory(name='Drinks')
        assert AuditService.snapshot(category, fields=['name']) == {'name': 'Drinks'}


@pytest.mark.django_db
class TestTrackedModel:
    def test_soft_delete_and_restore(self):
        user = UserFactory()
        category = CategoryFactory()
        category.soft_delete(user=user)
        category.refresh_from_db()
        assert category.is_deleted
        assert category.deleted_by == user
        assert category.deleted_at is not None

        category.restore()
        category.refresh_from_db()
        assert not category.is_deleted
        assert category.deleted_at is None

    def test_toggle_active(self):
        category = CategoryFactory()
        assert category.toggle_active() is False
        assert category.toggle_active() is True
