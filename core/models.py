"""
Core — Base Models & Audit Infrastructure

BaseModel gives every document and catalog row a UUID key, timestamps
and the acting user. TrackedModel adds soft delete and the active flag:
movements keep pointing at products, warehouses and documents, so those
rows are flagged, never removed.

AuditLog records who changed which document; quantities are never
stored there.

@file core/models.py
"""

import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


def _actor_field(label):
    return models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name='+',
        verbose_name=label,
    )


class BaseModel(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(_('created at'), auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)
    created_by = _actor_field(_('created by'))
    updated_by = _actor_field(_('updated by'))

    class Meta:
        abstract = True


class TrackedModel(BaseModel):
    """Catalog entities and document headers."""

    is_active = models.BooleanField(_('active'), default=True, db_index=True)
    is_deleted = models.BooleanField(_('deleted'), default=False, db_index=True)
    deleted_at = models.DateTimeField(_('deleted at'), null=True, blank=True)
    deleted_by = _actor_field(_('deleted by'))

    class Meta:
        abstract = True

    def _mark_deleted(self, flag, user):
        self.is_deleted = flag
        self.deleted_at = timezone.now() if flag else None
        self.deleted_by = user if flag else None
        self.save(update_fields=['is_deleted', 'deleted_at', 'deleted_by', 'updated_at'])

    def soft_delete(self, user=None):
        self._mark_deleted(True, user)

    def restore(self):
        self._mark_deleted(False, None)

    def toggle_active(self, user=None) -> bool:
        self.is_active = not self.is_active
        self.updated_by = user
        self.save(update_fields=['is_active', 'updated_by', 'updated_at'])
        return self.is_active


# ---------------------------------------------------------------------------
# Activity trail
# ---------------------------------------------------------------------------

class AuditLog(models.Model):
    """
    One row per create, edit, status toggle or soft delete of a catalog
    entity or document. UPDATE rows hold only the changed keys.
    """

    class ActionChoices(models.TextChoices):
        CREATE = 'CREATE', _('Create')
        UPDATE = 'UPDATE', _('Update')
        SOFT_DELETE = 'SOFT_DELETE', _('Soft Delete')
        STATUS_CHANGE = 'STATUS_CHANGE', _('Status Change')

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name='audit_logs',
        verbose_name=_('actor'),
    )
    action = models.CharField(
        _('action'), max_length=20,
        choices=ActionChoices.choices, db_index=True,
    )
    model_name = models.CharField(_('model'), max_length=100, db_index=True)
    object_id = models.CharField(_('object ID'), max_length=40, db_index=True)

    old_values = models.JSONField(_('old values'), null=True, blank=True)
    new_values = models.JSONField(_('new values'), null=True, blank=True)
    timestamp = models.DateTimeField(_('timestamp'), auto_now_add=True, db_index=True)

    class Meta:
        verbose_name = _('audit log')
        verbose_name_plural = _('audit logs')
        ordering = ['-timestamp']
        indexes = [
            models.Index(fields=['model_name', 'object_id'], name='audit_model_object_idx'),
            models.Index(fields=['actor', 'timestamp'], name='audit_actor_ts_idx'),
            models.Index(fields=['action', 'timestamp'], name='audit_action_ts_idx'),
        ]

    def __str__(self):
        return f'{self.action} {self.model_name}:{self.object_id} by {self.actor_id}'

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise NotImplementedError('AuditLog is insert-only; updates are not allowed.')
        super().save(*args, **kwargs)
