"""
Core — Audit Service

Writes audit log entries for document and catalog lifecycle events and
reads them back for the activity log. Never used by the stock ledger
itself: quantities are audited by the movement table.

@file core/services.py
"""

import logging
from decimal import Decimal
from typing import Any

from django.forms.models import model_to_dict

from core.models import AuditLog

logger = logging.getLogger('stockpoint')


class AuditService:

    @staticmethod
    def log(
        *,
        actor,
        action: str,
        model_name: str,
        object_id: str,
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
    ) -> AuditLog:
        entry = AuditLog.objects.create(
            actor=actor,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            old_values=old_values,
            new_values=new_values,
        )
        logger.debug('Audit %s %s:%s by %s', action, model_name, object_id, actor)
        return entry

    @staticmethod
    def log_update(*, actor, model_name: str, object_id, old_snapshot: dict, new_snapshot: dict) -> AuditLog | None:
        """
        Record an UPDATE holding only the keys whose value changed.
        Nothing is written when the snapshots are equal.
        """
        old_values, new_values = AuditService.changes(old_snapshot, new_snapshot)
        if not new_values:
            return None
        return AuditService.log(
            actor=actor,
            action=AuditLog.ActionChoices.UPDATE,
            model_name=model_name,
            object_id=object_id,
            old_values=old_values,
            new_values=new_values,
        )

    @staticmethod
    def changes(old: dict[str, Any], new: dict[str, Any]) -> tuple[dict, dict]:
        keys = [key for key in new if old.get(key) != new[key]]
        return {key: old.get(key) for key in keys}, {key: new[key] for key in keys}

    @staticmethod
    def snapshot(instance, fields=None) -> dict[str, Any]:
        """
        Plain-dict copy of a model instance for the JSON columns.
        Dates ISO-formatted; UUIDs and Decimals as strings.
        """
        cleaned: dict[str, Any] = {}
        for key, value in model_to_dict(instance, fields=fields).items():
            if value is None or isinstance(value, (bool, int, str)):
                cleaned[key] = value
            elif isinstance(value, Decimal):
                cleaned[key] = str(value)
            elif hasattr(value, 'isoformat'):
                cleaned[key] = value.isoformat()
            else:
                cleaned[key] = str(value)
        return cleaned

    @staticmethod
    def history(model_name: str, object_id):
        """Every audit entry for one object, oldest first."""
        return (
            AuditLog.objects
            .filter(model_name=model_name, object_id=str(object_id))
            .select_related('actor')
            .order_by('timestamp')
        )
