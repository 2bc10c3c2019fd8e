"""
Core — Serializers

@file core/serializers.py
"""

from rest_framework import serializers

from core.models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):
    actor_name = serializers.CharField(source='actor.username', read_only=True, default=None)
    action_display = serializers.CharField(source='get_action_display', read_only=True)

    class Meta:
        model = AuditLog
        fields = [
            'id', 'timestamp', 'actor', 'actor_name', 'action', 'action_display',
            'model_name', 'object_id', 'old_values', 'new_values',
        ]
        read_only_fields = fields
