"""
Core — Views

Activity log: who created, edited, toggled or deleted which catalog
entity or document. Stock quantities have their own ledger endpoint.

@file core/views.py
"""

from rest_framework import viewsets
from rest_framework.permissions import BasePermission, IsAuthenticated

from core.filters import AuditLogFilter
from core.models import AuditLog
from core.serializers import AuditLogSerializer


class CanViewAuditLog(BasePermission):

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and (
            user.is_superuser or user.has_perm('core.view_auditlog')
        ))


class AuditLogViewSet(viewsets.ReadOnlyModelViewSet):
    """GET /activity-logs/  newest first; filter by action, model_name, object_id, actor, dates."""

    permission_classes = [IsAuthenticated, CanViewAuditLog]
    serializer_class = AuditLogSerializer
    filterset_class = AuditLogFilter
    search_fields = ['object_id', 'actor__username']
    ordering_fields = ['timestamp']
    ordering = ['-timestamp']

    def get_queryset(self):
        return AuditLog.objects.select_related('actor')
