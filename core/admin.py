"""
Core — Django Admin Configuration

Audit trail browser. Entries are written by the services only, so the
admin never adds, edits or deletes them.

@file core/admin.py
"""

from django.contrib import admin
from django.utils.html import format_html_join
from django.utils.translation import gettext_lazy as _

from core.models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ('timestamp', 'action', 'model_name', 'object_id', 'actor', 'changed_keys')
    list_filter = ('action', 'model_name')
    search_fields = ('object_id', 'actor__username')
    date_hierarchy = 'timestamp'
    list_select_related = ('actor',)
    ordering = ('-timestamp',)
    readonly_fields = [f.name for f in AuditLog._meta.fields] + ['diff']
    exclude = ('old_values', 'new_values')

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.display(description=_('Changed'))
    def changed_keys(self, obj):
        return ', '.join(sorted((obj.new_values or obj.old_values or {}).keys()))

    @admin.display(description=_('Diff'))
    def diff(self, obj):
        old = obj.old_values or {}
        new = obj.new_values or {}
        rows = ((key, old.get(key, '—'), new.get(key, '—')) for key in sorted(set(old) | set(new)))
        return format_html_join('\n', '<div><b>{}</b>: {} → {}</div>', rows)
