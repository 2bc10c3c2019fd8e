"""
Catalog — Permissions

Read is open to authenticated users. Writes need the Django model
permission matching the view's model and action (add / change /
delete), so access is granted through groups in the admin.

@file catalog/permissions.py
"""

from rest_framework.permissions import BasePermission

_ACTION_PERMS = {
    'POST': 'add',
    'PUT': 'change',
    'PATCH': 'change',
    'DELETE': 'delete',
}


class CanManageCatalog(BasePermission):

    def has_permission(self, request, view):
        if request.method in ('GET', 'HEAD', 'OPTIONS'):
            return True
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if user.is_superuser:
            return True
        model = view.get_queryset().model
        verb = _ACTION_PERMS.get(request.method)
        if verb is None:
            return False
        return user.has_perm(f'{model._meta.app_label}.{verb}_{model._meta.model_name}')
