"""
Sales — Permissions

@file sales/permissions.py
"""

from rest_framework.permissions import BasePermission


class CanManageSales(BasePermission):
    """Cashiers need sales.add_sale to sell; edits and deletes need change / delete."""

    def has_permission(self, request, view):
        if request.method in ('GET', 'HEAD', 'OPTIONS'):
            return True
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if user.is_superuser:
            return True
        if request.method == 'POST':
            return user.has_perm('sales.add_sale')
        if request.method == 'DELETE':
            return user.has_perm('sales.delete_sale')
        return user.has_perm('sales.change_sale')
