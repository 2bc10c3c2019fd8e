"""
Purchases — Permissions

@file purchases/permissions.py
"""

from rest_framework.permissions import BasePermission


class CanManagePurchases(BasePermission):
    """Read: any authenticated user. Write, receive, cancel: purchases.change_purchase."""

    def has_permission(self, request, view):
        if request.method in ('GET', 'HEAD', 'OPTIONS'):
            return True
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return user.is_superuser or user.has_perm('purchases.change_purchase')
