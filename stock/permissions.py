"""
Stock — Permissions

Reading the ledger is open to any authenticated user. Manual movements
need the stock.add_stockmovement model permission (or superuser).

@file stock/permissions.py
"""

from rest_framework.permissions import BasePermission


class CanRecordMovement(BasePermission):

    def has_permission(self, request, view):
        if request.method in ('GET', 'HEAD', 'OPTIONS'):
            return True
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return user.is_superuser or user.has_perm('stock.add_stockmovement')
