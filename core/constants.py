"""
Core — Constants

Shared constants for audit actions, pagination and pricing.

@file core/constants.py
"""

from decimal import Decimal

# Audit actions (mirror AuditLog.ActionChoices values)
AUDIT_ACTION_CREATE = 'CREATE'
AUDIT_ACTION_SOFT_DELETE = 'SOFT_DELETE'
AUDIT_ACTION_STATUS_CHANGE = 'STATUS_CHANGE'

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 200

# Money and quantity columns share one precision across the platform.
DECIMAL_MAX_DIGITS = 15
DECIMAL_PLACES = 2
ZERO = Decimal('0')
