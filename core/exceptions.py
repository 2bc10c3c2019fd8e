"""
Core — Exception Handling

Domain exceptions raised by the services and the DRF handler that
turns any error into the standard envelope.

@file core/exceptions.py
"""

import logging

from django.core.exceptions import PermissionDenied, ValidationError
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger('stockpoint')


# ---------------------------------------------------------------------------
# Domain exceptions
# ---------------------------------------------------------------------------

class BusinessRuleViolation(APIException):
    """Raised when a business rule is violated at the service layer."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Business rule violation.'
    default_code = 'BUSINESS_RULE_VIOLATION'


class InsufficientStockError(APIException):
    """
    Raised when an outbound movement would take a batch below zero.

    Carries the batch key and the requested / available quantities so
    callers can name the failing line.
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Insufficient stock for this operation.'
    default_code = 'INSUFFICIENT_STOCK'

    def __init__(self, detail=None, code=None, *, batch_key=None, requested=None, available=None):
        super().__init__(detail=detail, code=code)
        self.batch_key = batch_key
        self.requested = requested
        self.available = available


class InvalidStateTransition(BusinessRuleViolation):
    """Raised when a state machine transition is not allowed."""
    default_detail = 'Invalid state transition.'
    default_code = 'INVALID_STATE_TRANSITION'

    def __init__(self, detail=None, code=None, *, document_id=None, from_status=None, to_status=None):
        if detail is None and from_status is not None:
            detail = f'Cannot transition from {from_status} to {to_status}.'
        super().__init__(detail=detail, code=code)
        self.document_id = document_id
        self.from_status = from_status
        self.to_status = to_status


class ResourceNotFoundError(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Resource not found.'
    default_code = 'RESOURCE_NOT_FOUND'


# ---------------------------------------------------------------------------
# Standard exception handler
# ---------------------------------------------------------------------------

def _envelope(errors, code, status_code):
    return Response({'success': False, 'errors': errors, 'code': code}, status=status_code)


def _as_errors(data):
    if isinstance(data, dict):
        return data
    if isinstance(data, list):
        return {'detail': data}
    return {'detail': [str(data)]}


def _domain_context(exc) -> dict:
    """Extra keys for ledger and workflow errors, so clients can point at the failing line."""
    if isinstance(exc, InsufficientStockError) and exc.batch_key is not None:
        key = exc.batch_key
        return {'stock': {
            'product': str(key.product_id),
            'warehouse': str(key.warehouse_id),
            'expiry_date': key.expiry_date.isoformat() if key.expiry_date else None,
            'requested': exc.requested,
            'available': exc.available,
        }}
    if isinstance(exc, InvalidStateTransition) and exc.from_status is not None:
        return {'transition': {'from': exc.from_status, 'to': exc.to_status}}
    return {}


def standard_exception_handler(exc, context):
    """
    Every error leaves the API as
      { "success": false, "errors": {...}, "code": "ERROR_CODE" }
    Django's own ValidationError (model full_clean in the services) maps
    to VALIDATION_ERROR with the field messages.
    """
    if isinstance(exc, ValidationError):
        errors = exc.message_dict if hasattr(exc, 'error_dict') else {'detail': exc.messages}
        return _envelope(errors, 'VALIDATION_ERROR', status.HTTP_400_BAD_REQUEST)
    if isinstance(exc, Http404):
        exc = ResourceNotFoundError()
    elif isinstance(exc, PermissionDenied):
        exc = exceptions.PermissionDenied()

    response = exception_handler(exc, context)
    if response is None:
        view = context.get('view')
        logger.exception('Unhandled %s in %s', type(exc).__name__, type(view).__name__ if view else 'view')
        return _envelope(
            {'detail': ['Internal server error.']}, 'INTERNAL_ERROR', status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    errors = _as_errors(response.data)
    if isinstance(exc, exceptions.ValidationError):
        code = 'VALIDATION_ERROR'
    else:
        codes = exc.get_codes()
        code = (codes if isinstance(codes, str) else exc.default_code).upper()
    errors.update(_domain_context(exc))
    response.data = {'success': False, 'errors': errors, 'code': code}
    return response
