"""
Stock — Views

Ledger listing, manual movements and the expiring-batches report.
Movements are never updated or deleted through the API.

@file stock/views.py
"""

from django.conf import settings
from rest_framework import generics, mixins, status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from . import selectors
from .models import StockMovement
from .permissions import CanRecordMovement
from .serializers import ManualMovementSerializer, StockMovementReadSerializer, StockRecordSerializer
from .services import LedgerService


class StockMovementViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    """
    GET  /stock/movements/      ledger, newest first
    POST /stock/movements/      manual damage / lost / found / adjustment / opening stock
    """

    permission_classes = [IsAuthenticated, CanRecordMovement]
    filterset_fields = ['product', 'warehouse', 'movement_type', 'reference_type', 'reference_id']
    search_fields = ['product__name', 'product__code', 'reference_id', 'notes']
    ordering_fields = ['created_at', 'quantity']
    ordering = ['-created_at', '-id']

    def get_queryset(self):
        return StockMovement.objects.select_related('product', 'warehouse', 'created_by')

    def get_serializer_class(self):
        if self.action == 'create':
            return ManualMovementSerializer
        return StockMovementReadSerializer

    def create(self, request, *args, **kwargs):
        ser = ManualMovementSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        result = LedgerService.record_manual_movement(
            product_id=data['product'].pk,
            warehouse_id=data['warehouse'].pk,
            expiry_date=data['expiry_date'],
            quantity=data['quantity'],
            movement_type=data['movement_type'],
            notes=data['notes'],
            created_by=request.user,
        )
        return Response(
            StockMovementReadSerializer(result.movement).data,
            status=status.HTTP_201_CREATED,
        )


class ExpiringStockView(generics.ListAPIView):
    """GET /stock/expiring/?days=N  batches with stock expiring within N days."""

    permission_classes = [IsAuthenticated]
    serializer_class = StockRecordSerializer
    filterset_fields = ['warehouse', 'product']

    def get_queryset(self):
        try:
            days = int(self.request.query_params.get('days', settings.STOCK_EXPIRY_WARNING_DAYS))
        except ValueError:
            days = settings.STOCK_EXPIRY_WARNING_DAYS
        return selectors.expiring_batches(days=max(days, 0))
