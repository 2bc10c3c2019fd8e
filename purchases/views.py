"""
Purchases — Views

@file purchases/views.py
"""

from django.db.models import Prefetch
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.exceptions import ResourceNotFoundError

from .filters import PurchaseFilter
from .models import Purchase, PurchaseItem
from .permissions import CanManagePurchases
from .serializers import PurchaseReadSerializer, PurchaseWriteSerializer
from .services import PurchaseService


class PurchaseViewSet(viewsets.ModelViewSet):
    """
    CRUD for purchases plus the receive / cancel transitions.

    Editing lines of a received purchase reverses the stock it posted
    and posts the new lines; deleting it reverses the stock first.
    """

    permission_classes = [IsAuthenticated, CanManagePurchases]
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']
    filterset_class = PurchaseFilter
    search_fields = ['invoice_number', 'supplier_name', 'supplier__name', 'items__product__name']
    ordering_fields = ['purchase_date', 'grand_total', 'created_at']
    ordering = ['-created_at']

    def get_queryset(self):
        return (
            Purchase.objects
            .filter(is_deleted=False)
            .select_related('supplier')
            .prefetch_related(Prefetch(
                'items',
                queryset=PurchaseItem.objects.filter(is_deleted=False).select_related('product', 'warehouse'),
            ))
            .distinct()
        )

    def get_serializer_class(self):
        if self.action in ('create', 'update', 'partial_update'):
            return PurchaseWriteSerializer
        return PurchaseReadSerializer

    def _read(self, purchase):
        try:
            return PurchaseReadSerializer(self.get_queryset().get(pk=purchase.pk)).data
        except Purchase.DoesNotExist:
            raise ResourceNotFoundError()

    def create(self, request, *args, **kwargs):
        ser = PurchaseWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        purchase = PurchaseService.create_purchase(actor=request.user, **ser.to_service_kwargs())
        return Response(self._read(purchase), status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        instance = self.get_object()
        ser = PurchaseWriteSerializer(instance, data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        data = ser.to_service_kwargs()
        data.pop('receive', None)
        purchase = PurchaseService.update_purchase(instance.pk, actor=request.user, **data)
        return Response(self._read(purchase))

    def destroy(self, request, *args, **kwargs):
        PurchaseService.delete_purchase(self.get_object().pk, actor=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=['get'], url_path='active')
    def active(self, request):
        qs = self.filter_queryset(self.get_queryset().filter(is_active=True))
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(PurchaseReadSerializer(page, many=True).data)
        return Response({'success': True, 'data': PurchaseReadSerializer(qs, many=True).data})

    @action(detail=True, methods=['post'], url_path='receive')
    def receive(self, request, pk=None):
        purchase = PurchaseService.receive_purchase(self.get_object().pk, actor=request.user)
        return Response({'success': True, 'data': self._read(purchase)})

    @action(detail=True, methods=['post'], url_path='cancel')
    def cancel(self, request, pk=None):
        purchase = PurchaseService.cancel_purchase(self.get_object().pk, actor=request.user)
        return Response({'success': True, 'data': self._read(purchase)})

    @action(detail=True, methods=['patch'], url_path='status')
    def toggle_status(self, request, pk=None):
        purchase = self.get_object()
        purchase.toggle_active(user=request.user)
        return Response({'success': True, 'data': {'id': str(purchase.pk), 'is_active': purchase.is_active}})
