"""
Catalog — Views

ViewSets for categories, suppliers, warehouses and products. Each
exposes the usual CRUD plus GET active/ and PATCH {id}/status/.
Products add their stock breakdown and movement history.

@file catalog/views.py
"""

from django.db.models import DecimalField, Sum, Value
from django.db.models.functions import Coalesce
from django.utils.dateparse import parse_date
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.constants import DECIMAL_MAX_DIGITS, DECIMAL_PLACES, ZERO
from core.exceptions import BusinessRuleViolation, ResourceNotFoundError
from stock import selectors
from stock.models import StockMovement
from stock.serializers import StockMovementHistorySerializer

from .models import Category, Product, Supplier, Warehouse
from .permissions import CanManageCatalog
from .serializers import (
    CategorySerializer,
    ProductReadSerializer,
    ProductStockSerializer,
    ProductWriteSerializer,
    SupplierSerializer,
    WarehouseSerializer,
)
from .services import CategoryService, ProductService, SupplierService, WarehouseService


class CatalogViewSet(viewsets.ModelViewSet):
    """Common CRUD wiring: writes go through the bound service."""

    permission_classes = [IsAuthenticated, CanManageCatalog]
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']
    service_class = None
    read_serializer_class = None

    def get_serializer_class(self):
        if self.action in ('list', 'retrieve', 'active', 'toggle_status') and self.read_serializer_class:
            return self.read_serializer_class
        return self.serializer_class

    def _read_data(self, instance):
        serializer_class = self.read_serializer_class or self.serializer_class
        fresh = self.get_queryset().get(pk=instance.pk)
        return serializer_class(fresh, context=self.get_serializer_context()).data

    def create(self, request, *args, **kwargs):
        ser = self.get_serializer(data=request.data)
        ser.is_valid(raise_exception=True)
        self.perform_create(ser)
        return Response(self._read_data(ser.instance), status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        ser = self.get_serializer(self.get_object(), data=request.data, partial=partial)
        ser.is_valid(raise_exception=True)
        self.perform_update(ser)
        return Response(self._read_data(ser.instance))

    def perform_create(self, serializer):
        serializer.instance = self.service_class.create(
            actor=self.request.user, **serializer.validated_data,
        )

    def perform_update(self, serializer):
        serializer.instance = self.service_class.update(
            pk=serializer.instance.pk,
            actor=self.request.user,
            **serializer.validated_data,
        )

    def perform_destroy(self, instance):
        self.service_class.delete(pk=instance.pk, actor=self.request.user)

    @action(detail=False, methods=['get'], url_path='active')
    def active(self, request):
        qs = self.filter_queryset(self.get_queryset().filter(is_active=True))
        page = self.paginate_queryset(qs)
        if page is not None:
            ser = self.get_serializer(page, many=True)
            return self.get_paginated_response(ser.data)
        ser = self.get_serializer(qs, many=True)
        return Response({'success': True, 'data': ser.data})

    @action(detail=True, methods=['patch'], url_path='status')
    def toggle_status(self, request, pk=None):
        instance = self.service_class.toggle_status(pk=self.get_object().pk, actor=request.user)
        return Response({
            'success': True,
            'data': self.get_serializer(self.get_queryset().get(pk=instance.pk)).data,
        })


class CategoryViewSet(CatalogViewSet):
    serializer_class = CategorySerializer
    service_class = CategoryService
    filterset_fields = ['is_active']
    search_fields = ['name', 'description']
    ordering_fields = ['name', 'created_at']
    ordering = ['name']

    def get_queryset(self):
        return Category.objects.filter(is_deleted=False)


class SupplierViewSet(CatalogViewSet):
    serializer_class = SupplierSerializer
    service_class = SupplierService
    filterset_fields = ['is_active']
    search_fields = ['name', 'contact_person', 'phone', 'email']
    ordering_fields = ['name', 'created_at']
    ordering = ['name']

    def get_queryset(self):
        return Supplier.objects.filter(is_deleted=False)


class WarehouseViewSet(CatalogViewSet):
    serializer_class = WarehouseSerializer
    service_class = WarehouseService
    filterset_fields = ['is_active']
    search_fields = ['name', 'code', 'address']
    ordering_fields = ['name', 'code', 'created_at']
    ordering = ['name']

    def get_queryset(self):
        return Warehouse.objects.filter(is_deleted=False)


class ProductViewSet(CatalogViewSet):
    serializer_class = ProductWriteSerializer
    read_serializer_class = ProductReadSerializer
    service_class = ProductService
    filterset_fields = ['category', 'is_active', 'has_expiry', 'is_vatable']
    search_fields = ['name', 'code', 'barcode']
    ordering_fields = ['name', 'code', 'selling_price', 'created_at']
    ordering = ['name']

    def get_queryset(self):
        return (
            Product.objects
            .filter(is_deleted=False)
            .select_related('category')
            .annotate(total_stock=Coalesce(
                Sum('stock_records__quantity'), Value(ZERO),
                output_field=DecimalField(max_digits=DECIMAL_MAX_DIGITS, decimal_places=DECIMAL_PLACES),
            ))
        )

    @action(detail=False, methods=['get'], url_path='barcode-search')
    def barcode_search(self, request):
        barcode = request.query_params.get('barcode', '').strip()
        if not barcode:
            raise BusinessRuleViolation(detail='The barcode query parameter is required.')
        product = self.get_queryset().filter(barcode=barcode).first()
        if product is None:
            raise ResourceNotFoundError(detail='No product with this barcode.')
        return Response({'success': True, 'data': ProductReadSerializer(product).data})

    @action(detail=True, methods=['get'], url_path='stock')
    def stock(self, request, pk=None):
        product = self.get_object()
        total = selectors.get_product_total(product.pk)
        payload = {
            'product': product,
            'total_stock': total,
            'is_low_stock': product.min_stock > 0 and total <= product.min_stock,
            'batches': selectors.stock_by_warehouse(product.pk),
        }
        return Response({'success': True, 'data': ProductStockSerializer(payload).data})

    @staticmethod
    def _batch_param(request, warehouse_id):
        raw = request.query_params.get('expiry_date')
        if not raw:
            return selectors.ANY_BATCH
        if warehouse_id is None:
            raise BusinessRuleViolation(detail='expiry_date needs a warehouse.')
        if raw.lower() == 'none':
            return None
        try:
            parsed = parse_date(raw)
        except ValueError:
            parsed = None
        if parsed is None:
            raise BusinessRuleViolation(detail=f'Invalid expiry_date: {raw}')
        return parsed

    @action(detail=True, methods=['get'], url_path='stock-movements')
    def stock_movements(self, request, pk=None):
        """
        Movement history, newest first, with the running balance after
        each row. ?warehouse= scopes both rows and balance, and with
        ?expiry_date= (a date, or "none" for the undated batch) narrows
        them to one batch; ?movement_type= filters rows only.
        """
        product = self.get_object()
        warehouse_id = request.query_params.get('warehouse') or None
        expiry_date = self._batch_param(request, warehouse_id)
        movement_type = request.query_params.get('movement_type') or None
        if movement_type and movement_type not in StockMovement.MovementType.values:
            raise BusinessRuleViolation(detail=f'Invalid movement_type: {movement_type}')

        history = selectors.movement_history(
            product.pk, warehouse_id=warehouse_id, movement_type=movement_type, expiry_date=expiry_date,
        )
        product_block = {
            'id': str(product.pk),
            'name': product.name,
            'code': product.code,
            'current_stock': selectors.get_quantity(product.pk, warehouse_id=warehouse_id, expiry_date=expiry_date),
        }
        page = self.paginate_queryset(history)
        if page is not None:
            response = self.get_paginated_response(StockMovementHistorySerializer(page, many=True).data)
            response.data['product'] = product_block
            return response
        return Response({
            'success': True,
            'data': StockMovementHistorySerializer(history, many=True).data,
            'product': product_block,
        })
