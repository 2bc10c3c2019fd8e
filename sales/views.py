"""
Sales — Views

@file sales/views.py
"""

from django.db.models import Prefetch
from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .filters import SaleFilter
from .models import Sale, SaleItem
from .permissions import CanManageSales
from .serializers import SaleReadSerializer, SaleWriteSerializer
from .services import SaleService


class SaleViewSet(viewsets.ModelViewSet):
    """
    POST   /sales/        post a sale (409 when any line lacks stock)
    PATCH  /sales/{id}/   edit; new lines reverse and re-post
    DELETE /sales/{id}/   reverse stock and soft-delete
    """

    permission_classes = [IsAuthenticated, CanManageSales]
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']
    filterset_class = SaleFilter
    search_fields = ['invoice_number', 'items__product__name']
    ordering_fields = ['sale_date', 'grand_total', 'created_at']
    ordering = ['-created_at']

    def get_queryset(self):
        return (
            Sale.objects
            .filter(is_deleted=False)
            .prefetch_related(Prefetch(
                'items',
                queryset=SaleItem.objects.filter(is_deleted=False).select_related('product', 'warehouse'),
            ))
            .distinct()
        )

    def get_serializer_class(self):
        if self.action in ('create', 'update', 'partial_update'):
            return SaleWriteSerializer
        return SaleReadSerializer

    def _read(self, sale):
        return SaleReadSerializer(self.get_queryset().get(pk=sale.pk)).data

    def create(self, request, *args, **kwargs):
        ser = SaleWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        sale = SaleService.create_sale(actor=request.user, **ser.to_service_kwargs())
        return Response(self._read(sale), status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        instance = self.get_object()
        ser = SaleWriteSerializer(instance, data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        sale = SaleService.update_sale(instance.pk, actor=request.user, **ser.to_service_kwargs())
        return Response(self._read(sale))

    def destroy(self, request, *args, **kwargs):
        SaleService.delete_sale(self.get_object().pk, actor=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)
