"""
Expenses — Views

CRUD on top of the catalog wiring. POST records a batch of expenses
under one category; the list carries the filtered total_sum next to
the page; GET by-category/ groups every matching expense.

@file expenses/views.py
"""

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from catalog.views import CatalogViewSet
from core.constants import ZERO

from . import selectors
from .filters import ExpenseFilter
from .serializers import ExpenseBatchSerializer, ExpenseSerializer
from .services import ExpenseService


class ExpenseViewSet(CatalogViewSet):
    serializer_class = ExpenseSerializer
    service_class = ExpenseService
    filterset_class = ExpenseFilter
    search_fields = ['title', 'description']
    ordering_fields = ['created_at', 'amount', 'title']
    ordering = ['-created_at']

    def get_queryset(self):
        return selectors.live_expenses()

    def get_serializer_class(self):
        if self.action == 'create':
            return ExpenseBatchSerializer
        return super().get_serializer_class()

    def create(self, request, *args, **kwargs):
        ser = self.get_serializer(data=request.data)
        ser.is_valid(raise_exception=True)
        expenses = ExpenseService.record_many(actor=request.user, **ser.validated_data)
        return Response(
            {
                'success': True,
                'data': ExpenseSerializer(expenses, many=True).data,
                'count': len(expenses),
            },
            status=status.HTTP_201_CREATED,
        )

    def list(self, request, *args, **kwargs):
        response = super().list(request, *args, **kwargs)
        if isinstance(response.data, dict):
            response.data['total_sum'] = selectors.total_amount(self.filter_queryset(self.get_queryset()))
        return response

    @action(detail=False, methods=['get'], url_path='by-category')
    def by_category(self, request):
        groups = selectors.group_by_category(self.filter_queryset(self.get_queryset()))
        return Response({
            'success': True,
            'data': {
                category: {
                    'total': sum((e.amount for e in rows), ZERO),
                    'items': ExpenseSerializer(rows, many=True).data,
                }
                for category, rows in groups.items()
            },
        })
