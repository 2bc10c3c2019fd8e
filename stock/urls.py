"""
Stock — URL Configuration

@file stock/urls.py
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import ExpiringStockView, StockMovementViewSet

app_name = 'stock'

router = DefaultRouter()
router.register('movements', StockMovementViewSet, basename='movement')

urlpatterns = [
    path('expiring/', ExpiringStockView.as_view(), name='expiring'),
    path('', include(router.urls)),
]
