"""
Purchases — URL Configuration

@file purchases/urls.py
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import PurchaseViewSet

app_name = 'purchases'

router = DefaultRouter()
router.register('', PurchaseViewSet, basename='purchase')

urlpatterns = [
    path('', include(router.urls)),
]
