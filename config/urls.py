"""
StockPoint — Root URL Configuration

All API endpoints are namespaced under /api/v1/.
The DRF browsable API is available for route inspection in development.

@file config/urls.py
"""

from django.contrib import admin
from django.urls import include, path
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.reverse import reverse
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

admin.site.site_header = 'StockPoint Administration'
admin.site.site_title = 'StockPoint'
admin.site.index_title = 'Inventory & Point of Sale'


@api_view(['GET'])
@permission_classes([AllowAny])
def api_root(request, format=None):
    """StockPoint API v1 — endpoint directory."""
    def url(name):
        return reverse(f'api-v1:{name}', request=request, format=format)

    return Response({
        'auth': {
            'token': url('token-obtain'),
            'refresh': url('token-refresh'),
        },
        'catalog': {
            'categories': url('catalog:category-list'),
            'suppliers': url('catalog:supplier-list'),
            'warehouses': url('catalog:warehouse-list'),
            'products': url('catalog:product-list'),
        },
        'stock': {
            'movements': url('stock:movement-list'),
            'expiring': url('stock:expiring'),
        },
        'purchases': url('purchases:purchase-list'),
        'sales': url('sales:sale-list'),
        'expenses': url('expenses:expense-list'),
        'activity_logs': url('core:activity-log-list'),
    })


api_v1_patterns = [
    path('', api_root, name='api-root'),
    path('auth/token/', TokenObtainPairView.as_view(), name='token-obtain'),
    path('auth/token/refresh/', TokenRefreshView.as_view(), name='token-refresh'),
    path('catalog/', include('catalog.urls', namespace='catalog')),
    path('stock/', include('stock.urls', namespace='stock')),
    path('purchases/', include('purchases.urls', namespace='purchases')),
    path('sales/', include('sales.urls', namespace='sales')),
    path('expenses/', include('expenses.urls', namespace='expenses')),
    path('', include('core.urls', namespace='core')),
]

urlpatterns = [
    path('admin/', admin.site.urls),

    # DRF session auth (powers the "Log in" button on the browsable API)
    path('api/auth/', include('rest_framework.urls', namespace='rest_framework')),

    # Versioned API
    path('api/v1/', include((api_v1_patterns, 'api-v1'))),
]
