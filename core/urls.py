"""
Core — URL Configuration

@file core/urls.py
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import AuditLogViewSet

app_name = 'core'

router = SimpleRouter()
router.register('activity-logs', AuditLogViewSet, basename='activity-log')

urlpatterns = [
    path('', include(router.urls)),
]
