"""
API URL routing for folio_backend.
All API endpoints are prefixed with /api/v1/
"""
from django.urls import path, include

from .views import health_check

urlpatterns = [
    # Health check (no auth) - GET /api/v1/health/
    path('health/', health_check),
    # Admin password gate
    path('auth/', include('accounts.urls')),
    # Admin console: badge counts and mark-as-read
    path('admin/', include('notifications.urls')),
    # Admin console: tab and drill-down state
    path('admin/dashboard/', include('dashboard.urls')),
    # Admin console: content editors and uploads
    path('admin/', include('content.admin_urls')),
    # Public site: content reads and visitor submissions
    path('', include('content.urls')),
]
