"""
URL configuration for the clinic backend.
"""

from django.contrib import admin
from django.urls import include, path

from apps.core.views import health_check

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include("apps.core.urls")),
    path("health/", health_check, name="health"),
    # Prometheus metrics endpoint
    path("", include("django_prometheus.urls")),
]
