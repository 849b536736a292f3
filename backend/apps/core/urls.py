"""
API URL configuration.
Includes all app routes.
"""

from django.urls import include, path

urlpatterns = [
    path("catalog/", include("apps.catalog.urls")),
    path("service-orders/", include("apps.service_orders.urls")),
    path("results/", include("apps.results.urls")),
    path("", include("apps.billing.urls")),
]
