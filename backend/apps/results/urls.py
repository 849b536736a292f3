"""
Result URL configuration.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import ResultDetailViewSet, ResultViewSet

router = DefaultRouter()
router.register("details", ResultDetailViewSet, basename="result-measurement")
router.register("", ResultViewSet, basename="result")

urlpatterns = [
    path("", include(router.urls)),
]
