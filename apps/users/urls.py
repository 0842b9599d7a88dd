"""Administrator routes for the users app."""

from __future__ import annotations

from django.urls import path, include  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import RenterAdminViewSet, VendorAdminViewSet

router = DefaultRouter()
router.register(r'users', RenterAdminViewSet, basename='admin-user')
router.register(r'vendors', VendorAdminViewSet, basename='admin-vendor')

urlpatterns = [
    path('', include(router.urls)),
]
