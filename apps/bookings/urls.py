"""URL routing for availability search and bookings."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import AvailableVehiclesView, BookingViewSet

router = DefaultRouter()
router.register(r"", BookingViewSet, basename="booking")

urlpatterns = [
    path("available-vehicles/", AvailableVehiclesView.as_view(), name="available-vehicles"),
    path("", include(router.urls)),
]
