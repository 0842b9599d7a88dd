"""Wiring of the booking use cases to the Django-backed storage."""

from __future__ import annotations

from django.conf import settings  # type: ignore

from .application.availability import AvailabilityEngine
from .application.command_handlers import ChangeBookingStatusHandler, ReservationCommitter
from .infrastructure.django_repositories import DjangoBookingLedger, DjangoVehicleCatalog


def availability_engine() -> AvailabilityEngine:
    return AvailabilityEngine(catalog=DjangoVehicleCatalog(), ledger=DjangoBookingLedger())


def reservation_committer() -> ReservationCommitter:
    return ReservationCommitter(
        catalog=DjangoVehicleCatalog(),
        ledger=DjangoBookingLedger(),
        currency=settings.RENTARIDE_CURRENCY,
    )


def status_handler() -> ChangeBookingStatusHandler:
    return ChangeBookingStatusHandler(ledger=DjangoBookingLedger())
