"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging
from datetime import timedelta

from celery import shared_task  # type: ignore
from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from .application.command_handlers import ChangeBookingStatusCommand
from .domain.entities import BookingStatus
from .domain.errors import BookingError
from .models import Booking
from .services import status_handler

logger = logging.getLogger(__name__)


def _sweep(booking_ids, new_status: BookingStatus) -> int:
    """Apply ``new_status`` through the regular transition rules; returns how many moved."""
    handler = status_handler()
    moved = 0
    for booking_id in booking_ids:
        try:
            handler.handle(ChangeBookingStatusCommand(booking_id=booking_id, new_status=new_status))
        except BookingError as exc:
            # the booking changed since it was selected
            logger.warning("Skipping booking %s in %s sweep: %s", booking_id, new_status.value, exc)
            continue
        moved += 1
    return moved


# ============================================================================
# PERIODIC TASKS (scheduled by Celery Beat, see config/celery.py)
# ============================================================================

@shared_task(name="bookings.mark_overdue_trips")
def mark_overdue_trips() -> dict[str, int]:
    """
    Trips still running past drop-off plus the grace period become OVER_DUE.

    Returns:
        dict: {"overdue": number of bookings moved}
    """
    grace = timedelta(minutes=settings.RENTARIDE_OVERDUE_GRACE_MINUTES)
    cutoff = timezone.now() - grace
    booking_ids = list(
        Booking.objects.filter(
            status=BookingStatus.ON_TRIP.value,
            drop_off_date__lt=cutoff,
        ).values_list("id", flat=True)
    )
    moved = _sweep(booking_ids, BookingStatus.OVER_DUE)
    if moved:
        logger.info("Marked %d trips overdue", moved)
    return {"overdue": moved}


@shared_task(name="bookings.mark_not_picked")
def mark_not_picked() -> dict[str, int]:
    """
    Bookings whose drop-off passed without the trip starting become NOT_PICKED.

    Returns:
        dict: {"not_picked": number of bookings moved}
    """
    booking_ids = list(
        Booking.objects.filter(
            status=BookingStatus.BOOKED.value,
            drop_off_date__lt=timezone.now(),
        ).values_list("id", flat=True)
    )
    moved = _sweep(booking_ids, BookingStatus.NOT_PICKED)
    if moved:
        logger.info("Marked %d bookings as not picked", moved)
    return {"not_picked": moved}
