"""Message bus handlers for booking events.

Handlers run after the ledger transaction committed; they only record
what happened.
"""

from __future__ import annotations

import logging

from shared.application.message_bus import MessageBus

from .domain.events import BookingReserved, BookingStatusChanged

logger = logging.getLogger(__name__)


def log_booking_reserved(event: BookingReserved) -> None:
    logger.info(
        "Booking %s reserved vehicle %s from %s to %s",
        event.booking_id,
        event.vehicle_id,
        event.pickup_date.isoformat(),
        event.drop_off_date.isoformat(),
        extra={"domain_event": event.to_dict()},
    )


def log_booking_status_changed(event: BookingStatusChanged) -> None:
    logger.info(
        "Booking %s moved from %s to %s",
        event.booking_id,
        event.old_status.value,
        event.new_status.value,
        extra={"domain_event": event.to_dict()},
    )


def register_handlers(bus: MessageBus) -> None:
    bus.register_event_handler(BookingReserved, log_booking_reserved)
    bus.register_event_handler(BookingStatusChanged, log_booking_status_changed)
