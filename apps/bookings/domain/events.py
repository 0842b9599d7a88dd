"""
Booking Domain Events

Published through the message bus after the ledger transaction commits.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from shared.domain.base import DomainEvent

from apps.bookings.domain.entities import BookingStatus


@dataclass(kw_only=True)
class BookingReserved(DomainEvent):
    """
    Event: a vehicle was reserved (status BOOKED)

    Triggers:
    - audit log entry
    """
    booking_id: UUID
    vehicle_id: Any
    requester_id: Any
    pickup_date: datetime
    drop_off_date: datetime
    total_price: str
    payment_id: str


@dataclass(kw_only=True)
class BookingStatusChanged(DomainEvent):
    """
    Event: a reservation moved to another status

    Raised by admin transitions, requester cancellations and the
    overdue / not-picked sweeps.
    """
    booking_id: UUID
    vehicle_id: Any
    old_status: BookingStatus
    new_status: BookingStatus
