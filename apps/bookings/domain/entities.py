"""
Booking Domain Entities

- BookingStatus: the single status enumeration and its blocking rule
- PaymentReference: payment id + order id backing a reservation
- Reservation: aggregate for one vehicle over one half-open interval
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from shared.domain.base import Aggregate, ValueObject, utcnow
from shared.domain.value_objects import Money, TimeRange

from apps.bookings.domain.errors import InvalidStatusTransition


class BookingStatus(str, Enum):
    """
    Reservation lifecycle

    State transitions:
    - BOOKED -> ON_TRIP -> TRIP_COMPLETED
    - BOOKED -> NOT_PICKED (drop-off passed, vehicle never collected)
    - BOOKED | ON_TRIP -> OVER_DUE
    - OVER_DUE -> TRIP_COMPLETED (late return)
    - any -> CANCELED
    """
    NOT_BOOKED = 'notBooked'
    BOOKED = 'booked'
    ON_TRIP = 'onTrip'
    NOT_PICKED = 'notPicked'
    CANCELED = 'canceled'
    OVER_DUE = 'overDue'
    TRIP_COMPLETED = 'tripCompleted'

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    BookingStatus.NOT_BOOKED: 'Not booked',
    BookingStatus.BOOKED: 'Booked',
    BookingStatus.ON_TRIP: 'On trip',
    BookingStatus.NOT_PICKED: 'Not picked',
    BookingStatus.CANCELED: 'Canceled',
    BookingStatus.OVER_DUE: 'Overdue',
    BookingStatus.TRIP_COMPLETED: 'Trip completed',
}

NON_BLOCKING_STATUSES = frozenset({
    BookingStatus.TRIP_COMPLETED,
    BookingStatus.CANCELED,
    BookingStatus.NOT_BOOKED,
})


def is_blocking(status: 'BookingStatus | str') -> bool:
    """Does a booking in ``status`` keep its vehicle unavailable for its interval?"""
    return BookingStatus(status) not in NON_BLOCKING_STATUSES


BLOCKING_STATUSES = tuple(status for status in BookingStatus if is_blocking(status))

ALLOWED_TRANSITIONS = {
    BookingStatus.BOOKED: frozenset({
        BookingStatus.ON_TRIP,
        BookingStatus.NOT_PICKED,
        BookingStatus.OVER_DUE,
        BookingStatus.CANCELED,
    }),
    BookingStatus.ON_TRIP: frozenset({
        BookingStatus.TRIP_COMPLETED,
        BookingStatus.OVER_DUE,
        BookingStatus.CANCELED,
    }),
    BookingStatus.OVER_DUE: frozenset({BookingStatus.TRIP_COMPLETED, BookingStatus.CANCELED}),
    BookingStatus.NOT_PICKED: frozenset({BookingStatus.CANCELED}),
    BookingStatus.NOT_BOOKED: frozenset({BookingStatus.CANCELED}),
    BookingStatus.TRIP_COMPLETED: frozenset({BookingStatus.CANCELED}),
    BookingStatus.CANCELED: frozenset(),
}


def can_transition(current: BookingStatus, new: BookingStatus) -> bool:
    return new in ALLOWED_TRANSITIONS[current]


@dataclass(frozen=True)
class PaymentReference(ValueObject):
    """Captured payment; ``payment_id`` is unique across all reservations."""
    payment_id: str
    order_id: str = ''

    def __post_init__(self):
        if not self.payment_id:
            raise ValueError("Payment id is required")


@dataclass(kw_only=True, eq=False)
class Reservation(Aggregate):
    """
    Reservation Aggregate Root

    A requester's hold on one vehicle over ``period``. Key invariants:
    - ``period`` is a non-empty half-open interval
    - status only moves along ``ALLOWED_TRANSITIONS``
    - no transition leads from a non-blocking status to a blocking one,
      so status changes never introduce an overlap
    """
    vehicle_id: Any
    requester_id: Any
    period: TimeRange
    total_price: Money
    payment: PaymentReference
    pickup_location: str = ''
    drop_off_location: str = ''
    status: BookingStatus = BookingStatus.BOOKED
    updated_at: datetime = field(default_factory=utcnow)

    @classmethod
    def reserve(cls, *, vehicle_id, requester_id, period: TimeRange, total_price: Money,
                payment: PaymentReference, pickup_location: str = '',
                drop_off_location: str = '') -> 'Reservation':
        """New reservation in BOOKED status. Events: BookingReserved"""
        from apps.bookings.domain.events import BookingReserved

        reservation = cls(
            vehicle_id=vehicle_id,
            requester_id=requester_id,
            period=period,
            total_price=total_price,
            payment=payment,
            pickup_location=pickup_location,
            drop_off_location=drop_off_location,
        )
        reservation.add_event(BookingReserved(
            aggregate_id=reservation.id,
            booking_id=reservation.id,
            vehicle_id=vehicle_id,
            requester_id=requester_id,
            pickup_date=period.start,
            drop_off_date=period.end,
            total_price=str(total_price),
            payment_id=payment.payment_id,
        ))
        return reservation

    def change_status(self, new_status: BookingStatus | str) -> bool:
        """
        Move to ``new_status``

        Returns False when nothing changed (cancelling a canceled booking).
        Events: BookingStatusChanged
        Raises: InvalidStatusTransition
        """
        try:
            new_status = BookingStatus(new_status)
        except ValueError:
            raise InvalidStatusTransition(f"Unknown booking status: {new_status}") from None

        if self.status == BookingStatus.CANCELED and new_status == BookingStatus.CANCELED:
            return False
        if not can_transition(self.status, new_status):
            raise InvalidStatusTransition(
                f"Cannot move booking from {self.status.value} to {new_status.value}"
            )

        from apps.bookings.domain.events import BookingStatusChanged

        old_status = self.status
        self.status = new_status
        self.updated_at = utcnow()
        self.add_event(BookingStatusChanged(
            aggregate_id=self.id,
            booking_id=self.id,
            vehicle_id=self.vehicle_id,
            old_status=old_status,
            new_status=new_status,
        ))
        return True

    def cancel(self) -> bool:
        return self.change_status(BookingStatus.CANCELED)

    @property
    def blocks_vehicle(self) -> bool:
        return is_blocking(self.status)

    def conflicts_with(self, other: 'Reservation') -> bool:
        """Two blocking reservations of the same vehicle with overlapping periods."""
        return (
            self.vehicle_id == other.vehicle_id
            and self.blocks_vehicle
            and other.blocks_vehicle
            and self.period.overlaps_with(other.period)
        )

    def is_same_request(self, other: 'Reservation') -> bool:
        """Would ``other`` be a replay of the request that created this reservation?"""
        return (
            self.vehicle_id == other.vehicle_id
            and self.requester_id == other.requester_id
            and self.period == other.period
        )

    def __str__(self):
        return f"Reservation {self.id} of vehicle {self.vehicle_id} {self.period} ({self.status.value})"
