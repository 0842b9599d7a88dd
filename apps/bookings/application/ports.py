"""
Storage ports

The availability engine and the reservation committer only talk to
these two interfaces. ``apps.bookings.infrastructure`` provides a Django
ORM implementation and an in-memory one.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Iterable, List, Optional

from apps.bookings.domain.entities import BookingStatus, Reservation


class VehicleCatalog(ABC):
    """
    Read-only view of the vehicle catalog

    Returned vehicles expose at least ``id``, ``model``, ``price`` and
    ``is_bookable``.
    """

    @abstractmethod
    def find_bookable(self, model: Optional[str] = None, exclude_ids: Iterable[Any] = ()) -> List[Any]:
        """Bookable vehicles, optionally with a case-insensitive exact model match."""

    @abstractmethod
    def get_by_id(self, vehicle_id: Any) -> Any:
        """Raises VehicleNotFound."""


class BookingLedger(ABC):
    """Store of reservations; the single shared mutable resource."""

    @abstractmethod
    def find_overlapping(self, start: datetime, end: datetime, vehicle_id: Any = None) -> List[Reservation]:
        """Reservations with ``pickup < end and drop_off > start``, any status."""

    @abstractmethod
    def insert_if_no_conflict(self, reservation: Reservation) -> Reservation:
        """
        Durably record ``reservation`` unless a blocking reservation of the
        same vehicle overlaps it. Check and write are atomic per vehicle.

        Raises: ReservationConflict, DuplicatePaymentReference, StorageUnavailable
        """

    @abstractmethod
    def update_status(self, booking_id: Any, new_status: BookingStatus) -> Reservation:
        """Raises: BookingNotFound, InvalidStatusTransition"""

    @abstractmethod
    def get_by_payment_reference(self, payment_id: str) -> Optional[Reservation]:
        ...
