"""
In-memory catalog and ledger

For single-process deployments and tests. Writes for one vehicle go
through that vehicle's lock, so the overlap re-check and the insert are
atomic with respect to each other, while different vehicles proceed in
parallel. Stored reservations are copies; callers never share state
with the ledger.
"""

from collections import defaultdict
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional
import threading

from shared.application.uow import ImmediateUnitOfWork

from apps.bookings.application.ports import BookingLedger, VehicleCatalog
from apps.bookings.domain.entities import BookingStatus, Reservation
from apps.bookings.domain.errors import (
    BookingNotFound,
    DuplicatePaymentReference,
    ReservationConflict,
    VehicleNotFound,
)


@dataclass(frozen=True)
class CatalogVehicle:
    id: Any
    model: str
    price: Decimal = Decimal('0')
    is_deleted: bool = False
    is_admin_approved: bool = True
    is_rejected: bool = False

    @property
    def is_bookable(self) -> bool:
        return not self.is_deleted and self.is_admin_approved and not self.is_rejected


class InMemoryVehicleCatalog(VehicleCatalog):
    def __init__(self, vehicles: Iterable[CatalogVehicle] = ()):
        self._vehicles: Dict[Any, CatalogVehicle] = {}
        for vehicle in vehicles:
            self.add(vehicle)

    def add(self, vehicle: CatalogVehicle) -> CatalogVehicle:
        self._vehicles[vehicle.id] = vehicle
        return vehicle

    def find_bookable(self, model: Optional[str] = None, exclude_ids: Iterable[Any] = ()) -> List[CatalogVehicle]:
        excluded = set(exclude_ids)
        wanted = model.strip().lower() if model else None
        return [
            vehicle
            for vehicle in list(self._vehicles.values())
            if vehicle.is_bookable
            and vehicle.id not in excluded
            and (wanted is None or vehicle.model.strip().lower() == wanted)
        ]

    def get_by_id(self, vehicle_id: Any) -> CatalogVehicle:
        try:
            return self._vehicles[vehicle_id]
        except KeyError:
            raise VehicleNotFound() from None


class InMemoryBookingLedger(BookingLedger):
    def __init__(self):
        self._bookings: Dict[Any, Reservation] = {}
        self._by_payment: Dict[str, Any] = {}
        self._registry_lock = threading.Lock()
        self._vehicle_locks: Dict[Any, threading.Lock] = defaultdict(threading.Lock)

    def _lock_for(self, vehicle_id: Any) -> threading.Lock:
        with self._registry_lock:
            return self._vehicle_locks[vehicle_id]

    def _snapshot(self) -> List[Reservation]:
        with self._registry_lock:
            return list(self._bookings.values())

    def find_overlapping(self, start, end, vehicle_id: Any = None) -> List[Reservation]:
        return [
            replace(booking)
            for booking in self._snapshot()
            if booking.period.start < end
            and booking.period.end > start
            and (vehicle_id is None or booking.vehicle_id == vehicle_id)
        ]

    def insert_if_no_conflict(self, reservation: Reservation) -> Reservation:
        with self._lock_for(reservation.vehicle_id):
            with ImmediateUnitOfWork() as uow:
                for booking in self._snapshot():
                    if booking.conflicts_with(reservation):
                        raise ReservationConflict()
                stored = replace(reservation)
                with self._registry_lock:
                    if stored.payment.payment_id in self._by_payment:
                        raise DuplicatePaymentReference()
                    self._bookings[stored.id] = stored
                    self._by_payment[stored.payment.payment_id] = stored.id
                uow.collect_events(reservation)
        return replace(stored)

    def update_status(self, booking_id: Any, new_status: BookingStatus) -> Reservation:
        current = self._get(booking_id)
        with self._lock_for(current.vehicle_id):
            with ImmediateUnitOfWork() as uow:
                stored = self._get(booking_id)
                if stored.change_status(new_status):
                    uow.collect_events(stored)
                return replace(stored)

    def get_by_payment_reference(self, payment_id: str) -> Optional[Reservation]:
        with self._registry_lock:
            booking_id = self._by_payment.get(payment_id)
        return replace(self._get(booking_id)) if booking_id is not None else None

    def _get(self, booking_id: Any) -> Reservation:
        with self._registry_lock:
            try:
                return self._bookings[booking_id]
            except KeyError:
                raise BookingNotFound() from None
