"""
Django ORM implementations of the catalog and ledger ports.

Reservation writes serialize per vehicle. The transaction first locks
the vehicle row: ``SELECT ... FOR UPDATE`` where the backend supports
it, otherwise a bump of ``Vehicle.booking_revision``, which takes the
database write lock (SQLite). The overlap re-check and the insert run
under that lock.
"""

from functools import wraps
from typing import Any, Iterable, List, Optional
import logging

from django.core.exceptions import ValidationError
from django.db import DEFAULT_DB_ALIAS, IntegrityError, InterfaceError, OperationalError, connections
from django.db.models import F

from shared.application.uow import DjangoUnitOfWork

from apps.bookings.application.ports import BookingLedger, VehicleCatalog
from apps.bookings.domain.entities import BookingStatus, Reservation
from apps.bookings.domain.errors import (
    BookingNotFound,
    DuplicatePaymentReference,
    ReservationConflict,
    StorageUnavailable,
    VehicleNotFound,
)
from apps.bookings.models import Booking
from apps.vehicles.models import Vehicle

logger = logging.getLogger(__name__)


def storage_errors(method):
    """Translate lost or locked database connections into StorageUnavailable."""

    @wraps(method)
    def wrapper(*args, **kwargs):
        try:
            return method(*args, **kwargs)
        except (OperationalError, InterfaceError) as exc:
            logger.error("Booking storage failure in %s: %s", method.__name__, exc)
            raise StorageUnavailable() from exc

    return wrapper


class DjangoVehicleCatalog(VehicleCatalog):
    def __init__(self, using: Optional[str] = None):
        self.using = using or DEFAULT_DB_ALIAS

    def _vehicles(self):
        return Vehicle.objects.using(self.using)

    @storage_errors
    def find_bookable(self, model: Optional[str] = None, exclude_ids: Iterable[Any] = ()) -> List[Vehicle]:
        qs = self._vehicles().bookable().with_model(model)
        exclude_ids = list(exclude_ids)
        if exclude_ids:
            qs = qs.exclude(pk__in=exclude_ids)
        return list(qs)

    @storage_errors
    def get_by_id(self, vehicle_id: Any) -> Vehicle:
        try:
            return self._vehicles().get(pk=vehicle_id)
        except (Vehicle.DoesNotExist, ValueError, TypeError):
            raise VehicleNotFound() from None


class DjangoBookingLedger(BookingLedger):
    def __init__(self, using: Optional[str] = None):
        self.using = using or DEFAULT_DB_ALIAS

    def _bookings(self):
        return Booking.objects.using(self.using)

    @storage_errors
    def find_overlapping(self, start, end, vehicle_id: Any = None) -> List[Reservation]:
        qs = self._bookings().overlapping(start, end)
        if vehicle_id is not None:
            qs = qs.filter(vehicle_id=vehicle_id)
        return [row.to_entity() for row in qs]

    @storage_errors
    def insert_if_no_conflict(self, reservation: Reservation) -> Reservation:
        try:
            with DjangoUnitOfWork(using=self.using) as uow:
                self._lock_vehicle(reservation.vehicle_id)
                conflict = (
                    self._bookings()
                    .blocking()
                    .overlapping(reservation.period.start, reservation.period.end)
                    .filter(vehicle_id=reservation.vehicle_id)
                    .first()
                )
                if conflict is not None:
                    logger.info(
                        "Booking %s blocks vehicle %s for %s",
                        conflict.pk, reservation.vehicle_id, reservation.period,
                    )
                    raise ReservationConflict()
                row = self._bookings().create(**Booking.fields_from_entity(reservation))
                uow.collect_events(reservation)
        except IntegrityError as exc:
            if not self._bookings().filter(payment_id=reservation.payment.payment_id).exists():
                raise
            logger.info("Payment %s already recorded: %s", reservation.payment.payment_id, exc)
            raise DuplicatePaymentReference() from exc
        return row.to_entity()

    def _lock_vehicle(self, vehicle_id: Any) -> None:
        vehicles = Vehicle.objects.using(self.using).filter(pk=vehicle_id)
        if connections[self.using].features.has_select_for_update:
            locked = list(vehicles.select_for_update().values_list("pk", flat=True))
        else:
            locked = vehicles.update(booking_revision=F("booking_revision") + 1)
        if not locked:
            raise VehicleNotFound()

    @storage_errors
    def update_status(self, booking_id: Any, new_status: BookingStatus) -> Reservation:
        with DjangoUnitOfWork(using=self.using) as uow:
            row = self._get_row(booking_id, for_update=True)
            reservation = row.to_entity()
            if reservation.change_status(new_status):
                row.status = reservation.status.value
                row.save(update_fields=["status", "updated_at"])
                uow.collect_events(reservation)
        return row.to_entity()

    @storage_errors
    def get_by_payment_reference(self, payment_id: str) -> Optional[Reservation]:
        row = self._bookings().filter(payment_id=payment_id).first()
        return row.to_entity() if row else None

    def _get_row(self, booking_id: Any, for_update: bool = False) -> Booking:
        qs = self._bookings()
        if for_update:
            qs = qs.select_for_update()
        try:
            return qs.get(pk=booking_id)
        except (Booking.DoesNotExist, ValidationError, ValueError, TypeError):
            raise BookingNotFound() from None
