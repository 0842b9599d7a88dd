"""Django ORM catalog and ledger."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal
from unittest import mock

from django.db import IntegrityError, OperationalError
from django.test import TestCase

from apps.bookings.application.availability import AvailabilityEngine
from apps.bookings.domain.entities import BookingStatus, PaymentReference, Reservation
from apps.bookings.domain.errors import (
    BookingNotFound,
    DuplicatePaymentReference,
    ReservationConflict,
    StorageUnavailable,
    VehicleNotFound,
)
from apps.bookings.domain.events import BookingReserved, BookingStatusChanged
from apps.bookings.infrastructure.django_repositories import DjangoBookingLedger, DjangoVehicleCatalog
from apps.bookings.models import Booking
from apps.users.models import User
from apps.vehicles.models import Vehicle
from shared.application.message_bus import message_bus
from shared.domain.value_objects import Money, TimeRange

UTC = dt_timezone.utc


def jan(day: int) -> datetime:
    return datetime(2025, 1, day, 10, tzinfo=UTC)


class DjangoLedgerTests(TestCase):
    def setUp(self) -> None:
        self.user = User.objects.create_user(email="renter@example.com", phone="+919600000001", password="Pass12345")
        self.vehicle = Vehicle.objects.create(
            registration_number="MH12AB0001",
            model="XUV700",
            price=Decimal("3500.00"),
            district="Pune",
            location="Baner",
        )
        self.other = Vehicle.objects.create(
            registration_number="MH12AB0002",
            model="Nexon",
            price=Decimal("2200.00"),
            district="Pune",
            location="Wakad",
        )
        self.ledger = DjangoBookingLedger()
        self.catalog = DjangoVehicleCatalog()

    def reservation(self, start=1, end=5, vehicle=None, payment_id="pay_1") -> Reservation:
        return Reservation.reserve(
            vehicle_id=(vehicle or self.vehicle).pk,
            requester_id=self.user.pk,
            period=TimeRange(start=jan(start), end=jan(end)),
            total_price=Money(Decimal("14000")),
            payment=PaymentReference(payment_id=payment_id, order_id="order_1"),
        )

    def test_insert_persists_and_bumps_revision(self) -> None:
        stored = self.ledger.insert_if_no_conflict(self.reservation())

        row = Booking.objects.get(pk=stored.id)
        self.assertEqual(row.status, BookingStatus.BOOKED.value)
        self.assertEqual(row.pickup_date, jan(1))
        self.vehicle.refresh_from_db()
        self.assertEqual(self.vehicle.booking_revision, 1)

    def test_overlapping_insert_conflicts(self) -> None:
        self.ledger.insert_if_no_conflict(self.reservation(1, 5))

        with self.assertRaises(ReservationConflict):
            self.ledger.insert_if_no_conflict(self.reservation(4, 6, payment_id="pay_2"))
        self.assertEqual(Booking.objects.count(), 1)

    def test_touching_and_other_vehicle_do_not_conflict(self) -> None:
        self.ledger.insert_if_no_conflict(self.reservation(1, 5))
        self.ledger.insert_if_no_conflict(self.reservation(5, 7, payment_id="pay_2"))
        self.ledger.insert_if_no_conflict(self.reservation(1, 5, vehicle=self.other, payment_id="pay_3"))

        self.assertEqual(Booking.objects.count(), 3)

    def test_canceled_booking_is_not_a_conflict(self) -> None:
        stored = self.ledger.insert_if_no_conflict(self.reservation(1, 5))
        self.ledger.update_status(stored.id, BookingStatus.CANCELED)

        self.ledger.insert_if_no_conflict(self.reservation(2, 4, payment_id="pay_2"))

        self.assertEqual(Booking.objects.blocking().count(), 1)

    def test_duplicate_payment_id(self) -> None:
        self.ledger.insert_if_no_conflict(self.reservation(1, 5))

        with self.assertRaises(DuplicatePaymentReference):
            self.ledger.insert_if_no_conflict(self.reservation(1, 5, vehicle=self.other))

    def test_other_integrity_errors_propagate(self) -> None:
        with mock.patch(
            "django.db.models.query.QuerySet.create",
            side_effect=IntegrityError("FOREIGN KEY constraint failed"),
        ):
            with self.assertRaises(IntegrityError):
                self.ledger.insert_if_no_conflict(self.reservation())

        self.assertFalse(Booking.objects.exists())

    def test_unknown_vehicle(self) -> None:
        reservation = self.reservation()
        reservation.vehicle_id = 987654

        with self.assertRaises(VehicleNotFound):
            self.ledger.insert_if_no_conflict(reservation)
        with self.assertRaises(VehicleNotFound):
            self.catalog.get_by_id(987654)

    def test_find_overlapping_returns_all_statuses(self) -> None:
        stored = self.ledger.insert_if_no_conflict(self.reservation(1, 5))
        self.ledger.update_status(stored.id, BookingStatus.CANCELED)

        found = self.ledger.find_overlapping(jan(4), jan(8))

        self.assertEqual([booking.status for booking in found], [BookingStatus.CANCELED])
        self.assertEqual(self.ledger.find_overlapping(jan(5), jan(8)), [])

    def test_get_by_payment_reference(self) -> None:
        stored = self.ledger.insert_if_no_conflict(self.reservation(payment_id="pay_lookup"))

        self.assertEqual(self.ledger.get_by_payment_reference("pay_lookup").id, stored.id)
        self.assertIsNone(self.ledger.get_by_payment_reference("pay_missing"))

    def test_update_status_unknown_booking(self) -> None:
        with self.assertRaises(BookingNotFound):
            self.ledger.update_status("not-a-uuid", BookingStatus.CANCELED)

    def test_events_published_after_commit(self) -> None:
        received = []
        message_bus.register_event_handler(BookingReserved, received.append)
        message_bus.register_event_handler(BookingStatusChanged, received.append)
        self.addCleanup(message_bus._event_handlers[BookingReserved].remove, received.append)
        self.addCleanup(message_bus._event_handlers[BookingStatusChanged].remove, received.append)

        with self.captureOnCommitCallbacks(execute=False) as callbacks:
            stored = self.ledger.insert_if_no_conflict(self.reservation())
        self.assertEqual(received, [])

        for callback in callbacks:
            callback()
        with self.captureOnCommitCallbacks(execute=True):
            self.ledger.update_status(stored.id, BookingStatus.ON_TRIP)

        self.assertEqual([type(event) for event in received], [BookingReserved, BookingStatusChanged])

    def test_conflict_publishes_nothing(self) -> None:
        self.ledger.insert_if_no_conflict(self.reservation(1, 5))

        with self.captureOnCommitCallbacks() as callbacks:
            with self.assertRaises(ReservationConflict):
                self.ledger.insert_if_no_conflict(self.reservation(2, 3, payment_id="pay_2"))

        self.assertEqual(callbacks, [])

    def test_database_errors_become_storage_unavailable(self) -> None:
        with mock.patch.object(Booking.objects, "using", side_effect=OperationalError("database is locked")):
            with self.assertRaises(StorageUnavailable):
                self.ledger.find_overlapping(jan(1), jan(2))

    def test_engine_over_django_storage(self) -> None:
        self.ledger.insert_if_no_conflict(self.reservation(1, 5))
        self.other.is_deleted = True
        self.other.save()
        spare = Vehicle.objects.create(
            registration_number="MH12AB0003",
            model="xuv700",
            price=Decimal("3400.00"),
            district="Pune",
            location="Hadapsar",
        )

        engine = AvailabilityEngine(self.catalog, self.ledger)

        self.assertEqual([v.pk for v in engine.query_available(jan(2), jan(3))], [spare.pk])
        self.assertEqual(
            sorted(v.pk for v in engine.query_available(jan(5), jan(6), model="XUV700")),
            sorted([self.vehicle.pk, spare.pk]),
        )
        self.assertEqual(engine.query_available(jan(2), jan(3), model="Nexon"), [])
