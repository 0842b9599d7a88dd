"""Concurrent reservations of one vehicle: at most one may succeed."""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

import pytest
from django.db import connection, connections
from django.test import TransactionTestCase

from apps.bookings.application.command_handlers import PaymentProof, ReservationCommitter, ReserveVehicleCommand
from apps.bookings.domain.errors import VehicleUnavailable
from apps.bookings.infrastructure.django_repositories import DjangoBookingLedger, DjangoVehicleCatalog
from apps.bookings.infrastructure.memory import CatalogVehicle, InMemoryBookingLedger, InMemoryVehicleCatalog
from apps.bookings.models import Booking
from apps.users.models import User
from apps.vehicles.models import Vehicle

START = datetime(2025, 3, 1, 9, tzinfo=dt_timezone.utc)


def command(vehicle_id, requester_id, offset_hours: int, payment_id: str) -> ReserveVehicleCommand:
    return ReserveVehicleCommand(
        vehicle_id=vehicle_id,
        requester_id=requester_id,
        pickup_date=START + timedelta(hours=offset_hours),
        drop_off_date=START + timedelta(days=2, hours=offset_hours),
        total_price=Decimal("5000"),
        payment=PaymentProof(payment_id=payment_id, order_id="order", verified=True),
    )


def run_concurrently(committer: ReservationCommitter, commands, after_each=None):
    barrier = threading.Barrier(len(commands))
    outcomes = []
    lock = threading.Lock()

    def worker(cmd):
        try:
            barrier.wait()
            try:
                result = committer.reserve(cmd)
                outcome = ("ok", result.reservation.id)
            except VehicleUnavailable:
                outcome = ("unavailable", None)
            with lock:
                outcomes.append(outcome)
        finally:
            if after_each:
                after_each()

    threads = [threading.Thread(target=worker, args=(cmd,)) for cmd in commands]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)
    return outcomes


@pytest.mark.parametrize("contenders", [2, 8, 32])
def test_in_memory_at_most_one_overlapping_reservation_wins(contenders):
    catalog = InMemoryVehicleCatalog([CatalogVehicle(id="v1", model="Thar", price=Decimal("4000"))])
    ledger = InMemoryBookingLedger()
    committer = ReservationCommitter(catalog, ledger)
    commands = [command("v1", requester, requester % 5, f"pay_{requester}") for requester in range(contenders)]

    outcomes = run_concurrently(committer, commands)

    assert len(outcomes) == contenders
    assert sum(1 for kind, _ in outcomes if kind == "ok") == 1
    assert len(ledger.find_overlapping(START, START + timedelta(days=3), vehicle_id="v1")) == 1


def test_in_memory_different_vehicles_do_not_contend():
    vehicles = [CatalogVehicle(id=f"v{i}", model="Thar") for i in range(6)]
    committer = ReservationCommitter(InMemoryVehicleCatalog(vehicles), InMemoryBookingLedger())
    commands = [command(vehicle.id, 1, 0, f"pay_{vehicle.id}") for vehicle in vehicles]

    outcomes = run_concurrently(committer, commands)

    assert all(kind == "ok" for kind, _ in outcomes)


class DjangoLedgerRaceTests(TransactionTestCase):
    """
    Threads with their own connections race through the Django ledger.

    PostgreSQL serializes them on the vehicle row lock, SQLite on the
    write lock taken by the revision bump in an IMMEDIATE transaction.
    """

    def setUp(self) -> None:
        if connection.vendor == "sqlite" and connection.is_in_memory_db():
            self.skipTest("threads need a file-backed SQLite database")
        self.vehicle = Vehicle.objects.create(
            registration_number="KA01RACE01",
            model="Thar",
            price=Decimal("4000.00"),
            district="Bengaluru",
            location="Indiranagar",
        )
        self.users = [
            User.objects.create_user(email=f"racer{i}@example.com", phone=f"+9190000000{i:02d}", password="x" * 10)
            for i in range(8)
        ]

    def test_at_most_one_reservation_commits(self) -> None:
        committer = ReservationCommitter(DjangoVehicleCatalog(), DjangoBookingLedger())
        commands = [
            command(self.vehicle.pk, user.pk, index % 3, f"pay_race_{index}")
            for index, user in enumerate(self.users)
        ]

        outcomes = run_concurrently(committer, commands, after_each=connections.close_all)

        self.assertEqual(sum(1 for kind, _ in outcomes if kind == "ok"), 1)
        self.assertEqual(Booking.objects.filter(vehicle=self.vehicle).count(), 1)

    def test_revision_counter_moves_only_for_the_committed_reservation(self) -> None:
        committer = ReservationCommitter(DjangoVehicleCatalog(), DjangoBookingLedger())
        commands = [
            command(self.vehicle.pk, user.pk, 0, f"pay_rev_{index}")
            for index, user in enumerate(self.users[:4])
        ]

        outcomes = run_concurrently(committer, commands, after_each=connections.close_all)

        self.assertEqual([kind for kind, _ in outcomes].count("ok"), 1)
        self.assertEqual([kind for kind, _ in outcomes].count("unavailable"), 3)
        self.vehicle.refresh_from_db()
        if connection.features.has_select_for_update:
            self.assertEqual(self.vehicle.booking_revision, 0)
        else:
            self.assertEqual(self.vehicle.booking_revision, 1)
