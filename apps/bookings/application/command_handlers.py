"""
Booking Command Handlers

Use cases of the booking domain:
- ReserveVehicleCommand: commit a paid reservation (ReservationCommitter)
- ChangeBookingStatusCommand: administrative or sweep-driven transition
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any
import logging

from shared.domain.value_objects import Money

from apps.bookings.application.ports import BookingLedger, VehicleCatalog
from apps.bookings.domain.entities import BookingStatus, PaymentReference, Reservation
from apps.bookings.domain.errors import (
    DuplicatePaymentReference,
    PaymentNotVerified,
    PaymentReferenceConflict,
    ReservationConflict,
    VehicleNotBookable,
    VehicleUnavailable,
)
from apps.bookings.domain.intervals import parse_interval

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass(frozen=True)
class PaymentProof:
    """
    Outcome of the upstream payment check

    ``verified`` is decided by the caller (signature check); the
    committer only refuses unverified proofs.
    """
    payment_id: str
    order_id: str = ''
    verified: bool = False

    def as_reference(self) -> PaymentReference:
        return PaymentReference(payment_id=self.payment_id, order_id=self.order_id)


@dataclass(frozen=True)
class ReserveVehicleCommand:
    vehicle_id: Any
    requester_id: Any
    pickup_date: Any
    drop_off_date: Any
    total_price: Decimal
    payment: PaymentProof
    pickup_location: str = ''
    drop_off_location: str = ''


@dataclass(frozen=True)
class ChangeBookingStatusCommand:
    booking_id: Any
    new_status: BookingStatus


@dataclass(frozen=True)
class ReservationResult:
    reservation: Reservation
    created: bool


# ===== Command Handlers =====

class ReservationCommitter:
    """
    Handler for ReserveVehicle command

    Of any set of concurrent reservations for one vehicle with
    overlapping intervals at most one succeeds:
    1. validate interval and payment proof
    2. replay of an already committed payment returns that reservation
    3. vehicle must exist and be bookable
    4. ledger re-checks conflicts and inserts under a per-vehicle lock
    """

    def __init__(self, catalog: VehicleCatalog, ledger: BookingLedger, currency: str = 'INR'):
        self.catalog = catalog
        self.ledger = ledger
        self.currency = currency

    def reserve(self, command: ReserveVehicleCommand) -> ReservationResult:
        """
        Raises:
            InvalidInterval, PaymentNotVerified, VehicleNotFound,
            VehicleNotBookable, VehicleUnavailable, PaymentReferenceConflict,
            StorageUnavailable
        """
        period = parse_interval(command.pickup_date, command.drop_off_date)

        if not command.payment.verified or not command.payment.payment_id:
            logger.warning(
                "Refusing reservation of vehicle %s: payment %s not verified",
                command.vehicle_id, command.payment.payment_id,
            )
            raise PaymentNotVerified()

        try:
            total_price = Money(command.total_price, self.currency)
        except ValueError as exc:
            raise PaymentNotVerified(f"Invalid total price: {exc}") from exc

        candidate = Reservation.reserve(
            vehicle_id=command.vehicle_id,
            requester_id=command.requester_id,
            period=period,
            total_price=total_price,
            payment=command.payment.as_reference(),
            pickup_location=command.pickup_location,
            drop_off_location=command.drop_off_location,
        )

        replay = self._replayed(candidate)
        if replay is not None:
            return replay

        vehicle = self.catalog.get_by_id(command.vehicle_id)
        if not vehicle.is_bookable:
            raise VehicleNotBookable()

        try:
            reservation = self.ledger.insert_if_no_conflict(candidate)
        except ReservationConflict:
            # a concurrent replay of the same payment loses the lock race but
            # still finds the committed reservation
            replay = self._replayed(candidate)
            if replay is not None:
                return replay
            logger.info(
                "Vehicle %s unavailable for %s (requester %s)",
                command.vehicle_id, period, command.requester_id,
            )
            raise VehicleUnavailable()
        except DuplicatePaymentReference:
            replay = self._replayed(candidate)
            if replay is not None:
                return replay
            raise PaymentReferenceConflict()

        logger.info(
            "Reserved vehicle %s for %s as booking %s (payment %s)",
            command.vehicle_id, period, reservation.id, command.payment.payment_id,
        )
        return ReservationResult(reservation=reservation, created=True)

    def _replayed(self, candidate: Reservation) -> ReservationResult | None:
        """
        Committed reservation behind ``candidate``'s payment id, if any

        Raises PaymentReferenceConflict when that payment backs a different
        reservation.
        """
        existing = self.ledger.get_by_payment_reference(candidate.payment.payment_id)
        if existing is None:
            return None
        if not existing.is_same_request(candidate):
            logger.warning(
                "Payment %s already backs booking %s", candidate.payment.payment_id, existing.id,
            )
            raise PaymentReferenceConflict()
        logger.info("Replayed reservation request for booking %s", existing.id)
        return ReservationResult(reservation=existing, created=False)


class ChangeBookingStatusHandler:
    """Handler for ChangeBookingStatus command (admin endpoint, cancel, sweeps)."""

    def __init__(self, ledger: BookingLedger):
        self.ledger = ledger

    def handle(self, command: ChangeBookingStatusCommand) -> Reservation:
        """Raises: BookingNotFound, InvalidStatusTransition, StorageUnavailable"""
        reservation = self.ledger.update_status(command.booking_id, command.new_status)
        logger.info("Booking %s is now %s", reservation.id, reservation.status.value)
        return reservation
