"""Booking ledger models for RentARide."""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import Money, TimeRange

from .domain.entities import BLOCKING_STATUSES, BookingStatus, PaymentReference, Reservation, is_blocking

STATUS_CHOICES = [(status.value, status.label) for status in BookingStatus]


class BookingQuerySet(models.QuerySet):
    def overlapping(self, start, end):
        """Half-open overlap with ``[start, end)``: touching bounds do not overlap."""
        return self.filter(pickup_date__lt=end, drop_off_date__gt=start)

    def blocking(self):
        return self.filter(status__in=[status.value for status in BLOCKING_STATUSES])

    def for_vehicle_owner(self, user):
        return self.filter(vehicle__added_by=user)


class Booking(models.Model):
    """Reservation of one vehicle over ``[pickup_date, drop_off_date)``."""

    Status = BookingStatus

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    vehicle = models.ForeignKey(
        "vehicles.Vehicle",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    requester = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    pickup_date = models.DateTimeField()
    drop_off_date = models.DateTimeField()
    pickup_location = models.CharField(max_length=255, blank=True)
    drop_off_location = models.CharField(max_length=255, blank=True)
    total_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=3, default="INR")
    payment_id = models.CharField(
        max_length=100,
        unique=True,
        help_text=_("Gateway payment id; doubles as the idempotency key of the reservation."),
    )
    order_id = models.CharField(max_length=100, blank=True)
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=BookingStatus.BOOKED.value,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BookingQuerySet.as_manager()

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(drop_off_date__gt=models.F("pickup_date")),
                name="booking_valid_interval",
            ),
        ]
        indexes = [
            models.Index(fields=["vehicle", "pickup_date", "drop_off_date"], name="booking_vehicle_period_idx"),
            models.Index(fields=["status"], name="booking_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking {self.pk} of vehicle {self.vehicle_id} ({self.status})"

    @property
    def is_blocking(self) -> bool:
        return is_blocking(self.status)

    def to_entity(self) -> Reservation:
        return Reservation(
            id=self.pk,
            created_at=self.created_at,
            updated_at=self.updated_at,
            vehicle_id=self.vehicle_id,
            requester_id=self.requester_id,
            period=TimeRange(start=self.pickup_date, end=self.drop_off_date),
            total_price=Money(self.total_price, self.currency),
            payment=PaymentReference(payment_id=self.payment_id, order_id=self.order_id),
            pickup_location=self.pickup_location,
            drop_off_location=self.drop_off_location,
            status=BookingStatus(self.status),
        )

    @classmethod
    def fields_from_entity(cls, reservation: Reservation) -> dict:
        return {
            "id": reservation.id,
            "vehicle_id": reservation.vehicle_id,
            "requester_id": reservation.requester_id,
            "pickup_date": reservation.period.start,
            "drop_off_date": reservation.period.end,
            "pickup_location": reservation.pickup_location,
            "drop_off_location": reservation.drop_off_location,
            "total_price": reservation.total_price.amount,
            "currency": reservation.total_price.currency,
            "payment_id": reservation.payment.payment_id,
            "order_id": reservation.payment.order_id,
            "status": reservation.status.value,
        }
