"""Vehicle catalog models for RentARide.

Vehicles are listed by administrators (approved immediately) or by
vendors (held for approval). Records are never physically deleted: the
``is_deleted`` flag hides them from the marketplace while keeping the
booking history intact.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class VehicleQuerySet(models.QuerySet):
    def not_deleted(self):
        return self.filter(is_deleted=False)

    def bookable(self):
        """Vehicles that may be offered to renters."""
        return self.filter(is_deleted=False, is_admin_approved=True, is_rejected=False)

    def pending_approval(self):
        return self.filter(
            is_vendor_vehicle=True,
            is_admin_approved=False,
            is_rejected=False,
            is_deleted=False,
        )

    def with_model(self, model_name: str | None):
        """Case-insensitive exact match on the model name; ``None`` keeps all."""
        if not model_name:
            return self
        return self.filter(model__iexact=model_name.strip())


class Vehicle(models.Model):
    """Rentable vehicle listed on the marketplace."""

    class FuelType(models.TextChoices):
        PETROL = "petrol", _("Petrol")
        DIESEL = "diesel", _("Diesel")
        ELECTRIC = "electric", _("Electric")
        HYBRID = "hybrid", _("Hybrid")

    class Transmission(models.TextChoices):
        MANUAL = "manual", _("Manual")
        AUTOMATIC = "automatic", _("Automatic")

    registration_number = models.CharField(max_length=32, unique=True)
    title = models.CharField(max_length=255, blank=True)
    description = models.TextField(blank=True)
    company = models.CharField(max_length=100, blank=True)
    name = models.CharField(max_length=100, blank=True)
    model = models.CharField(max_length=100, db_index=True)
    year_made = models.PositiveSmallIntegerField(null=True, blank=True)
    fuel_type = models.CharField(max_length=20, choices=FuelType.choices, blank=True)
    seats = models.PositiveSmallIntegerField(null=True, blank=True)
    transmission = models.CharField(max_length=20, choices=Transmission.choices, blank=True)
    car_type = models.CharField(max_length=50, blank=True)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text=_("Rental price per day."),
    )
    images = models.JSONField(default=list, blank=True)
    district = models.CharField(max_length=100)
    location = models.CharField(max_length=255)
    added_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="vehicles",
        help_text=_("Vendor who listed the vehicle."),
    )

    is_deleted = models.BooleanField(default=False)
    is_vendor_vehicle = models.BooleanField(default=False)
    is_admin_approved = models.BooleanField(default=True)
    is_rejected = models.BooleanField(default=False)

    # Bumped inside the reservation transaction; the write serializes
    # concurrent reservations on backends without SELECT ... FOR UPDATE.
    booking_revision = models.PositiveBigIntegerField(default=0, editable=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = VehicleQuerySet.as_manager()

    class Meta:
        verbose_name = _("Vehicle")
        verbose_name_plural = _("Vehicles")
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["is_deleted", "is_admin_approved", "is_rejected"],
                name="vehicle_bookable_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.company} {self.model} ({self.registration_number})".strip()

    @property
    def is_bookable(self) -> bool:
        return not self.is_deleted and self.is_admin_approved and not self.is_rejected

    @property
    def approval_status(self) -> str:
        if self.is_rejected:
            return "rejected"
        if self.is_admin_approved:
            return "approved"
        return "pending"

    def approve(self) -> None:
        self.is_admin_approved = True
        self.is_rejected = False
        self.save(update_fields=["is_admin_approved", "is_rejected", "updated_at"])

    def reject(self) -> None:
        self.is_admin_approved = False
        self.is_rejected = True
        self.save(update_fields=["is_admin_approved", "is_rejected", "updated_at"])

    def soft_delete(self) -> None:
        self.is_deleted = True
        self.save(update_fields=["is_deleted", "updated_at"])

    def reset_approval(self) -> None:
        """A vendor edit sends the listing back to the approval queue."""
        self.is_admin_approved = False
        self.is_rejected = False
