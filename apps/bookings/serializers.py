"""Serializers for the booking domain."""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers  # type: ignore

from .domain.entities import BookingStatus
from .models import Booking


class AvailabilityQuerySerializer(serializers.Serializer):
    """Query string of the available-vehicles search; dates are parsed by the engine."""

    pickup_date = serializers.CharField(required=False, allow_blank=True, default="")
    drop_off_date = serializers.CharField(required=False, allow_blank=True, default="")
    model = serializers.CharField(required=False, allow_blank=True, default="")
    one_per_model = serializers.BooleanField(required=False, default=False)


class BookingCreateSerializer(serializers.Serializer):
    """Reservation request sent after the checkout returned a payment."""

    vehicle = serializers.IntegerField(min_value=1)
    pickup_date = serializers.CharField()
    drop_off_date = serializers.CharField()
    pickup_location = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    drop_off_location = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    total_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.00"))
    payment_id = serializers.CharField(max_length=100)
    order_id = serializers.CharField(max_length=100)
    signature = serializers.CharField(max_length=256, write_only=True)


class BookingStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[(status.value, status.label) for status in BookingStatus])


class BookingSerializer(serializers.ModelSerializer):
    """Read representation of a ledger entry."""

    vehicle_id = serializers.ReadOnlyField(source="vehicle.id")
    vehicle_model = serializers.ReadOnlyField(source="vehicle.model")
    vehicle_registration_number = serializers.ReadOnlyField(source="vehicle.registration_number")
    requester_id = serializers.ReadOnlyField(source="requester.id")
    is_blocking = serializers.ReadOnlyField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "vehicle_id",
            "vehicle_model",
            "vehicle_registration_number",
            "requester_id",
            "pickup_date",
            "drop_off_date",
            "pickup_location",
            "drop_off_location",
            "total_price",
            "currency",
            "payment_id",
            "order_id",
            "status",
            "is_blocking",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
