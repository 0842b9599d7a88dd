"""Serializers for the vehicle catalog."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Vehicle


class VehicleSerializer(serializers.ModelSerializer):
    """Read representation shared by the catalog and availability search."""

    added_by_id = serializers.ReadOnlyField(source="added_by.id")
    approval_status = serializers.ReadOnlyField()

    class Meta:
        model = Vehicle
        fields = [
            "id",
            "registration_number",
            "title",
            "description",
            "company",
            "name",
            "model",
            "year_made",
            "fuel_type",
            "seats",
            "transmission",
            "car_type",
            "price",
            "images",
            "district",
            "location",
            "added_by_id",
            "is_vendor_vehicle",
            "is_admin_approved",
            "is_rejected",
            "is_deleted",
            "approval_status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class VehicleWriteSerializer(serializers.ModelSerializer):
    """Create/update payload; lifecycle flags are set by the view, never by clients."""

    images = serializers.ListField(
        child=serializers.URLField(),
        required=False,
        allow_empty=True,
    )

    class Meta:
        model = Vehicle
        fields = [
            "registration_number",
            "title",
            "description",
            "company",
            "name",
            "model",
            "year_made",
            "fuel_type",
            "seats",
            "transmission",
            "car_type",
            "price",
            "images",
            "district",
            "location",
        ]

    def validate_model(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Model name is required.")
        return value

    def to_representation(self, instance):  # type: ignore
        return VehicleSerializer(instance, context=self.context).data
