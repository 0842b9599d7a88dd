"""Serializers for user-related API responses."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import serializers  # type: ignore

from .models import PHONE_VALIDATOR

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "username",
            "first_name",
            "last_name",
            "phone",
            "role",
            "created_at",
        ]
        read_only_fields = fields


class VendorUpdateSerializer(serializers.ModelSerializer):
    """Contact details an administrator may correct on a vendor account."""

    phone = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)

    class Meta:
        model = User
        fields = ["username", "email", "phone"]

    def validate_phone(self, value: str | None) -> str | None:
        if not value:
            return None
        phone = User.objects.normalize_phone(value)
        PHONE_VALIDATOR(phone)
        taken = User.objects.filter(phone=phone).exclude(pk=getattr(self.instance, "pk", None))
        if taken.exists():
            raise serializers.ValidationError("A user with this phone already exists.")
        return phone

    def to_representation(self, instance):  # type: ignore
        return UserSerializer(instance, context=self.context).data
