"""Serializers for authentication flows (register, login)."""

from __future__ import annotations

import logging
from typing import Any

from django.contrib.auth import get_user_model  # type: ignore
from django.db import transaction  # type: ignore
from rest_framework import serializers  # type: ignore

from .models import PHONE_VALIDATOR

logger = logging.getLogger(__name__)

User = get_user_model()

LOGIN_ATTEMPTS_THRESHOLD = 5


class RegisterSerializer(serializers.Serializer):
    """Self-service sign up for renters and vendors.

    Administrators are never created through the public API.
    """

    email = serializers.EmailField()
    phone = serializers.CharField(validators=[PHONE_VALIDATOR])
    password = serializers.CharField(min_length=8, write_only=True)
    password_confirm = serializers.CharField(min_length=8, write_only=True)
    role = serializers.ChoiceField(
        choices=[User.RoleChoices.USER, User.RoleChoices.VENDOR],
        default=User.RoleChoices.USER,
    )
    first_name = serializers.CharField(required=False, allow_blank=True)
    last_name = serializers.CharField(required=False, allow_blank=True)
    username = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:  # type: ignore
        if attrs.get("password") != attrs.get("password_confirm"):
            raise serializers.ValidationError({"password_confirm": "Passwords do not match."})
        if User.objects.filter(email__iexact=attrs["email"]).exists():
            raise serializers.ValidationError({"email": "A user with this email already exists."})
        phone = User.objects.normalize_phone(attrs["phone"])
        if User.objects.filter(phone=phone).exists():
            raise serializers.ValidationError({"phone": "A user with this phone already exists."})
        return attrs

    @transaction.atomic
    def create(self, validated_data: dict[str, Any]):  # type: ignore
        password = validated_data.pop("password")
        validated_data.pop("password_confirm", None)
        user = User.objects.create_user(password=password, **validated_data)
        logger.info("Registered %s account %s", user.role, user.pk)
        return user


class LoginSerializer(serializers.Serializer):
    login = serializers.CharField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:  # type: ignore
        login = attrs.get("login", "")
        password = attrs.get("password", "")

        try:
            if "@" in login:
                user = User.objects.get(email__iexact=login)
            else:
                user = User.objects.get(phone=User.objects.normalize_phone(login))
        except User.DoesNotExist:
            raise serializers.ValidationError({"login": "Invalid login or password."})

        if user.is_locked:
            raise serializers.ValidationError(
                {"non_field_errors": ["Account is temporarily locked. Try again later."]}
            )

        if not user.check_password(password):
            user.register_failed_attempt(threshold=LOGIN_ATTEMPTS_THRESHOLD)
            if user.is_locked:
                logger.warning("Account %s locked after repeated failed logins", user.pk)
            raise serializers.ValidationError({"login": "Invalid login or password."})

        if not user.is_active:
            raise serializers.ValidationError({"non_field_errors": ["Account is disabled."]})

        user.unlock()
        attrs["user"] = user
        return attrs
