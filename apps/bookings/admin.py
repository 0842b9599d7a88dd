"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .domain.entities import BLOCKING_STATUSES, NON_BLOCKING_STATUSES
from .models import Booking


class BlockingFilter(admin.SimpleListFilter):
    title = "blocks vehicle"
    parameter_name = "blocking"

    def lookups(self, request, model_admin):
        return (("yes", "Yes"), ("no", "No"))

    def queryset(self, request, queryset):
        if self.value() == "yes":
            return queryset.filter(status__in=[status.value for status in BLOCKING_STATUSES])
        if self.value() == "no":
            return queryset.filter(status__in=[status.value for status in NON_BLOCKING_STATUSES])
        return queryset


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "vehicle",
        "requester",
        "status",
        "pickup_date",
        "drop_off_date",
        "total_price",
        "payment_id",
        "created_at",
    )
    list_filter = ("status", BlockingFilter, "pickup_date")
    search_fields = ("payment_id", "order_id", "vehicle__registration_number", "requester__email")
    readonly_fields = (
        "id",
        "vehicle",
        "requester",
        "pickup_date",
        "drop_off_date",
        "total_price",
        "currency",
        "payment_id",
        "order_id",
        "status",
        "created_at",
        "updated_at",
    )
