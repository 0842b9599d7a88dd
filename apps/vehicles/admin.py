"""Admin registration for the vehicle catalog."""

from __future__ import annotations

from django.contrib import admin

from .models import Vehicle


@admin.register(Vehicle)
class VehicleAdmin(admin.ModelAdmin):
    list_display = (
        "registration_number",
        "company",
        "model",
        "district",
        "price",
        "added_by",
        "is_admin_approved",
        "is_rejected",
        "is_deleted",
        "created_at",
    )
    list_filter = ("is_admin_approved", "is_rejected", "is_deleted", "is_vendor_vehicle", "fuel_type", "district")
    search_fields = ("registration_number", "model", "company", "added_by__email")
    readonly_fields = ("booking_revision", "created_at", "updated_at")
    actions = ("approve_selected", "reject_selected")

    @admin.action(description="Approve selected vehicles")
    def approve_selected(self, request, queryset):
        queryset.update(is_admin_approved=True, is_rejected=False)

    @admin.action(description="Reject selected vehicles")
    def reject_selected(self, request, queryset):
        queryset.update(is_admin_approved=False, is_rejected=True)
