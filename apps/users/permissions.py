"""Role based permission classes shared by the catalog and booking APIs."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


def is_admin(user) -> bool:
    return bool(user and user.is_authenticated and user.is_admin())


def is_vendor(user) -> bool:
    return bool(user and user.is_authenticated and user.is_vendor())


class IsAdmin(permissions.BasePermission):
    """Platform administrators only."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        return is_admin(request.user)


class IsVendor(permissions.BasePermission):
    def has_permission(self, request, view) -> bool:  # type: ignore
        return is_vendor(request.user)


class IsAdminOrVendor(permissions.BasePermission):
    """Write access to the catalog: admins, or vendors for their own vehicles."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        return is_admin(request.user) or is_vendor(request.user)

    def has_object_permission(self, request, view, obj) -> bool:  # type: ignore
        if is_admin(request.user):
            return True
        return is_vendor(request.user) and obj.added_by_id == request.user.id
