"""Vehicle catalog API views."""

from __future__ import annotations

import logging

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.permissions import IsAdmin, IsAdminOrVendor, IsVendor, is_admin, is_vendor

from .filters import VehicleFilterSet
from .models import Vehicle
from .serializers import VehicleSerializer, VehicleWriteSerializer

logger = logging.getLogger(__name__)


class VehicleViewSet(viewsets.ModelViewSet):
    """Catalog management.

    - renters and anonymous visitors see bookable vehicles only
    - vendors list vehicles (pending approval) and edit their own
    - admins list approved vehicles, moderate vendor submissions and see everything
    """

    queryset = Vehicle.objects.select_related("added_by").all()
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = VehicleFilterSet
    ordering_fields = ["price", "created_at", "year_made", "seats"]

    def get_permissions(self):  # type: ignore
        if self.action in {"list", "retrieve"}:
            return [permissions.AllowAny()]
        if self.action in {"pending", "approve", "reject", "model_names"}:
            return [IsAdmin()]
        if self.action == "mine":
            return [IsVendor()]
        return [IsAdminOrVendor()]

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        user = self.request.user
        if is_admin(user):
            return qs
        if self.action in {"update", "partial_update", "destroy"} and is_vendor(user):
            return qs.not_deleted().filter(added_by=user)
        return qs.bookable()

    def get_serializer_class(self):  # type: ignore
        if self.action in {"create", "update", "partial_update"}:
            return VehicleWriteSerializer
        return VehicleSerializer

    def perform_create(self, serializer):  # type: ignore
        user = self.request.user
        if is_admin(user):
            vehicle = serializer.save(is_vendor_vehicle=False, is_admin_approved=True, is_rejected=False)
        else:
            vehicle = serializer.save(
                added_by=user,
                is_vendor_vehicle=True,
                is_admin_approved=False,
                is_rejected=False,
            )
        logger.info("Vehicle %s listed by %s (%s)", vehicle.pk, user.pk, vehicle.approval_status)

    def perform_update(self, serializer):  # type: ignore
        if is_admin(self.request.user):
            serializer.save()
            return
        vehicle = serializer.instance
        vehicle.reset_approval()
        serializer.save(is_admin_approved=vehicle.is_admin_approved, is_rejected=vehicle.is_rejected)
        logger.info("Vendor edit sent vehicle %s back to approval", vehicle.pk)

    def perform_destroy(self, instance: Vehicle):  # type: ignore
        instance.soft_delete()
        logger.info("Vehicle %s soft-deleted by %s", instance.pk, self.request.user.pk)

    @action(detail=False, methods=["get"])
    def pending(self, request):  # type: ignore
        vehicles = Vehicle.objects.pending_approval().select_related("added_by")
        return Response(VehicleSerializer(vehicles, many=True).data)

    @action(detail=False, methods=["get"])
    def mine(self, request):  # type: ignore
        vehicles = Vehicle.objects.not_deleted().filter(added_by=request.user)
        return Response(VehicleSerializer(vehicles, many=True).data)

    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):  # type: ignore
        vehicle: Vehicle = self.get_object()  # type: ignore
        if vehicle.is_deleted:
            return Response({"detail": "Deleted vehicles cannot be approved."}, status=status.HTTP_400_BAD_REQUEST)
        vehicle.approve()
        logger.info("Vehicle %s approved by %s", vehicle.pk, request.user.pk)
        return Response(VehicleSerializer(vehicle).data)

    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):  # type: ignore
        vehicle: Vehicle = self.get_object()  # type: ignore
        vehicle.reject()
        logger.info("Vehicle %s rejected by %s", vehicle.pk, request.user.pk)
        return Response(VehicleSerializer(vehicle).data)

    @action(detail=False, methods=["get"], url_path="models")
    def model_names(self, request):  # type: ignore
        """Distinct company/model pairs in the catalog, optionally for one ``company``."""
        vehicles = Vehicle.objects.not_deleted()
        company = request.query_params.get("company", "").strip()
        if company:
            vehicles = vehicles.filter(company__iexact=company)
        pairs = vehicles.order_by("company", "model").values("company", "model").distinct()
        return Response(list(pairs))
