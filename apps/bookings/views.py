"""API views for availability search and the booking ledger."""

from __future__ import annotations

import logging

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.users.permissions import IsAdmin, is_admin, is_vendor
from apps.vehicles.serializers import VehicleSerializer

from . import services
from .application.availability import one_per_model, sort_by_price
from .application.command_handlers import ChangeBookingStatusCommand, PaymentProof, ReserveVehicleCommand
from .domain.entities import BookingStatus
from .domain.errors import (
    BookingError,
    BookingNotFound,
    InvalidInterval,
    InvalidStatusTransition,
    PaymentNotVerified,
    PaymentReferenceConflict,
    StorageUnavailable,
    VehicleNotBookable,
    VehicleNotFound,
    VehicleUnavailable,
)
from .models import Booking
from .payments import verify_payment_signature
from .serializers import (
    AvailabilityQuerySerializer,
    BookingCreateSerializer,
    BookingSerializer,
    BookingStatusSerializer,
)

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    InvalidInterval: status.HTTP_400_BAD_REQUEST,
    PaymentNotVerified: status.HTTP_400_BAD_REQUEST,
    InvalidStatusTransition: status.HTTP_400_BAD_REQUEST,
    VehicleNotFound: status.HTTP_404_NOT_FOUND,
    BookingNotFound: status.HTTP_404_NOT_FOUND,
    VehicleNotBookable: status.HTTP_409_CONFLICT,
    VehicleUnavailable: status.HTTP_409_CONFLICT,
    PaymentReferenceConflict: status.HTTP_409_CONFLICT,
    StorageUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def booking_error_response(exc: BookingError) -> Response:
    http_status = next(
        (code for error_type, code in ERROR_STATUS.items() if isinstance(exc, error_type)),
        status.HTTP_400_BAD_REQUEST,
    )
    return Response({"detail": exc.message, "code": exc.code}, status=http_status)


class AvailableVehiclesView(APIView):
    """Vehicles with no blocking booking in ``[pickup_date, drop_off_date)``, cheapest first."""

    permission_classes = [permissions.AllowAny]

    def get(self, request):  # type: ignore
        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data
        try:
            vehicles = services.availability_engine().query_available(
                params["pickup_date"],
                params["drop_off_date"],
                model=params["model"] or None,
            )
        except BookingError as exc:
            return booking_error_response(exc)

        vehicles = sort_by_price(vehicles)
        if params["one_per_model"]:
            vehicles = one_per_model(vehicles)
        return Response(VehicleSerializer(vehicles, many=True).data)


class BookingViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Reservation, role scoped listing, cancellation and admin status changes."""

    queryset = Booking.objects.select_related("vehicle", "requester").all()
    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if is_admin(user):
            return qs
        if is_vendor(user):
            return qs.for_vehicle_owner(user)
        return qs.filter(requester=user)

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        if self.action == "change_status":
            return BookingStatusSerializer
        return BookingSerializer

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        verified = verify_payment_signature(data["order_id"], data["payment_id"], data["signature"])
        command = ReserveVehicleCommand(
            vehicle_id=data["vehicle"],
            requester_id=request.user.pk,
            pickup_date=data["pickup_date"],
            drop_off_date=data["drop_off_date"],
            total_price=data["total_price"],
            payment=PaymentProof(payment_id=data["payment_id"], order_id=data["order_id"], verified=verified),
            pickup_location=data["pickup_location"],
            drop_off_location=data["drop_off_location"],
        )
        try:
            result = services.reservation_committer().reserve(command)
        except BookingError as exc:
            return booking_error_response(exc)

        booking = Booking.objects.select_related("vehicle", "requester").get(pk=result.reservation.id)
        http_status = status.HTTP_201_CREATED if result.created else status.HTTP_200_OK
        return Response(BookingSerializer(booking).data, status=http_status)

    @action(detail=False, methods=["get"])
    def latest(self, request):  # type: ignore
        booking = (
            Booking.objects.select_related("vehicle", "requester")
            .filter(requester=request.user)
            .order_by("-created_at")
            .first()
        )
        if booking is None:
            return booking_error_response(BookingNotFound("You have no bookings yet."))
        return Response(BookingSerializer(booking).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        if booking.requester_id != request.user.pk and not is_admin(request.user):
            return Response(
                {"detail": "Only the requester can cancel this booking.", "code": "permission_denied"},
                status=status.HTTP_403_FORBIDDEN,
            )
        return self._transition(booking, BookingStatus.CANCELED)

    @action(detail=True, methods=["post"], url_path="status", permission_classes=[IsAdmin])
    def change_status(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return self._transition(booking, BookingStatus(serializer.validated_data["status"]))

    def _transition(self, booking: Booking, new_status: BookingStatus) -> Response:
        try:
            services.status_handler().handle(
                ChangeBookingStatusCommand(booking_id=booking.pk, new_status=new_status)
            )
        except BookingError as exc:
            return booking_error_response(exc)
        booking.refresh_from_db()
        logger.info("Booking %s set to %s by %s", booking.pk, booking.status, self.request.user.pk)
        return Response(BookingSerializer(booking).data)
