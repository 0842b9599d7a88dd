"""Integration tests for availability and booking endpoints."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal
from unittest import mock

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.domain.errors import StorageUnavailable
from apps.bookings.models import Booking
from apps.bookings.payments import expected_signature
from apps.users.models import User
from apps.vehicles.models import Vehicle

UTC = dt_timezone.utc


def jan(day: int) -> str:
    return datetime(2026, 1, day, 10, tzinfo=UTC).isoformat()


class BookingAPITestMixin:
    def setUp(self) -> None:
        self.renter = User.objects.create_user(
            email="renter@example.com", phone="+919500000001", password="RenterPass123"
        )
        self.other_renter = User.objects.create_user(
            email="other@example.com", phone="+919500000002", password="OtherPass123"
        )
        self.vendor = User.objects.create_user(
            email="vendor@example.com",
            phone="+919500000003",
            password="VendorPass123",
            role=User.RoleChoices.VENDOR,
        )
        self.admin = User.objects.create_user(
            email="admin@example.com",
            phone="+919500000004",
            password="AdminPass123",
            role=User.RoleChoices.ADMIN,
        )
        self.vehicle = Vehicle.objects.create(
            registration_number="TN09AA0001",
            company="Toyota",
            model="Innova",
            price=Decimal("3000.00"),
            district="Chennai",
            location="Adyar",
            added_by=self.vendor,
            is_vendor_vehicle=True,
        )
        self.cheap = Vehicle.objects.create(
            registration_number="TN09AA0002",
            company="Maruti",
            model="Swift",
            price=Decimal("1500.00"),
            district="Chennai",
            location="Velachery",
        )
        self.list_url = reverse("booking-list")

    def _payload(self, start: int = 1, end: int = 5, vehicle=None, payment_id: str = "pay_001", **overrides):
        order_id = overrides.pop("order_id", "order_001")
        payload = {
            "vehicle": (vehicle or self.vehicle).pk,
            "pickup_date": jan(start),
            "drop_off_date": jan(end),
            "pickup_location": "Chennai Airport",
            "drop_off_location": "Chennai Central",
            "total_price": "12000.00",
            "payment_id": payment_id,
            "order_id": order_id,
            "signature": expected_signature(order_id, payment_id),
        }
        payload.update(overrides)
        return payload

    def _reserve(self, user=None, **kwargs):
        self.client.force_authenticate(user or self.renter)
        return self.client.post(self.list_url, self._payload(**kwargs), format="json")


class AvailabilityAPITests(BookingAPITestMixin, APITestCase):
    def setUp(self) -> None:
        super().setUp()
        self.url = reverse("available-vehicles")

    def test_lists_free_vehicles_sorted_by_price(self) -> None:
        response = self.client.get(self.url, {"pickup_date": jan(1), "drop_off_date": jan(3)})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual([item["id"] for item in response.data], [self.cheap.pk, self.vehicle.pk])

    def test_booked_vehicle_is_excluded_for_overlap_only(self) -> None:
        self.assertEqual(self._reserve(start=1, end=5).status_code, status.HTTP_201_CREATED)
        self.client.force_authenticate(None)

        overlapping = self.client.get(self.url, {"pickup_date": jan(3), "drop_off_date": jan(6)})
        touching = self.client.get(self.url, {"pickup_date": jan(5), "drop_off_date": jan(8)})

        self.assertEqual([item["id"] for item in overlapping.data], [self.cheap.pk])
        self.assertIn(self.vehicle.pk, [item["id"] for item in touching.data])

    def test_model_filter(self) -> None:
        response = self.client.get(
            self.url, {"pickup_date": jan(1), "drop_off_date": jan(3), "model": "innova"}
        )

        self.assertEqual([item["id"] for item in response.data], [self.vehicle.pk])

    def test_one_per_model(self) -> None:
        Vehicle.objects.create(
            registration_number="TN09AA0003",
            model="Swift",
            price=Decimal("1800.00"),
            district="Chennai",
            location="Tambaram",
        )

        response = self.client.get(
            self.url, {"pickup_date": jan(1), "drop_off_date": jan(3), "one_per_model": "true"}
        )

        self.assertEqual([item["id"] for item in response.data], [self.cheap.pk, self.vehicle.pk])

    def test_invalid_interval(self) -> None:
        response = self.client.get(self.url, {"pickup_date": jan(5), "drop_off_date": jan(1)})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "invalid_interval")

    def test_dates_outside_storable_range(self) -> None:
        for pickup, drop_off in [("0001-01-01", "0001-01-05"), ("9999-12-30", "9999-12-31T23:00:00-05:00")]:
            response = self.client.get(self.url, {"pickup_date": pickup, "drop_off_date": drop_off})

            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, pickup)
            self.assertEqual(response.data["code"], "invalid_interval")

    def test_missing_dates(self) -> None:
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "invalid_interval")

    def test_storage_failure_maps_to_503(self) -> None:
        with mock.patch(
            "apps.bookings.application.availability.AvailabilityEngine.query_available",
            side_effect=StorageUnavailable(),
        ):
            response = self.client.get(self.url, {"pickup_date": jan(1), "drop_off_date": jan(3)})

        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(response.data["code"], "storage_unavailable")


class ReservationAPITests(BookingAPITestMixin, APITestCase):
    def test_renter_can_reserve(self) -> None:
        response = self._reserve()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        booking = Booking.objects.get()
        self.assertEqual(booking.requester, self.renter)
        self.assertEqual(booking.vehicle, self.vehicle)
        self.assertEqual(booking.status, "booked")
        self.assertEqual(response.data["status"], "booked")
        self.assertNotIn("signature", response.data)

    def test_anonymous_cannot_reserve(self) -> None:
        response = self.client.post(self.list_url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_overlap_is_rejected(self) -> None:
        self._reserve(start=1, end=5)

        response = self._reserve(user=self.other_renter, start=2, end=4, payment_id="pay_002")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["code"], "vehicle_unavailable")
        self.assertEqual(Booking.objects.count(), 1)

    def test_back_to_back_bookings_are_allowed(self) -> None:
        self._reserve(start=1, end=5)

        response = self._reserve(user=self.other_renter, start=5, end=8, payment_id="pay_002")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)

    def test_bad_signature(self) -> None:
        response = self._reserve(signature="0" * 64)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "payment_not_verified")
        self.assertFalse(Booking.objects.exists())

    def test_non_ascii_signature(self) -> None:
        response = self._reserve(signature="\u00e9" * 64)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "payment_not_verified")
        self.assertFalse(Booking.objects.exists())

    def test_unknown_vehicle(self) -> None:
        response = self._reserve(vehicle=Vehicle(pk=99999))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["code"], "vehicle_not_found")

    def test_unapproved_vehicle(self) -> None:
        self.vehicle.reset_approval()
        self.vehicle.save()

        response = self._reserve()

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "vehicle_not_bookable")

    def test_invalid_interval(self) -> None:
        response = self._reserve(start=5, end=5)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "invalid_interval")

    def test_pickup_outside_storable_range(self) -> None:
        response = self._reserve(pickup_date="0001-01-01", drop_off_date="0001-01-05")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "invalid_interval")
        self.assertFalse(Booking.objects.exists())

    def test_replay_returns_existing_booking(self) -> None:
        first = self._reserve()
        replay = self._reserve()

        self.assertEqual(replay.status_code, status.HTTP_200_OK, replay.data)
        self.assertEqual(replay.data["id"], first.data["id"])
        self.assertEqual(Booking.objects.count(), 1)

    def test_payment_reused_for_other_booking(self) -> None:
        self._reserve()

        response = self._reserve(vehicle=self.cheap)

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "payment_reference_conflict")

    def test_negative_price_is_rejected_by_validation(self) -> None:
        response = self._reserve(total_price="-1.00")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("total_price", response.data)


class BookingManagementAPITests(BookingAPITestMixin, APITestCase):
    def setUp(self) -> None:
        super().setUp()
        self.booking_id = self._reserve().data["id"]
        self.cheap_booking_id = self._reserve(
            user=self.other_renter, vehicle=self.cheap, payment_id="pay_cheap"
        ).data["id"]

    def test_list_is_role_scoped(self) -> None:
        self.client.force_authenticate(self.renter)
        renter_ids = [item["id"] for item in self.client.get(self.list_url).data]

        self.client.force_authenticate(self.vendor)
        vendor_ids = [item["id"] for item in self.client.get(self.list_url).data]

        self.client.force_authenticate(self.admin)
        admin_ids = [item["id"] for item in self.client.get(self.list_url).data]

        self.assertEqual(renter_ids, [self.booking_id])
        self.assertEqual(vendor_ids, [self.booking_id])
        self.assertEqual(sorted(admin_ids), sorted([self.booking_id, self.cheap_booking_id]))

    def test_latest(self) -> None:
        self._reserve(start=10, end=12, payment_id="pay_later")

        self.client.force_authenticate(self.renter)
        response = self.client.get(reverse("booking-latest"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["payment_id"], "pay_later")

    def test_latest_without_bookings(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.get(reverse("booking-latest"))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_requester_cancels_and_frees_vehicle(self) -> None:
        self.client.force_authenticate(self.renter)

        response = self.client.post(reverse("booking-cancel", args=[self.booking_id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["status"], "canceled")
        again = self._reserve(user=self.other_renter, start=2, end=4, payment_id="pay_again")
        self.assertEqual(again.status_code, status.HTTP_201_CREATED, again.data)

    def test_cancel_twice_is_a_no_op(self) -> None:
        self.client.force_authenticate(self.renter)
        url = reverse("booking-cancel", args=[self.booking_id])

        self.client.post(url)
        response = self.client.post(url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "canceled")

    def test_vendor_cannot_cancel_renter_booking(self) -> None:
        self.client.force_authenticate(self.vendor)

        response = self.client.post(reverse("booking-cancel", args=[self.booking_id]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_other_renter_cannot_see_booking(self) -> None:
        self.client.force_authenticate(self.other_renter)

        response = self.client.post(reverse("booking-cancel", args=[self.booking_id]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_admin_status_transitions(self) -> None:
        self.client.force_authenticate(self.admin)
        url = reverse("booking-change-status", args=[self.booking_id])

        on_trip = self.client.post(url, {"status": "onTrip"}, format="json")
        invalid = self.client.post(url, {"status": "booked"}, format="json")
        done = self.client.post(url, {"status": "tripCompleted"}, format="json")

        self.assertEqual(on_trip.data["status"], "onTrip")
        self.assertEqual(invalid.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(invalid.data["code"], "invalid_status_transition")
        self.assertEqual(done.data["status"], "tripCompleted")

    def test_unknown_status_value(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.post(
            reverse("booking-change-status", args=[self.booking_id]), {"status": "lost"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("status", response.data)

    def test_renter_cannot_change_status(self) -> None:
        self.client.force_authenticate(self.renter)

        response = self.client.post(
            reverse("booking-change-status", args=[self.booking_id]), {"status": "onTrip"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
