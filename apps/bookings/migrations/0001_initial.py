import uuid
from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("vehicles", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("pickup_date", models.DateTimeField()),
                ("drop_off_date", models.DateTimeField()),
                ("pickup_location", models.CharField(blank=True, max_length=255)),
                ("drop_off_location", models.CharField(blank=True, max_length=255)),
                ("total_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("currency", models.CharField(default="INR", max_length=3)),
                (
                    "payment_id",
                    models.CharField(
                        help_text="Gateway payment id; doubles as the idempotency key of the reservation.",
                        max_length=100,
                        unique=True,
                    ),
                ),
                ("order_id", models.CharField(blank=True, max_length=100)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("notBooked", "Not booked"),
                            ("booked", "Booked"),
                            ("onTrip", "On trip"),
                            ("notPicked", "Not picked"),
                            ("canceled", "Canceled"),
                            ("overDue", "Overdue"),
                            ("tripCompleted", "Trip completed"),
                        ],
                        default="booked",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "requester",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "vehicle",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to="vehicles.vehicle",
                    ),
                ),
            ],
            options={
                "verbose_name": "Booking",
                "verbose_name_plural": "Bookings",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["vehicle", "pickup_date", "drop_off_date"], name="booking_vehicle_period_idx"),
                    models.Index(fields=["status"], name="booking_status_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("drop_off_date__gt", models.F("pickup_date"))),
                        name="booking_valid_interval",
                    )
                ],
            },
        ),
    ]
