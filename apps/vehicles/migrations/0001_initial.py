from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Vehicle",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("registration_number", models.CharField(max_length=32, unique=True)),
                ("title", models.CharField(blank=True, max_length=255)),
                ("description", models.TextField(blank=True)),
                ("company", models.CharField(blank=True, max_length=100)),
                ("name", models.CharField(blank=True, max_length=100)),
                ("model", models.CharField(db_index=True, max_length=100)),
                ("year_made", models.PositiveSmallIntegerField(blank=True, null=True)),
                (
                    "fuel_type",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("petrol", "Petrol"),
                            ("diesel", "Diesel"),
                            ("electric", "Electric"),
                            ("hybrid", "Hybrid"),
                        ],
                        max_length=20,
                    ),
                ),
                ("seats", models.PositiveSmallIntegerField(blank=True, null=True)),
                (
                    "transmission",
                    models.CharField(
                        blank=True,
                        choices=[("manual", "Manual"), ("automatic", "Automatic")],
                        max_length=20,
                    ),
                ),
                ("car_type", models.CharField(blank=True, max_length=50)),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Rental price per day.",
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                ("images", models.JSONField(blank=True, default=list)),
                ("district", models.CharField(max_length=100)),
                ("location", models.CharField(max_length=255)),
                ("is_deleted", models.BooleanField(default=False)),
                ("is_vendor_vehicle", models.BooleanField(default=False)),
                ("is_admin_approved", models.BooleanField(default=True)),
                ("is_rejected", models.BooleanField(default=False)),
                ("booking_revision", models.PositiveBigIntegerField(default=0, editable=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "added_by",
                    models.ForeignKey(
                        blank=True,
                        help_text="Vendor who listed the vehicle.",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="vehicles",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Vehicle",
                "verbose_name_plural": "Vehicles",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["is_deleted", "is_admin_approved", "is_rejected"],
                        name="vehicle_bookable_idx",
                    )
                ],
            },
        ),
    ]
