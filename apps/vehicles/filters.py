"""FilterSet definitions for catalog listing."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Vehicle


class CharInFilter(django_filters.BaseInFilter, django_filters.CharFilter):
    """Comma separated list of values, e.g. ``?car_type=suv,sedan``."""


class VehicleFilterSet(django_filters.FilterSet):
    """Filters used by the catalog list, mirroring the marketplace search form."""

    model = django_filters.CharFilter(field_name="model", lookup_expr="iexact")
    company = django_filters.CharFilter(field_name="company", lookup_expr="iexact")
    car_type = CharInFilter(field_name="car_type", lookup_expr="in")
    fuel_type = django_filters.ChoiceFilter(choices=Vehicle.FuelType.choices)
    transmission = django_filters.ChoiceFilter(choices=Vehicle.Transmission.choices)
    district = django_filters.CharFilter(field_name="district", lookup_expr="icontains")
    seats_min = django_filters.NumberFilter(field_name="seats", lookup_expr="gte")
    price_min = django_filters.NumberFilter(field_name="price", lookup_expr="gte")
    price_max = django_filters.NumberFilter(field_name="price", lookup_expr="lte")

    # admin-only flags; other roles only ever see bookable vehicles
    is_deleted = django_filters.BooleanFilter()
    is_vendor_vehicle = django_filters.BooleanFilter()
    is_admin_approved = django_filters.BooleanFilter()
    is_rejected = django_filters.BooleanFilter()

    class Meta:
        model = Vehicle
        fields = [
            "model",
            "company",
            "car_type",
            "fuel_type",
            "transmission",
            "district",
        ]
