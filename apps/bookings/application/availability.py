"""
Availability queries

A request flows through small stages, each taking the previous stage's
result:

    AvailabilityQuery -> overlapping bookings -> blocking bookings
        -> blocked vehicle ids -> bookable vehicles left over

The result is advisory: a vehicle listed here can still be taken before
the caller reserves it. The committer re-checks under a lock.
"""

from dataclasses import dataclass
from typing import Any, FrozenSet, Iterable, List, Optional
import logging

from shared.domain.value_objects import TimeRange

from apps.bookings.application.ports import BookingLedger, VehicleCatalog
from apps.bookings.domain.entities import Reservation
from apps.bookings.domain.intervals import parse_interval

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AvailabilityQuery:
    period: TimeRange
    model: Optional[str] = None

    @classmethod
    def build(cls, start, end, model: Optional[str] = None) -> 'AvailabilityQuery':
        """Raises InvalidInterval."""
        model = model.strip() if model else None
        return cls(period=parse_interval(start, end), model=model or None)


def overlapping_bookings(ledger: BookingLedger, query: AvailabilityQuery) -> List[Reservation]:
    return ledger.find_overlapping(query.period.start, query.period.end)


def blocking_only(bookings: Iterable[Reservation]) -> List[Reservation]:
    return [booking for booking in bookings if booking.blocks_vehicle]


def blocked_vehicle_ids(bookings: Iterable[Reservation]) -> FrozenSet[Any]:
    return frozenset(booking.vehicle_id for booking in bookings)


def free_vehicles(catalog: VehicleCatalog, query: AvailabilityQuery, blocked: FrozenSet[Any]) -> List[Any]:
    return catalog.find_bookable(model=query.model, exclude_ids=blocked)


class AvailabilityEngine:
    """Answers "which vehicles are free for this interval?"."""

    def __init__(self, catalog: VehicleCatalog, ledger: BookingLedger):
        self.catalog = catalog
        self.ledger = ledger

    def query_available(self, start, end, model: Optional[str] = None) -> List[Any]:
        """
        Bookable vehicles with no blocking booking overlapping ``[start, end)``

        Raises: InvalidInterval, StorageUnavailable
        """
        query = AvailabilityQuery.build(start, end, model)
        blocked = blocked_vehicle_ids(blocking_only(overlapping_bookings(self.ledger, query)))
        vehicles = free_vehicles(self.catalog, query, blocked)
        logger.debug(
            "Availability %s model=%s: %d free, %d blocked",
            query.period, query.model, len(vehicles), len(blocked),
        )
        return vehicles


def one_per_model(vehicles: Iterable[Any]) -> List[Any]:
    """Keep the first vehicle of each model (case-insensitive), preserving order."""
    seen = set()
    unique = []
    for vehicle in vehicles:
        key = (vehicle.model or '').strip().lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(vehicle)
    return unique


def sort_by_price(vehicles: Iterable[Any]) -> List[Any]:
    return sorted(vehicles, key=lambda vehicle: (vehicle.price, str(vehicle.id)))
