from datetime import datetime, timezone
from decimal import Decimal

import pytest

from shared.domain.value_objects import Money, TimeRange


def test_money_coerces_amount_to_decimal():
    assert Money(1500).amount == Decimal("1500")
    assert str(Money(Decimal("1234.5"))) == "1,234.50 INR"


@pytest.mark.parametrize("amount, currency", [(Decimal("-1"), "INR"), (Decimal("1"), "GBP")])
def test_money_rejects_negative_or_unknown_currency(amount, currency):
    with pytest.raises(ValueError):
        Money(amount, currency)


def test_time_range_touching_bounds_do_not_overlap():
    first = TimeRange(start=datetime(2025, 1, 1, tzinfo=timezone.utc), end=datetime(2025, 1, 5, tzinfo=timezone.utc))
    touching = TimeRange(start=datetime(2025, 1, 5, tzinfo=timezone.utc), end=datetime(2025, 1, 8, tzinfo=timezone.utc))
    inside = TimeRange(start=datetime(2025, 1, 3, tzinfo=timezone.utc), end=datetime(2025, 1, 4, tzinfo=timezone.utc))

    assert not first.overlaps_with(touching)
    assert first.overlaps_with(inside)
    assert inside.overlaps_with(first)
