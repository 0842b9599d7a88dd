"""
Common Value Objects

- Money: amount with currency
- TimeRange: half-open ``[start, end)`` interval between two instants
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from shared.domain.base import ValueObject

SUPPORTED_CURRENCIES = ('INR', 'USD', 'EUR')


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Immutable, non-negative and tagged with a supported currency.
    """
    amount: Decimal
    currency: str = 'INR'

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', Decimal(str(self.amount)))
        if self.amount < 0:
            raise ValueError("Amount cannot be negative")
        if self.currency not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Unsupported currency: {self.currency}")

    def __str__(self):
        return f"{self.amount:,.2f} {self.currency}"


@dataclass(frozen=True)
class TimeRange(ValueObject):
    """
    Half-open interval ``[start, end)``

    ``end`` is not occupied, so back-to-back ranges never overlap. Both
    bounds must be comparable instants (all naive or all aware).
    """
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Range start ({self.start}) must be before its end ({self.end})")

    def overlaps_with(self, other: 'TimeRange') -> bool:
        """
        Examples:
            [Jan 1, Jan 5) and [Jan 3, Jan 6) -> True
            [Jan 1, Jan 5) and [Jan 5, Jan 8) -> False (touching bounds)
        """
        return self.start < other.end and other.start < self.end

    def __str__(self):
        return f"[{self.start.isoformat()}, {self.end.isoformat()})"
