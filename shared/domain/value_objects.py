"""
Common Value Objects

Value objects used across multiple domains:
- Money: Represents monetary amounts with currency
- TimeRange: Represents a half-open interval of instants (start to end)
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP, localcontext

from shared.domain.base import ValueObject

CENTS = Decimal('0.01')
CURRENCY_CODE_RE = re.compile(r'^[A-Z]{3}$')


def round_half_up(value) -> int:
    """Round a number to the nearest integer, halves away from zero"""
    return int(Decimal(str(value)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Represents a monetary amount with currency.
    Immutable and supports arithmetic operations.
    """
    amount: Decimal
    currency: str = 'USD'

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', Decimal(str(self.amount)))
        if self.amount < 0:
            raise ValueError("Amount cannot be negative")
        if not self.currency:
            raise ValueError("Currency is required")
        if not CURRENCY_CODE_RE.match(self.currency):
            raise ValueError(f"Unsupported currency: {self.currency}")

    def quantize(self) -> 'Money':
        """Round to cents (half up), at any magnitude"""
        with localcontext() as ctx:
            ctx.prec = max(ctx.prec, self.amount.adjusted() + 3)
            amount = self.amount.quantize(CENTS, rounding=ROUND_HALF_UP)
        return Money(amount, self.currency)

    def __add__(self, other: 'Money') -> 'Money':
        """Add two money objects"""
        if not isinstance(other, Money):
            raise TypeError("Can only add Money to Money")
        if self.currency != other.currency:
            raise ValueError(f"Cannot add different currencies: {self.currency} and {other.currency}")
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: 'Money') -> 'Money':
        """Subtract two money objects"""
        if not isinstance(other, Money):
            raise TypeError("Can only subtract Money from Money")
        if self.currency != other.currency:
            raise ValueError(f"Cannot subtract different currencies: {self.currency} and {other.currency}")
        return Money(self.amount - other.amount, self.currency)

    def __mul__(self, factor) -> 'Money':
        """Multiply money by a factor"""
        if not isinstance(factor, (int, float, Decimal)):
            raise TypeError("Can only multiply Money by number")
        return Money(self.amount * Decimal(str(factor)), self.currency)

    def __str__(self):
        return f"{self.amount:,.2f} {self.currency}"

    def __repr__(self):
        return f"Money({self.amount}, '{self.currency}')"


@dataclass(frozen=True)
class TimeRange(ValueObject):
    """
    Time range value object

    Represents a range from start (inclusive) to end (exclusive).
    Used for booking slots and availability checks.
    """
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start ({self.start}) must be before end ({self.end})")

    @classmethod
    def from_duration(cls, start: datetime, minutes: int) -> 'TimeRange':
        return cls(start, start + timedelta(minutes=minutes))

    def overlaps_with(self, other: 'TimeRange') -> bool:
        """
        Check if this range overlaps with another

        Two ranges overlap if they share a non-zero stretch of time.
        Note: end is exclusive, so back-to-back ranges don't overlap.

        Examples:
            - TimeRange(09:00, 10:00) overlaps with TimeRange(09:30, 10:30) -> True
            - TimeRange(09:00, 10:00) overlaps with TimeRange(10:00, 10:30) -> False (adjacent)
        """
        if not isinstance(other, TimeRange):
            raise TypeError("Can only check overlap with another TimeRange")

        # Overlap formula: start1 < end2 AND end1 > start2
        return (self.start < other.end and
                self.end > other.start)

    def contains(self, instant: datetime) -> bool:
        """start is inclusive, end is exclusive"""
        return self.start <= instant < self.end

    @property
    def duration_minutes(self) -> int:
        """Length of the range rounded to the nearest whole minute"""
        return round_half_up((self.end - self.start).total_seconds() / 60)

    def __str__(self):
        return f"{self.start.isoformat()} - {self.end.isoformat()}"

    def __repr__(self):
        return f"TimeRange({self.start.isoformat()}, {self.end.isoformat()})"
