"""
Package Domain Entities

Pricing inputs for the photobooth packages:
- Package: Immutable snapshot of a catalog package
- AddOn / Extra: Priced line items attached to a package
- Fixed / Percent: Tagged adjustment variants used for discount, tax and deposit

Catalog data arrives loosely typed (numbers as strings, ``discount`` either a
number or ``{type, value}``), so ``Package.from_raw`` resolves it once at the
boundary. The pricing engine only ever sees these strict types.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Tuple, Union

from django.conf import settings

from shared.domain.base import ValueObject
from shared.domain.value_objects import CURRENCY_CODE_RE

ZERO = Decimal('0')
HUNDRED = Decimal('100')


def to_amount(value: Any) -> Decimal:
    """
    Coerce a loosely typed price into a non-negative Decimal.

    Missing, non-numeric, NaN, infinite and negative values become zero.
    """
    if isinstance(value, bool) or value is None:
        return ZERO
    if isinstance(value, float) and not math.isfinite(value):
        return ZERO
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return ZERO
    if not amount.is_finite() or amount < 0:
        return ZERO
    return amount


def to_quantity(value: Any) -> int:
    """Floor a quantity, never below one"""
    amount = to_amount(value)
    return max(1, int(amount))


def clamp_percent(value: Decimal) -> Decimal:
    return min(max(value, ZERO), HUNDRED)


@dataclass(frozen=True)
class Fixed(ValueObject):
    """A flat amount"""
    amount: Decimal = ZERO


@dataclass(frozen=True)
class Percent(ValueObject):
    """A percentage of some base, clamped to 0..100 when applied"""
    value: Decimal = ZERO

    def of(self, base: Decimal) -> Decimal:
        return base * clamp_percent(self.value) / HUNDRED


Adjustment = Union[Fixed, Percent]


def parse_adjustment(raw: Any) -> Adjustment:
    """
    Resolve ``number | {type, value}`` into a tagged adjustment.

    A bare number is a fixed amount; a mapping is a percentage only when its
    type is ``"percent"``. Missing values mean "no adjustment".
    """
    if isinstance(raw, (Fixed, Percent)):
        return raw
    if isinstance(raw, Mapping):
        # ``amount`` is accepted as an alias of ``value``
        value = raw.get('value', raw.get('amount'))
        if str(raw.get('type', '')).strip().lower() == 'percent':
            return Percent(to_amount(value))
        return Fixed(to_amount(value))
    return Fixed(to_amount(raw))


@dataclass(frozen=True)
class AddOn(ValueObject):
    price: Decimal
    quantity: int = 1
    name: str = ''

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    @classmethod
    def from_raw(cls, raw: Any) -> 'AddOn':
        raw = raw if isinstance(raw, Mapping) else {}
        name = raw.get('name')
        return cls(
            price=to_amount(raw.get('price')),
            quantity=to_quantity(raw.get('quantity', 1)),
            name=name if isinstance(name, str) else '',
        )


@dataclass(frozen=True)
class Extra(ValueObject):
    """One-off item billed once regardless of quantity"""
    price: Decimal
    name: str = ''

    @classmethod
    def from_raw(cls, raw: Any) -> 'Extra':
        raw = raw if isinstance(raw, Mapping) else {}
        name = raw.get('name')
        return cls(price=to_amount(raw.get('price')), name=name if isinstance(name, str) else '')


def default_currency() -> str:
    return getattr(settings, 'PACKAGES_CURRENCY', 'USD')


def _currency_code(value: Any) -> str:
    if isinstance(value, str) and CURRENCY_CODE_RE.match(value.strip().upper()):
        return value.strip().upper()
    return default_currency()


@dataclass(frozen=True)
class Package(ValueObject):
    """
    Package value object

    Immutable snapshot of a catalog package passed into the pricing engine.
    """
    base_price: Decimal = ZERO
    travel_fee: Decimal = ZERO
    add_ons: Tuple[AddOn, ...] = ()
    extras: Tuple[Extra, ...] = ()
    hours_included: Decimal = ZERO
    hourly_rate: Decimal = ZERO
    discount: Adjustment = field(default_factory=Fixed)
    tax: Adjustment = field(default_factory=Fixed)
    deposit: Adjustment | None = None
    currency: str = field(default_factory=default_currency)
    id: str | None = None
    name: str = ''

    @classmethod
    def from_raw(cls, raw: Any) -> 'Package':
        """Parse a catalog mapping (camelCase keys) into a Package"""
        raw = raw if isinstance(raw, Mapping) else {}
        add_ons = raw.get('addOns') or ()
        extras = raw.get('extras') or ()
        deposit = raw.get('deposit')
        currency = raw.get('currency')
        package_id = raw.get('id')
        name = raw.get('name')
        return cls(
            base_price=to_amount(raw.get('basePrice', raw.get('price'))),
            travel_fee=to_amount(raw.get('travelFee')),
            add_ons=tuple(AddOn.from_raw(a) for a in add_ons) if isinstance(add_ons, (list, tuple)) else (),
            extras=tuple(Extra.from_raw(e) for e in extras) if isinstance(extras, (list, tuple)) else (),
            hours_included=to_amount(raw.get('hoursIncluded')),
            hourly_rate=to_amount(raw.get('hourlyRate')),
            discount=parse_adjustment(raw.get('discount')),
            tax=parse_adjustment(raw.get('tax')),
            deposit=parse_adjustment(deposit) if deposit is not None else None,
            currency=_currency_code(currency),
            id=package_id if isinstance(package_id, str) and package_id else None,
            name=name if isinstance(name, str) else '',
        )
