"""
Pricing Engine

Turns a package into a deterministic price breakdown:

    subtotal   = base + add-ons + extras + overtime + travel
    discount   = percent of subtotal, or a fixed amount capped at subtotal
    taxed_base = subtotal - discount
    tax        = percent of taxed_base, or a fixed amount
    total      = taxed_base + tax

Deposits are a percentage of the taxed base (post-discount, pre-tax), so a
change in tax rate never moves the deposit.

All arithmetic is done with unrounded Decimals; amounts are rounded to cents
only when the breakdown is produced. Loosely typed inputs never raise: bad or
negative prices count as zero.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from django.conf import settings

from shared.domain.base import ValueObject
from shared.domain.value_objects import Money
from apps.packages.domain.entities import (
    ZERO,
    Adjustment,
    Fixed,
    Package,
    Percent,
    to_amount,
)


@dataclass(frozen=True)
class PriceBreakdown(ValueObject):
    """
    Staged price computation for a package.

    Every field is non-negative and rounded to cents. ``total`` is what the
    customer owes; ``deposit_amount`` is the part due up front.
    """
    base: Money
    travel: Money
    addons_total: Money
    extras_total: Money
    overtime: Money
    subtotal_before_discount_and_tax: Money
    discount_amount: Money
    taxed_base: Money
    tax_amount: Money
    total: Money
    deposit_amount: Money

    @property
    def currency(self) -> str:
        return self.total.currency

    @property
    def balance_due(self) -> Money:
        """What remains once the deposit is paid"""
        return self.total - self.deposit_amount

    def as_dict(self) -> dict:
        return {
            'base': self.base.amount,
            'travel': self.travel.amount,
            'addonsTotal': self.addons_total.amount,
            'extrasTotal': self.extras_total.amount,
            'overtime': self.overtime.amount,
            'subtotalBeforeDiscountAndTax': self.subtotal_before_discount_and_tax.amount,
            'discountAmount': self.discount_amount.amount,
            'taxedBase': self.taxed_base.amount,
            'taxAmount': self.tax_amount.amount,
            'total': self.total.amount,
            'depositAmount': self.deposit_amount.amount,
            'currency': self.currency,
        }


def discount_for(subtotal: Decimal, discount: Adjustment) -> Decimal:
    """Discount never exceeds the subtotal"""
    if isinstance(discount, Percent):
        amount = discount.of(subtotal)
    else:
        amount = discount.amount
    return min(max(amount, ZERO), subtotal)


def tax_for(taxed_base: Decimal, tax: Adjustment) -> Decimal:
    if isinstance(tax, Percent):
        return tax.of(taxed_base)
    return max(tax.amount, ZERO)


def compute_deposit(taxed_base: Decimal, deposit: Adjustment | None, total: Decimal | None = None) -> Decimal:
    """
    Deposit over the post-discount, pre-tax base.

    Fixed deposits are capped at ``total`` when it is given. Returns the
    unrounded amount; callers round at their boundary.
    """
    if deposit is None:
        return ZERO
    if isinstance(deposit, Percent):
        amount = deposit.of(max(taxed_base, ZERO))
    else:
        amount = max(deposit.amount, ZERO)
    if total is not None:
        amount = min(amount, max(total, ZERO))
    return amount


def _default_deposit() -> Adjustment | None:
    percent = to_amount(getattr(settings, 'BOOKINGS_DEFAULT_DEPOSIT_PERCENT', 0))
    if percent > 0:
        return Percent(percent)
    return None


def compute_breakdown(pkg: Package | Mapping, hours: Any = None) -> PriceBreakdown:
    """
    Compute the price breakdown of a package.

    Args:
        pkg: A Package, or a raw catalog mapping parsed with Package.from_raw
        hours: Booked hours; hours beyond ``hours_included`` are billed at
            ``hourly_rate``. None means no overtime.
    """
    if not isinstance(pkg, Package):
        pkg = Package.from_raw(pkg)

    base = pkg.base_price
    travel = pkg.travel_fee
    addons_total = sum((add_on.line_total for add_on in pkg.add_ons), ZERO)
    extras_total = sum((extra.price for extra in pkg.extras), ZERO)

    overtime = ZERO
    if hours is not None:
        billed_hours = max(to_amount(hours) - pkg.hours_included, ZERO)
        overtime = billed_hours * pkg.hourly_rate

    subtotal = base + addons_total + extras_total + overtime + travel
    discount = discount_for(subtotal, pkg.discount)
    taxed_base = subtotal - discount
    tax = tax_for(taxed_base, pkg.tax)
    total = max(taxed_base + tax, ZERO)

    deposit_rule = pkg.deposit if pkg.deposit is not None else _default_deposit()
    deposit = compute_deposit(taxed_base, deposit_rule, total)

    def money(amount: Decimal) -> Money:
        return Money(amount, pkg.currency).quantize()

    return PriceBreakdown(
        base=money(base),
        travel=money(travel),
        addons_total=money(addons_total),
        extras_total=money(extras_total),
        overtime=money(overtime),
        subtotal_before_discount_and_tax=money(subtotal),
        discount_amount=money(discount),
        taxed_base=money(taxed_base),
        tax_amount=money(tax),
        total=money(total),
        deposit_amount=money(deposit),
    )


__all__ = [
    'Fixed',
    'Percent',
    'PriceBreakdown',
    'compute_breakdown',
    'compute_deposit',
]
