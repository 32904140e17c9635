from datetime import datetime, timedelta, timezone
from decimal import Context, Decimal, ROUND_HALF_UP

import pytest

from shared.domain.value_objects import Money, TimeRange, round_half_up

NINE = datetime(2026, 6, 1, 9, tzinfo=timezone.utc)


class TestMoney:
    def test_amount_is_coerced_to_decimal(self):
        assert Money(12.5).amount == Decimal("12.5")
        assert Money("3.10", "EUR").amount == Decimal("3.10")

    @pytest.mark.parametrize("amount,currency", [(-1, "USD"), (1, ""), (1, "usd"), (1, "EURO")])
    def test_invalid(self, amount, currency):
        with pytest.raises(ValueError):
            Money(amount, currency)

    def test_arithmetic(self):
        total = Money("10.00") + Money("2.50")

        assert total == Money(Decimal("12.50"))
        assert (total - Money(2)).amount == Decimal("10.50")
        assert (Money(10) * Decimal("0.08")).amount == Decimal("0.80")

    def test_mixed_currencies_are_rejected(self):
        with pytest.raises(ValueError):
            Money(1, "USD") + Money(1, "EUR")
        with pytest.raises(TypeError):
            Money(1) + 1

    def test_subtraction_cannot_go_negative(self):
        with pytest.raises(ValueError):
            Money(1) - Money(2)

    @pytest.mark.parametrize("amount,expected", [
        ("10.005", "10.01"),
        ("10.004", "10.00"),
        ("0.125", "0.13"),
        ("1.649175", "1.65"),
    ])
    def test_quantize_rounds_half_up(self, amount, expected):
        assert Money(amount).quantize().amount == Decimal(expected)

    @pytest.mark.parametrize("amount", ["1e26", "1e30", "123456789012345678901234567890.125"])
    def test_quantize_large_amounts(self, amount):
        rounded = Money(amount).quantize().amount

        assert rounded == Decimal(amount).quantize(Decimal("0.01"), context=Context(prec=60, rounding=ROUND_HALF_UP))
        assert rounded.as_tuple().exponent == -2

    def test_str(self):
        assert str(Money("1234.5")) == "1,234.50 USD"


@pytest.mark.parametrize("value,expected", [(0.5, 1), (1.5, 2), (2.5, 3), (2.4, 2), (44.5, 45), (59.6, 60)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


class TestTimeRange:
    def test_end_must_follow_start(self):
        with pytest.raises(ValueError):
            TimeRange(NINE, NINE)
        with pytest.raises(ValueError):
            TimeRange(NINE, NINE - timedelta(minutes=1))

    def test_from_duration(self):
        slot = TimeRange.from_duration(NINE, 90)

        assert slot.end == NINE + timedelta(minutes=90)
        assert slot.duration_minutes == 90

    @pytest.mark.parametrize("other_start,other_minutes,expected", [
        (timedelta(minutes=30), 60, True),
        (timedelta(minutes=60), 30, False),
        (timedelta(minutes=-60), 60, False),
        (timedelta(minutes=-30), 120, True),
        (timedelta(minutes=15), 15, True),
    ])
    def test_overlaps_with(self, other_start, other_minutes, expected):
        slot = TimeRange.from_duration(NINE, 60)
        other = TimeRange.from_duration(NINE + other_start, other_minutes)

        assert slot.overlaps_with(other) is expected
        assert other.overlaps_with(slot) is expected

    def test_contains_is_half_open(self):
        slot = TimeRange.from_duration(NINE, 60)

        assert slot.contains(NINE)
        assert not slot.contains(NINE + timedelta(hours=1))

    def test_duration_rounds_to_nearest_minute(self):
        assert TimeRange(NINE, NINE + timedelta(minutes=44, seconds=30)).duration_minutes == 45
        assert TimeRange(NINE, NINE + timedelta(seconds=20)).duration_minutes == 0
