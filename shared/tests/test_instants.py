from datetime import date, datetime, timezone

import pytest

from shared.domain.instants import parse_instant, to_iso

NOON = datetime(2026, 6, 1, 12, tzinfo=timezone.utc)


@pytest.mark.parametrize("value", [
    "2026-06-01T12:00:00Z",
    "2026-06-01T12:00:00.000Z",
    "2026-06-01T14:00:00+02:00",
    "2026-06-01 12:00",
    " 2026-06-01T12:00 ",
    "06/01/2026 12:00",
    "06/01/2026 12:00 PM",
    "01.06.2026 12:00",
    1780315200000,
    1780315200000.0,
    NOON,
    datetime(2026, 6, 1, 12),
])
def test_parse_instant(value):
    assert parse_instant(value) == NOON


def test_dates_mean_midnight():
    midnight = datetime(2026, 6, 1, tzinfo=timezone.utc)

    assert parse_instant("2026-06-01") == midnight
    assert parse_instant(date(2026, 6, 1)) == midnight
    assert parse_instant("06/01/2026") == midnight


@pytest.mark.parametrize("value", [
    None, "", "   ", "tomorrow", "2026-13-01", "2026-02-30T10:00", True, float("nan"), float("inf"), [], {},
])
def test_unreadable_values(value):
    assert parse_instant(value) is None


def test_to_iso_is_utc_with_z_suffix():
    assert to_iso(NOON) == "2026-06-01T12:00:00Z"
    assert to_iso(parse_instant("2026-06-01T14:00:00.250+02:00")) == "2026-06-01T12:00:00.250000Z"


def test_to_iso_round_trips_through_parse():
    value = datetime(2026, 6, 1, 12, 0, 0, 123456, tzinfo=timezone.utc)

    assert parse_instant(to_iso(value)) == value
