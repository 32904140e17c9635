"""
Instant parsing helpers

Stored records and form drafts carry timestamps in several loose shapes
(ISO strings, "YYYY-MM-DD HH:MM", bare dates, epoch milliseconds). These
helpers turn them into aware datetimes; naive values are interpreted in the
current Django time zone.
"""

from __future__ import annotations

import math
from datetime import date, datetime, time, timezone as dt_timezone

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

FALLBACK_FORMATS = (
    '%m/%d/%Y %H:%M',
    '%m/%d/%Y %I:%M %p',
    '%m/%d/%Y',
    '%d.%m.%Y %H:%M',
    '%d.%m.%Y',
)


def _aware(value: datetime) -> datetime:
    if timezone.is_naive(value):
        return timezone.make_aware(value, timezone.get_current_timezone())
    return value


def parse_instant(value) -> datetime | None:
    """Return an aware datetime for ``value`` or None when it cannot be read"""
    if isinstance(value, datetime):
        return _aware(value)
    if isinstance(value, date):
        return _aware(datetime.combine(value, time.min))
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value / 1000, tz=dt_timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    try:
        parsed = parse_datetime(text)
        if parsed is None:
            day = parse_date(text)
            if day is not None:
                parsed = datetime.combine(day, time.min)
    except ValueError:
        # Well formatted but impossible, e.g. month 13
        return None

    if parsed is None:
        for fmt in FALLBACK_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        return None
    return _aware(parsed)


def to_iso(value: datetime) -> str:
    """Serialize an aware datetime as a UTC ISO-8601 string with a Z suffix"""
    return value.astimezone(dt_timezone.utc).isoformat().replace('+00:00', 'Z')
