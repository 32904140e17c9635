"""Validation of booking drafts submitted by the booking form.

``validate`` never raises: it returns every problem it finds as a list of
human-readable messages so the form can show them all at once.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import Any, List

from django.conf import settings
from django.utils import timezone

from shared.domain.instants import parse_instant

MAX_EMAIL_LENGTH = 254
MIN_DURATION_MINUTES = 5
MAX_DURATION_MINUTES = 1440
MAX_GUESTS = 1000
MAX_NOTES_LENGTH = 2000

ACCEPTED_STRINGS = frozenset({'true', '1', 'yes', 'y', 'on'})

EMAIL_LOCAL_RE = re.compile(r"^[A-Za-z0-9!#$%&'*+/=?^_`{|}~\-.]+$")
EMAIL_LABEL_RE = re.compile(r'^[A-Za-z0-9-]{1,63}$')
EMAIL_TLD_RE = re.compile(r'^[A-Za-z]{2,63}$')
PHONE_SEPARATORS_RE = re.compile(r'[\s\-().]')
DIGITS_RE = re.compile(r'^\d+$')
ISO_DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ''


def _positive_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, float):
        return int(value) if value.is_integer() and value > 0 else None
    if isinstance(value, str) and DIGITS_RE.match(value):
        number = int(value)
        return number if number > 0 else None
    return None


def _present(value: Any) -> bool:
    return value is not None and value != ''


def is_valid_email(email: Any) -> bool:
    """Structural email check, deliberately looser than RFC 5322"""
    if not isinstance(email, str):
        return False
    email = email.strip()
    if not email or len(email) > MAX_EMAIL_LENGTH:
        return False
    if email.count('@') != 1:
        return False

    local, domain = email.split('@')
    if not local or not domain:
        return False
    if local.startswith('.') or local.endswith('.') or '..' in local:
        return False
    if not EMAIL_LOCAL_RE.match(local):
        return False

    labels = domain.split('.')
    if len(labels) < 2:
        return False
    for label in labels:
        if not EMAIL_LABEL_RE.match(label):
            return False
        if label.startswith('-') or label.endswith('-'):
            return False
    return bool(EMAIL_TLD_RE.match(labels[-1]))


def is_valid_phone(phone: Any) -> bool:
    """7 to 15 digits once separators and a single leading '+' are stripped"""
    if not isinstance(phone, str):
        return False
    phone = phone.strip()
    if not phone:
        return False
    plus_count = phone.count('+')
    if plus_count > 1 or (plus_count == 1 and not phone.startswith('+')):
        return False

    digits = PHONE_SEPARATORS_RE.sub('', phone)
    if digits.startswith('+'):
        digits = digits[1:]
    if not DIGITS_RE.match(digits):
        return False
    return 7 <= len(digits) <= 15


def is_accepted(value: Any) -> bool:
    """Tolerant truthiness used for the terms checkbox"""
    if value is True:
        return True
    if isinstance(value, str):
        return value.strip().lower() in ACCEPTED_STRINGS
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 1
    return False


def draft_name(draft: Mapping) -> str:
    """fullName, then firstName + lastName, then name"""
    if _non_empty_str(draft.get('fullName')):
        return draft['fullName'].strip()
    first, last = draft.get('firstName'), draft.get('lastName')
    if _non_empty_str(first) or _non_empty_str(last):
        parts = [part.strip() for part in (first, last) if _non_empty_str(part)]
        return ' '.join(parts)
    if _non_empty_str(draft.get('name')):
        return draft['name'].strip()
    return ''


def draft_start(draft: Mapping) -> datetime | None:
    """Resolve the requested start from start, date + time, or date"""
    start, day, clock = draft.get('start'), draft.get('date'), draft.get('time')
    if start:
        return parse_instant(start)
    if day and clock:
        if _non_empty_str(day) and _non_empty_str(clock):
            day, clock = day.strip(), clock.strip()
            separator = 'T' if ISO_DATE_RE.match(day) else ' '
            return parse_instant(f"{day}{separator}{clock}")
        return None
    if day:
        return parse_instant(day)
    return None


def validate(draft: Any) -> List[str]:
    """
    Validate a loosely typed booking draft.

    Returns an empty list when the draft is acceptable. All checks run
    independently, so a draft with several problems yields several messages.
    """
    errors: List[str] = []
    draft = draft if isinstance(draft, Mapping) else {}

    name = draft_name(draft)
    if len(name) < 2:
        errors.append('Please provide a valid name.')

    if not is_valid_email(draft.get('email')):
        errors.append('Please provide a valid email address.')

    if not is_valid_phone(draft.get('phone')):
        errors.append('Please provide a valid phone number.')

    start = draft_start(draft)
    if start is None:
        errors.append('Please select a valid start date and time.')
    else:
        now = timezone.now()
        lead_minutes = getattr(settings, 'BOOKINGS_MIN_LEAD_MINUTES', 10)
        min_lead = timedelta(minutes=lead_minutes)
        max_advance = timedelta(days=getattr(settings, 'BOOKINGS_MAX_ADVANCE_DAYS', 730))
        if start < now + min_lead:
            errors.append(f'Booking time must be at least {lead_minutes} minutes in the future.')
        if start > now + max_advance:
            errors.append('Booking date is too far in the future.')

    duration = draft.get('durationMinutes')
    if duration is None:
        duration = draft.get('duration')
    if _present(duration):
        minutes = _positive_int(duration)
        if minutes is None:
            errors.append('Duration must be a positive whole number of minutes.')
        else:
            if minutes < MIN_DURATION_MINUTES:
                errors.append('Duration must be at least 5 minutes.')
            if minutes > MAX_DURATION_MINUTES:
                errors.append('Duration must be less than 24 hours.')
    else:
        errors.append('Please specify a duration for the booking.')

    guests = draft.get('guests')
    if guests is None:
        guests = draft.get('guestCount')
    if _present(guests):
        count = _positive_int(guests)
        if count is None:
            errors.append('Guest count must be a positive whole number.')
        elif count > MAX_GUESTS:
            errors.append('Guest count is unrealistically large.')
    else:
        errors.append('Please specify the number of guests.')

    if not _non_empty_str(draft.get('packageId')) and not _non_empty_str(draft.get('packageName')):
        errors.append('Please select a package.')

    venue, address = draft.get('venue'), draft.get('address')
    if venue is not None:
        if not _non_empty_str(venue) and not _non_empty_str(address):
            errors.append('Please provide a valid venue or address.')
    elif address is not None and not _non_empty_str(address):
        errors.append('Please provide a valid address.')

    terms = draft.get('termsAccepted')
    if terms is None:
        terms = draft.get('agreeToTerms')
    if not is_accepted(terms):
        errors.append('You must accept the terms and conditions to proceed.')

    notes = draft.get('notes')
    if _non_empty_str(notes) and len(notes) > MAX_NOTES_LENGTH:
        errors.append('Notes are too long.')

    return errors
