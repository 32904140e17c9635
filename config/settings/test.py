"""Test settings for the photobooth booking core.

Uses an in-process cache so each test run starts from an empty booking
store, and keeps logging quiet.
"""

from .base import *  # noqa: F401,F403

SECRET_KEY = 'test-secret-key'

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'photobooth-bookings-tests',
    }
}

TIME_ZONE = 'UTC'

BOOKINGS_STRICT_AVAILABILITY = False
BOOKINGS_DEFAULT_DEPOSIT_PERCENT = '0'

LOGGING['loggers']['apps']['level'] = 'WARNING'  # noqa: F405
LOGGING['loggers']['shared']['level'] = 'WARNING'  # noqa: F405

# Let pytest's caplog see booking log records
LOGGING['loggers']['apps']['propagate'] = True  # noqa: F405
LOGGING['loggers']['shared']['propagate'] = True  # noqa: F405
