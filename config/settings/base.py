"""Base settings for all environments.

This configuration file defines the common settings used in development,
production and tests. The booking core only needs a small slice of Django:
the cache framework (which backs the booking record store), time zone
handling and logging. Environment‑specific settings are overridden in
`dev.py`, `prod.py` or `test.py`.
"""

import os
from pathlib import Path

import structlog
from dotenv import load_dotenv

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent.parent

load_dotenv(BASE_DIR / '.env')

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'replace-me-in-production')

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = False

ALLOWED_HOSTS: list[str] = os.environ.get('DJANGO_ALLOWED_HOSTS', '*').split(',')

# Application definition

INSTALLED_APPS = [
    'django.contrib.contenttypes',
]

# Internationalization
# https://docs.djangoproject.com/en/5.0/topics/i18n/

LANGUAGE_CODE = 'en-us'

# Bookings use local-date semantics: naive instants are read in this zone
TIME_ZONE = os.environ.get('DJANGO_TIME_ZONE', 'UTC')

USE_I18N = True

USE_TZ = True

# Cache
# The booking collection lives in a cache entry without expiry, so the
# backend must be shared between processes to be durable.

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.filebased.FileBasedCache',
        'LOCATION': os.environ.get('BOOKINGS_CACHE_DIR', str(BASE_DIR / 'var' / 'bookings-cache')),
    }
}

# Bookings

BOOKINGS_CACHE_ALIAS = os.environ.get('BOOKINGS_CACHE_ALIAS', 'default')
BOOKINGS_STORAGE_KEY = os.environ.get('BOOKINGS_STORAGE_KEY', 'pb_bookings_v1')
BOOKINGS_DEFAULT_DURATION_MINUTES = int(os.environ.get('BOOKINGS_DEFAULT_DURATION_MINUTES', '30'))
BOOKINGS_MIN_LEAD_MINUTES = int(os.environ.get('BOOKINGS_MIN_LEAD_MINUTES', '10'))
BOOKINGS_MAX_ADVANCE_DAYS = int(os.environ.get('BOOKINGS_MAX_ADVANCE_DAYS', '730'))

# When true, an unreadable stored booking blocks every slot instead of
# being ignored by availability checks.
BOOKINGS_STRICT_AVAILABILITY = os.environ.get('BOOKINGS_STRICT_AVAILABILITY', 'false').lower() == 'true'

# Deposit applied when a package defines none (0 disables it)
BOOKINGS_DEFAULT_DEPOSIT_PERCENT = os.environ.get('BOOKINGS_DEFAULT_DEPOSIT_PERCENT', '0')

# Packages

PACKAGES_CURRENCY = os.environ.get('PACKAGES_CURRENCY', 'USD')

# Logging

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "json": {
            "()": "structlog.stdlib.ProcessorFormatter",
            "processor": structlog.processors.JSONRenderer(),
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "level": "DEBUG",
        }
    },
    "root": {"handlers": ["console"], "level": "WARNING"},
    "loggers": {
        "django": {"handlers": ["console"], "level": "INFO", "propagate": False},
        "apps": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "shared": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
    },
}
