"""Production settings for the photobooth booking core.

This module extends the base settings with production specific
configuration. Ensure that sensitive values are provided via
environment variables. When ``REDIS_URL`` is set the booking collection
is kept in Redis so every process shares the same store.
"""

from .base import *  # noqa: F401,F403

# Never run with debug enabled in production
DEBUG = False

# Allowed hosts should be defined explicitly via environment variable
ALLOWED_HOSTS = os.environ.get('DJANGO_ALLOWED_HOSTS', '').split(',')  # noqa: F405

REDIS_URL = os.environ.get('REDIS_URL')  # noqa: F405

if REDIS_URL:
    CACHES = {
        'default': {
            'BACKEND': 'django_redis.cache.RedisCache',
            'LOCATION': REDIS_URL,
            'OPTIONS': {
                'CLIENT_CLASS': 'django_redis.client.DefaultClient',
            },
        }
    }
