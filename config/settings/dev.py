"""Development settings for the photobooth booking core.

This module extends the base settings with development specific
configuration, such as enabling debug and verbose logging. Do not use
these settings in production!
"""

from .base import *  # noqa: F401,F403

# Enable debug mode for development
DEBUG = True

# Allow all hosts in development
ALLOWED_HOSTS = ['*']

# Show debug output from the booking core
LOGGING['loggers']['apps']['level'] = 'DEBUG'  # noqa: F405
LOGGING['loggers']['shared']['level'] = 'DEBUG'  # noqa: F405
