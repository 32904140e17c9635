"""Top-level package for Django configuration.

This package holds the settings modules for the photobooth booking core.
Pick one with ``DJANGO_SETTINGS_MODULE`` (``config.settings.dev``,
``config.settings.prod`` or ``config.settings.test``).
"""
