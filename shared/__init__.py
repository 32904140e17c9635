"""
Shared kernel of the photobooth booking core.

Domain base classes, value objects (money, time ranges), instant parsing,
the event bus with its unit of work, and the record store contract used by
the booking repository.
"""
