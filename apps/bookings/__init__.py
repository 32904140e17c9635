"""Bookings app package.

This app encapsulates the booking domain: the booking aggregate and its
status audit trail, normalization of stored records, the availability
engine that prevents overlapping bookings, validation of booking form
drafts, and the repository that keeps the whole collection in a single
record-store entry.
"""
