"""Errors raised outside the resolver itself, which never raises on bad data."""


class RangeAccessError(Exception):
    """Base class for errors raised by this package."""


class SnapshotError(RangeAccessError):
    """A snapshot file could not be read or parsed."""
