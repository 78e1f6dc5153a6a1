"""Shared utilities."""

# Standard library imports
import datetime
import time
from typing import Union

# A duration given either as seconds or as a timedelta
Duration = Union[float, datetime.timedelta]

_EPOCH = datetime.datetime(1970, 1, 1)

# Epoch seconds representable as a datetime (years 1 through 9999)
MIN_TIMESTAMP = (datetime.datetime.min - _EPOCH).total_seconds()
MAX_TIMESTAMP = (datetime.datetime.max.replace(microsecond=0) - _EPOCH).total_seconds()


def utc_now() -> datetime.datetime:
    """Returns the current time in UTC as a naive datetime.

    All datetimes in the application are naive UTC. Tide timestamps themselves
    are carried as epoch seconds.
    """
    # Get timezone-aware UTC time, then strip the timezone to make it naive
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def epoch_now() -> float:
    """Return the current time as seconds since the epoch."""
    return time.time()


def epoch_to_utc(timestamp: float) -> datetime.datetime:
    """Convert epoch seconds to a naive UTC datetime.

    Raises:
        OverflowError: If timestamp is outside [MIN_TIMESTAMP, MAX_TIMESTAMP]
    """
    return _EPOCH + datetime.timedelta(seconds=timestamp)


def epoch_to_iso(timestamp: float) -> str:
    """Format epoch seconds as an ISO 8601 UTC string (e.g. 2025-04-19T10:00:00Z)."""
    return epoch_to_utc(timestamp).isoformat() + "Z"


def to_seconds(duration: Duration) -> float:
    """Normalize a duration to seconds."""
    if isinstance(duration, datetime.timedelta):
        return duration.total_seconds()
    return float(duration)
