"""
Event representation for timestamped event logs.

An event carries a name and the instant it occurred, stored as integer
nanoseconds since the Unix epoch so that duration arithmetic is exact.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from tempex.core.duration import MICROSECOND, SECOND

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def to_nanos(moment: datetime) -> int:
    """
    Convert a datetime to integer nanoseconds since the Unix epoch.

    Naive datetimes are interpreted as UTC.

    Args:
        moment: The datetime to convert.

    Returns:
        Nanoseconds since 1970-01-01T00:00:00Z.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    delta = moment - _EPOCH
    return (delta.days * 86_400 + delta.seconds) * SECOND + delta.microseconds * MICROSECOND


@dataclass(frozen=True)
class Event:
    """
    Immutable representation of a single logged event.

    Attributes:
        name: The event name matched by ``EventName`` predicates.
        timestamp: Occurrence time in nanoseconds since the Unix epoch.
    """

    name: str
    timestamp: int

    @classmethod
    def at(cls, name: str, moment: datetime) -> Event:
        """Create an event occurring at the given datetime."""
        return cls(name=name, timestamp=to_nanos(moment))

    def __str__(self) -> str:
        return f"{self.name}@{self.timestamp}"
