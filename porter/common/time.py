"""Common time utilities."""

from __future__ import annotations

import collections.abc as cabc
import datetime as dt

Clock = cabc.Callable[[], dt.datetime]


def utcnow() -> dt.datetime:
    """Return an aware UTC timestamp."""
    return dt.datetime.now(dt.UTC)


def epoch_seconds(moment: dt.datetime) -> int:
    """Return whole seconds since the Unix epoch for an aware datetime."""
    if moment.tzinfo is None:
        msg = "moment must be timezone-aware"
        raise ValueError(msg)
    return int(moment.timestamp())
