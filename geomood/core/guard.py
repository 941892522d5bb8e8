"""Rejects a second mood from the same user within a rolling hour."""

from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

DUPLICATE_WINDOW = timedelta(hours=1)


def _as_utc(moment: datetime) -> datetime:
    # Naive datetimes are treated as UTC, as pymongo returns them
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def has_duplicate_within_hour(timestamps: Iterable[datetime],
                              now: Optional[datetime] = None) -> bool:
    """
    True iff any timestamp is strictly after ``now - 1 hour``.

    Args:
        timestamps: Creation times of the user's existing moods.
        now: Reference instant (defaults to the current UTC time).
    """
    now = _as_utc(now) if now is not None else datetime.now(timezone.utc)
    cutoff = now - DUPLICATE_WINDOW
    return any(_as_utc(ts) > cutoff for ts in timestamps if ts is not None)
