"""
"Today's moods" query for the shared map view.

Today spans [local midnight, next local midnight). Each user can be capped to
their most recent moods in that range (one pin per user by default).
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from geomood.core.models import MoodEntry, UserMoodHistory
from geomood.core.ports import UserRepository

logger = logging.getLogger(__name__)

DEFAULT_PER_USER_LIMIT = 1


def today_bounds(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """
    Returns (start of today, start of tomorrow).

    Without ``now`` both bounds are local server midnights, each carrying its
    own UTC offset so that a DST change during the day is honoured.
    """
    if now is None:
        midnight = datetime.now().replace(hour=0, minute=0, second=0, microsecond=0)
        return midnight.astimezone(), (midnight + timedelta(days=1)).astimezone()

    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


def cap_per_user(histories: List[UserMoodHistory],
                 limit: Optional[int]) -> List[MoodEntry]:
    """
    Flattens histories, keeping each user's ``limit`` most recent moods.

    A limit of None (or 0) keeps everything.
    """
    moods: List[MoodEntry] = []
    for history in histories:
        ordered = sorted(history.moods, key=lambda m: m.created_at, reverse=True)
        moods.extend(ordered[:limit] if limit else ordered)
    return moods


class GetTodaysMoods:
    """Lists every user's moods posted today."""

    def __init__(self, user_repository: UserRepository,
                 per_user_limit: Optional[int] = DEFAULT_PER_USER_LIMIT):
        self.user_repository = user_repository
        self.per_user_limit = per_user_limit

    def get_todays_moods(self, now: Optional[datetime] = None) -> List[MoodEntry]:
        start, end = today_bounds(now)
        histories = self.user_repository.moods_by_date_range(start, end)
        moods = cap_per_user(histories, self.per_user_limit)
        logger.info(f"[TODAY] {len(moods)} moods from {len(histories)} users "
                    f"between {start.isoformat()} and {end.isoformat()}")
        return moods
