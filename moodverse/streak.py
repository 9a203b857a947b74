"""
Daily visit streak arithmetic.
"""

from datetime import date, timedelta
from typing import NamedTuple


class StreakUpdate(NamedTuple):
    streak: int
    last_visit: date | None


def advance(last_visit: date | None, today: date, streak: int) -> StreakUpdate:
    """
    Compute the streak after a visit on ``today``.

    A second visit on the same day changes nothing. A visit the day after
    the last one extends the streak; a first visit or any other gap starts
    over at 1. A ``last_visit`` later than ``today`` (clock moved back)
    restarts the streak but keeps the later date.
    """
    if last_visit == today:
        return StreakUpdate(streak, last_visit)

    if last_visit is not None and last_visit == today - timedelta(days=1):
        return StreakUpdate(streak + 1, today)

    if last_visit is not None and last_visit > today:
        return StreakUpdate(1, last_visit)

    return StreakUpdate(1, today)
