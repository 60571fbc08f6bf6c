"""Daily-activity streak tracking.

A streak rewards consistency, not volume: it moves at most once per
calendar day, however many attempts land on that day.
"""

from __future__ import annotations

from datetime import date

from mastertrack.engine.models import StreakState

STREAK_ACCURACY_THRESHOLD = 70


def touch(streak: StreakState, accuracy_now: float, today: date) -> StreakState:
    """Advance or reset ``streak`` for ``today``. Mutates and returns it."""
    if streak.last_updated_date == today:
        return streak

    if accuracy_now >= STREAK_ACCURACY_THRESHOLD:
        streak.current += 1
        streak.best = max(streak.best, streak.current)
    else:
        streak.current = 0

    streak.last_updated_date = today
    return streak
