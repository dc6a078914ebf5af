"""
Streak calculation

Pure function over completion dates: no storage access, no side effects.
"""
from datetime import date, timedelta
from typing import Iterable, Optional

from app.models.routine import Streaks
from app.utils.timezone import get_utc_today


def _day_gap(earlier: date, later: date) -> int:
    # Whole UTC days between two calendar dates
    return round((later - earlier) / timedelta(days=1))


def _trailing_run(days: list, anchor: date) -> int:
    """Count consecutive days ending at anchor, walking backwards from the newest date."""
    count = 0
    target = anchor
    for day in reversed(days):
        if day == target:
            count += 1
            target -= timedelta(days=1)
        elif day < target:
            break
    return count


def calculate_streaks(dates: Iterable[str], today: Optional[date] = None) -> Streaks:
    """
    Compute current and maximum streaks from completion dates

    Args:
        dates: ISO dates (YYYY-MM-DD), unordered, duplicates allowed
        today: Reference date; defaults to today's date in UTC

    Returns:
        Streaks where current is the run ending at today (when the latest
        completion is today) or else at the latest completion, and max is
        the longest run seen
    """
    # ISO strings sort chronologically
    unique = sorted(set(dates))
    if not unique:
        return Streaks(current=0, max=0)

    days = [date.fromisoformat(d) for d in unique]

    longest = 1
    running = 1
    for prev, current in zip(days, days[1:]):
        running = running + 1 if _day_gap(prev, current) == 1 else 1
        longest = max(longest, running)

    today = today or get_utc_today()
    anchor = today if days[-1] == today else days[-1]
    trailing = _trailing_run(days, anchor)

    return Streaks(current=trailing, max=max(longest, trailing))
