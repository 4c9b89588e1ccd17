"""Daily activity streaks."""
from dataclasses import replace
from datetime import date

from lingo_tutor.models import StreakState, parse_date


def calendar_days_between(earlier, later) -> int | None:
    """Whole calendar days from `earlier` to `later`, or None if `earlier` is unset."""
    if earlier is None:
        return None
    return (parse_date(later) - parse_date(earlier)).days


def update_streak(state: StreakState, today: date) -> StreakState:
    """Register one activity on `today`. Repeat calls on the same day are no-ops."""
    today = parse_date(today)
    current = state.current_streak
    longest = state.longest_streak
    day_diff = calendar_days_between(state.last_activity_date, today)

    if day_diff == 0:
        pass
    elif day_diff == 1:
        current += 1
        longest = max(longest, current)
    else:
        current = 1
        longest = max(longest, current)

    return replace(
        state,
        current_streak=current,
        longest_streak=longest,
        last_activity_date=today,
    )


def is_streak_alive(state: StreakState, today: date) -> bool:
    """True while the streak can still be extended, i.e. last activity was today or yesterday."""
    day_diff = calendar_days_between(state.last_activity_date, today)
    return day_diff is not None and day_diff <= 1
