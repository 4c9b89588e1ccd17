"""SM-2 spaced repetition scheduling for vocabulary review."""
from dataclasses import replace
from datetime import date, datetime, timedelta

from lingo_tutor.config import SCHEDULER
from lingo_tutor.models import (
    ReviewState, STATUS_LEARNING, STATUS_MASTERED, parse_date,
)


def sm2_update(
    quality: float,
    repetitions: int,
    ease_factor: float,
    interval: int,
) -> dict:
    """Calculate next review parameters using SM-2.

    Args:
        quality: Rating 0-5 (0=complete blackout, 5=perfect)
        repetitions: Number of consecutive correct reviews
        ease_factor: Current ease factor (minimum 1.3)
        interval: Current interval in days

    Returns:
        Dict with updated interval, repetitions, ease_factor.
    """
    new_ef = ease_factor + (0.1 - (5 - quality) * (0.08 + (5 - quality) * 0.02))
    new_ef = round(max(SCHEDULER.ease_floor, new_ef), 2)

    if quality >= 3:
        if repetitions == 0:
            new_interval = 1
        elif repetitions == 1:
            new_interval = 6
        else:
            new_interval = max(1, round(interval * new_ef))
        new_repetitions = repetitions + 1
    else:
        new_repetitions = 0
        new_interval = 1

    return {
        "interval": new_interval,
        "repetitions": new_repetitions,
        "ease_factor": new_ef,
    }


def is_same_day(previous, today) -> bool:
    """True when `previous` falls on the same calendar day as `today`."""
    if previous is None:
        return False
    return parse_date(previous) == parse_date(today)


def schedule_review(
    state: ReviewState,
    is_correct: bool,
    today: date,
    now: datetime | None = None,
) -> ReviewState:
    """Return the review state after one graded answer.

    Ease, interval and repetitions move on every answer. The unique-days
    counter that gates mastery moves at most once per calendar day, and only
    on correct answers.
    """
    today = parse_date(today)
    now = now or datetime.now()
    quality = SCHEDULER.correct_quality if is_correct else SCHEDULER.incorrect_quality
    updated = sm2_update(
        quality=quality,
        repetitions=state.repetitions,
        ease_factor=state.ease_factor,
        interval=state.interval_days,
    )

    times_correct = state.times_correct
    times_incorrect = state.times_incorrect
    unique_days = state.unique_days_correct
    last_correct = state.last_correct_date
    if is_correct:
        times_correct += 1
        if not is_same_day(last_correct, today):
            unique_days += 1
        last_correct = today
    else:
        times_incorrect += 1

    status = STATUS_MASTERED if unique_days >= SCHEDULER.mastery_days else STATUS_LEARNING
    return replace(
        state,
        ease_factor=updated["ease_factor"],
        interval_days=updated["interval"],
        repetitions=updated["repetitions"],
        next_review_date=today + timedelta(days=updated["interval"]),
        last_reviewed_at=now,
        times_correct=times_correct,
        times_incorrect=times_incorrect,
        unique_days_correct=unique_days,
        last_correct_date=last_correct,
        status=status,
    )
