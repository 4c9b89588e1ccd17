"""Grammar topic mastery tracking.

Mastery counts distinct days on which the learner answered a topic correctly.
Unlike vocabulary scheduling, a wrong answer never lowers it.
"""
from dataclasses import replace
from datetime import date, datetime

from lingo_tutor.config import SCHEDULER
from lingo_tutor.models import GrammarProgress, parse_date
from lingo_tutor.sm2 import is_same_day


def mastery_percentage(unique_days_correct: int) -> float:
    return min(unique_days_correct * 100 / SCHEDULER.mastery_days, 100.0)


def update_mastery(
    progress: GrammarProgress | None,
    is_correct: bool,
    today: date,
    now: datetime | None = None,
) -> GrammarProgress:
    today = parse_date(today)
    now = now or datetime.now()

    if progress is None:
        days = 1 if is_correct else 0
        return GrammarProgress(
            mastery_percentage=mastery_percentage(days),
            exercises_completed=1,
            unique_days_correct=days,
            last_correct_date=today if is_correct else None,
            last_practiced_at=now,
        )

    days = progress.unique_days_correct
    last_correct = progress.last_correct_date
    if is_correct:
        if not is_same_day(last_correct, today):
            days += 1
        last_correct = today
    return replace(
        progress,
        mastery_percentage=mastery_percentage(days),
        exercises_completed=progress.exercises_completed + 1,
        unique_days_correct=days,
        last_correct_date=last_correct,
        last_practiced_at=now,
    )


def difficulty_range(mastery: float) -> tuple[int, int]:
    """Exercise difficulty band (inclusive) to drill at a given mastery."""
    if mastery < 30:
        return 1, 4
    if mastery < 70:
        return 3, 7
    return 5, 10


def weakest_topic(topics: list[dict]) -> dict | None:
    """Lowest-mastery topic that has been practiced and is still under 70%."""
    candidates = [
        t for t in topics
        if t["exercises_completed"] > 0 and t["mastery_percentage"] < 70
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda t: t["mastery_percentage"])
