# tests/test_sm2.py
from dataclasses import replace
from datetime import date, datetime, timedelta

import pytest

from lingo_tutor.models import ReviewState
from lingo_tutor.sm2 import is_same_day, schedule_review, sm2_update

TODAY = date(2026, 3, 2)
NOW = datetime(2026, 3, 2, 9, 30)


def fresh_state():
    return ReviewState.introduce(TODAY - timedelta(days=1))


def test_sm2_first_review_correct():
    """First correct answer: interval=1, repetitions=1."""
    result = sm2_update(quality=4, repetitions=0, ease_factor=2.5, interval=1)
    assert result["interval"] == 1
    assert result["repetitions"] == 1
    assert result["ease_factor"] == 2.5


def test_sm2_second_review_correct():
    """Second correct answer: interval=6."""
    result = sm2_update(quality=4, repetitions=1, ease_factor=2.5, interval=1)
    assert result["interval"] == 6
    assert result["repetitions"] == 2


def test_sm2_third_review_correct():
    """Third+ correct: interval = old_interval * new ease factor."""
    result = sm2_update(quality=4, repetitions=2, ease_factor=2.5, interval=6)
    assert result["interval"] == 15  # round(6 * 2.5)
    assert result["repetitions"] == 3


def test_sm2_incorrect_resets():
    """Quality < 3 resets repetitions and interval."""
    result = sm2_update(quality=2, repetitions=5, ease_factor=2.5, interval=30)
    assert result["repetitions"] == 0
    assert result["interval"] == 1


def test_sm2_ease_factor_minimum():
    """Ease factor never drops below 1.3."""
    result = sm2_update(quality=0, repetitions=0, ease_factor=1.3, interval=1)
    assert result["ease_factor"] == 1.3


def test_sm2_easy_increases_ease():
    result = sm2_update(quality=5, repetitions=2, ease_factor=2.5, interval=6)
    assert result["ease_factor"] == pytest.approx(2.6)


# --- schedule_review ---


def test_first_correct_review():
    state = schedule_review(fresh_state(), True, TODAY, now=NOW)
    assert state.ease_factor == pytest.approx(2.5)
    assert state.interval_days == 1
    assert state.repetitions == 1
    assert state.status == "learning"
    assert state.unique_days_correct == 1
    assert state.times_correct == 1
    assert state.last_correct_date == TODAY
    assert state.next_review_date == TODAY + timedelta(days=1)
    assert state.last_reviewed_at == NOW


def test_first_incorrect_review():
    state = schedule_review(fresh_state(), False, TODAY, now=NOW)
    # 2.5 + (0.1 - 3 * (0.08 + 3 * 0.02))
    assert state.ease_factor == pytest.approx(2.18)
    assert state.interval_days == 1
    assert state.repetitions == 0
    assert state.status == "learning"
    assert state.times_incorrect == 1
    assert state.unique_days_correct == 0
    assert state.last_correct_date is None
    assert state.next_review_date == TODAY + timedelta(days=1)


def test_interval_ladder_across_days():
    state = fresh_state()
    intervals = []
    day = TODAY
    for _ in range(4):
        state = schedule_review(state, True, day, now=NOW)
        intervals.append(state.interval_days)
        day = state.next_review_date
    assert intervals == [1, 6, 15, 38]


def test_incorrect_resets_regardless_of_prior_state():
    state = replace(fresh_state(), repetitions=7, interval_days=90, ease_factor=2.9)
    state = schedule_review(state, False, TODAY, now=NOW)
    assert state.repetitions == 0
    assert state.interval_days == 1


def test_ease_factor_floor_after_repeated_failures():
    state = fresh_state()
    for _ in range(10):
        state = schedule_review(state, False, TODAY, now=NOW)
        assert state.ease_factor >= 1.3
    assert state.ease_factor == pytest.approx(1.3)


def test_same_day_correct_answers_count_one_unique_day():
    state = fresh_state()
    for _ in range(4):
        state = schedule_review(state, True, TODAY, now=NOW)
    assert state.unique_days_correct == 1
    assert state.times_correct == 4
    assert state.repetitions == 4


def test_mastered_after_five_distinct_days():
    state = fresh_state()
    for offset in range(5):
        assert state.status != "mastered"
        state = schedule_review(state, True, TODAY + timedelta(days=offset), now=NOW)
    assert state.unique_days_correct == 5
    assert state.status == "mastered"


def test_incorrect_keeps_unique_days_and_mastery():
    state = replace(
        fresh_state(), unique_days_correct=5, last_correct_date=TODAY - timedelta(days=2),
        status="mastered",
    )
    state = schedule_review(state, False, TODAY, now=NOW)
    assert state.unique_days_correct == 5
    assert state.last_correct_date == TODAY - timedelta(days=2)
    assert state.status == "mastered"


def test_schedule_review_does_not_mutate_input():
    original = fresh_state()
    snapshot = replace(original)
    schedule_review(original, True, TODAY, now=NOW)
    assert original == snapshot


def test_schedule_review_accepts_datetime_today():
    state = schedule_review(fresh_state(), True, datetime(2026, 3, 2, 8, 0), now=NOW)
    again = schedule_review(state, True, datetime(2026, 3, 2, 23, 59), now=NOW)
    assert again.unique_days_correct == 1
    assert again.next_review_date == date(2026, 3, 8)


def test_is_same_day():
    assert is_same_day(TODAY, datetime(2026, 3, 2, 23, 0))
    assert not is_same_day(TODAY - timedelta(days=1), TODAY)
    assert not is_same_day(None, TODAY)
