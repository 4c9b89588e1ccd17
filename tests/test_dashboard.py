# tests/test_dashboard.py
from datetime import date

from lingo_tutor.db import init_db
from lingo_tutor.seed import seed_all
from lingo_tutor.progress import (
    introduce_words, record_activity, record_grammar_result, record_vocab_result,
)
from lingo_tutor.dashboard import (
    get_category_stats, get_grammar_overview, get_learner_summary,
    get_mastery_color, get_mastery_label,
)

LEARNER = "learner-1"
MONDAY = date(2026, 3, 2)


def test_mastery_label():
    assert get_mastery_label(100) == "MASTERED"
    assert get_mastery_label(60) == "STRONG"
    assert get_mastery_label(20) == "LEARNING"
    assert get_mastery_label(0) == "NEW"


def test_mastery_color():
    assert get_mastery_color(100) == "green"
    assert get_mastery_color(0) == "red"


def test_category_stats_no_progress(tmp_db):
    init_db(tmp_db)
    seed_all(tmp_db)
    stats = get_category_stats(tmp_db, LEARNER)
    assert len(stats) == 7
    assert sum(c["word_count"] for c in stats) == 28
    assert all(c["learned_count"] == 0 for c in stats)
    assert all(c["mastery_percentage"] == 0.0 for c in stats)


def test_category_stats_counts_reviewed_words(tmp_db):
    init_db(tmp_db)
    seed_all(tmp_db)
    introduce_words(tmp_db, LEARNER, [14, 15, 16, 17], MONDAY)
    # Introduced but never reviewed words are still new
    record_vocab_result(tmp_db, LEARNER, 14, True, date(2026, 3, 3))
    family = next(c for c in get_category_stats(tmp_db, LEARNER) if c["name"] == "Family")
    assert family["word_count"] == 4
    assert family["learned_count"] == 1
    assert family["mastery_percentage"] == 25.0


def test_grammar_overview_defaults_to_zero(tmp_db):
    init_db(tmp_db)
    seed_all(tmp_db)
    record_grammar_result(tmp_db, LEARNER, 3, True, MONDAY)
    overview = get_grammar_overview(tmp_db, LEARNER)
    assert [t["topic_id"] for t in overview] == [1, 2, 3, 4]
    assert overview[0]["mastery_percentage"] == 0
    assert overview[0]["last_practiced_at"] is None
    assert overview[2]["mastery_percentage"] == 20.0
    assert overview[2]["exercises_completed"] == 1


def test_learner_summary(tmp_db):
    init_db(tmp_db)
    seed_all(tmp_db)
    introduce_words(tmp_db, LEARNER, [1, 2, 3], MONDAY)
    tuesday = date(2026, 3, 3)
    record_vocab_result(tmp_db, LEARNER, 1, True, tuesday)
    record_activity(tmp_db, LEARNER, MONDAY)
    record_activity(tmp_db, LEARNER, tuesday)
    summary = get_learner_summary(tmp_db, LEARNER, tuesday)
    assert summary["current_streak"] == 2
    assert summary["longest_streak"] == 2
    assert summary["words_learned"] == 1
    assert summary["words_mastered"] == 0
    assert summary["due_today"] == 2


def test_learner_summary_lapsed_streak(tmp_db):
    init_db(tmp_db)
    seed_all(tmp_db)
    record_activity(tmp_db, LEARNER, MONDAY)
    summary = get_learner_summary(tmp_db, LEARNER, date(2026, 3, 5))
    assert summary["current_streak"] == 0
    assert summary["longest_streak"] == 1


def test_learner_summary_empty(tmp_db):
    init_db(tmp_db)
    summary = get_learner_summary(tmp_db, LEARNER, MONDAY)
    assert summary == {
        "current_streak": 0,
        "longest_streak": 0,
        "words_learned": 0,
        "words_mastered": 0,
        "due_today": 0,
    }
