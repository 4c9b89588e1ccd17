"""Learner progress persistence.

Each record_* helper reads a fresh snapshot, applies the pure update and
writes the whole record back inside one transaction. Concurrent writers to
the same record resolve as last-write-wins.
"""
import logging
from contextlib import contextmanager
from datetime import date, datetime, timedelta

from lingo_tutor.catalog import vocab_from_row
from lingo_tutor.config import LIMITS
from lingo_tutor.db import get_connection
from lingo_tutor.errors import NotFoundError
from lingo_tutor.mastery import update_mastery
from lingo_tutor.models import (
    GrammarProgress, GrammarRef, QuizQuestion, ReviewableVocabItem, ReviewState,
    StreakState, VocabularyRef, parse_date, parse_datetime,
)
from lingo_tutor.sm2 import schedule_review
from lingo_tutor.streak import update_streak

logger = logging.getLogger(__name__)


@contextmanager
def transaction(db_path: str):
    """Connection holding a write lock for the duration of the block."""
    conn = get_connection(db_path)
    try:
        conn.isolation_level = None
        conn.execute("BEGIN IMMEDIATE")
        try:
            yield conn
            conn.execute("COMMIT")
        except Exception:
            conn.execute("ROLLBACK")
            raise
    finally:
        conn.close()


def _iso(value) -> str | None:
    return value.isoformat() if value is not None else None


# --- Vocabulary review state ---


def review_from_row(row) -> ReviewState:
    return ReviewState(
        ease_factor=row["ease_factor"],
        interval_days=row["interval_days"],
        repetitions=row["repetitions"],
        next_review_date=parse_date(row["next_review_date"]),
        last_reviewed_at=parse_datetime(row["last_reviewed_at"]),
        times_correct=row["times_correct"],
        times_incorrect=row["times_incorrect"],
        unique_days_correct=row["unique_days_correct"],
        last_correct_date=parse_date(row["last_correct_date"]),
        status=row["status"],
    )


def _write_review_state(conn, learner_id: str, vocabulary_id: int, state: ReviewState) -> None:
    conn.execute(
        """INSERT INTO review_states (learner_id, vocabulary_id, ease_factor, interval_days,
            repetitions, next_review_date, last_reviewed_at, times_correct, times_incorrect,
            unique_days_correct, last_correct_date, status)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(learner_id, vocabulary_id) DO UPDATE SET
            ease_factor=excluded.ease_factor, interval_days=excluded.interval_days,
            repetitions=excluded.repetitions, next_review_date=excluded.next_review_date,
            last_reviewed_at=excluded.last_reviewed_at, times_correct=excluded.times_correct,
            times_incorrect=excluded.times_incorrect,
            unique_days_correct=excluded.unique_days_correct,
            last_correct_date=excluded.last_correct_date, status=excluded.status""",
        (
            learner_id, vocabulary_id, state.ease_factor, state.interval_days,
            state.repetitions, _iso(state.next_review_date), _iso(state.last_reviewed_at),
            state.times_correct, state.times_incorrect, state.unique_days_correct,
            _iso(state.last_correct_date), state.status,
        ),
    )


def get_review_state(db_path: str, learner_id: str, vocabulary_id: int) -> ReviewState | None:
    conn = get_connection(db_path)
    row = conn.execute(
        "SELECT * FROM review_states WHERE learner_id = ? AND vocabulary_id = ?",
        (learner_id, vocabulary_id),
    ).fetchone()
    conn.close()
    return review_from_row(row) if row else None


def save_review_state(db_path: str, learner_id: str, vocabulary_id: int, state: ReviewState) -> None:
    with transaction(db_path) as conn:
        _write_review_state(conn, learner_id, vocabulary_id, state)


def introduce_words(db_path: str, learner_id: str, vocabulary_ids: list, today: date) -> int:
    """Create default review state for words the learner has not met yet. Returns how many were new."""
    created = 0
    with transaction(db_path) as conn:
        for vocabulary_id in vocabulary_ids:
            exists = conn.execute(
                "SELECT 1 FROM review_states WHERE learner_id = ? AND vocabulary_id = ?",
                (learner_id, vocabulary_id),
            ).fetchone()
            if exists:
                continue
            _write_review_state(conn, learner_id, vocabulary_id, ReviewState.introduce(today))
            created += 1
    logger.debug("Introduced %d words for learner %s", created, learner_id)
    return created


def get_new_words(db_path: str, learner_id: str, limit: int = LIMITS.new_words) -> list:
    """Vocabulary the learner has never been introduced to, in catalog order."""
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT v.* FROM vocabulary v
        WHERE NOT EXISTS (
            SELECT 1 FROM review_states r
            WHERE r.vocabulary_id = v.id AND r.learner_id = ?
        )
        ORDER BY v.id
        LIMIT ?""",
        (learner_id, limit),
    ).fetchall()
    conn.close()
    return [vocab_from_row(r) for r in rows]


def get_due_words(
    db_path: str, learner_id: str, today: date, limit: int = LIMITS.due_words,
    category: str | None = None,
) -> list[ReviewableVocabItem]:
    """Words whose next review date is on or before today, most overdue first."""
    query = """SELECT v.*, r.ease_factor, r.interval_days, r.repetitions, r.next_review_date,
            r.last_reviewed_at, r.times_correct, r.times_incorrect, r.unique_days_correct,
            r.last_correct_date, r.status
        FROM review_states r
        JOIN vocabulary v ON r.vocabulary_id = v.id
        WHERE r.learner_id = ? AND r.next_review_date <= ?"""
    params: list = [learner_id, parse_date(today).isoformat()]
    if category is not None:
        query += " AND lower(v.category) = lower(?)"
        params.append(category)
    query += " ORDER BY r.next_review_date ASC, RANDOM() LIMIT ?"
    params.append(limit)
    conn = get_connection(db_path)
    rows = conn.execute(query, params).fetchall()
    conn.close()
    return [ReviewableVocabItem(item=vocab_from_row(r), state=review_from_row(r)) for r in rows]


def record_vocab_result(
    db_path: str,
    learner_id: str,
    vocabulary_id: int,
    is_correct: bool,
    today: date,
    now: datetime | None = None,
) -> ReviewState:
    with transaction(db_path) as conn:
        row = conn.execute(
            "SELECT * FROM review_states WHERE learner_id = ? AND vocabulary_id = ?",
            (learner_id, vocabulary_id),
        ).fetchone()
        if row is None:
            raise NotFoundError(
                f"Vocabulary item {vocabulary_id} has not been introduced to learner {learner_id}"
            )
        state = schedule_review(review_from_row(row), is_correct, today, now=now)
        _write_review_state(conn, learner_id, vocabulary_id, state)
    logger.debug(
        "Review %s/%s correct=%s -> interval %d, status %s",
        learner_id, vocabulary_id, is_correct, state.interval_days, state.status,
    )
    return state


# --- Grammar progress ---


def grammar_from_row(row) -> GrammarProgress:
    return GrammarProgress(
        mastery_percentage=row["mastery_percentage"],
        exercises_completed=row["exercises_completed"],
        unique_days_correct=row["unique_days_correct"],
        last_correct_date=parse_date(row["last_correct_date"]),
        last_practiced_at=parse_datetime(row["last_practiced_at"]),
    )


def _write_grammar_progress(conn, learner_id: str, topic_id: int, progress: GrammarProgress) -> None:
    conn.execute(
        """INSERT INTO grammar_progress (learner_id, topic_id, mastery_percentage,
            exercises_completed, unique_days_correct, last_correct_date, last_practiced_at)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(learner_id, topic_id) DO UPDATE SET
            mastery_percentage=excluded.mastery_percentage,
            exercises_completed=excluded.exercises_completed,
            unique_days_correct=excluded.unique_days_correct,
            last_correct_date=excluded.last_correct_date,
            last_practiced_at=excluded.last_practiced_at""",
        (
            learner_id, topic_id, progress.mastery_percentage, progress.exercises_completed,
            progress.unique_days_correct, _iso(progress.last_correct_date),
            _iso(progress.last_practiced_at),
        ),
    )


def get_grammar_progress(db_path: str, learner_id: str, topic_id: int) -> GrammarProgress | None:
    conn = get_connection(db_path)
    row = conn.execute(
        "SELECT * FROM grammar_progress WHERE learner_id = ? AND topic_id = ?",
        (learner_id, topic_id),
    ).fetchone()
    conn.close()
    return grammar_from_row(row) if row else None


def save_grammar_progress(db_path: str, learner_id: str, topic_id: int, progress: GrammarProgress) -> None:
    with transaction(db_path) as conn:
        _write_grammar_progress(conn, learner_id, topic_id, progress)


def record_grammar_result(
    db_path: str,
    learner_id: str,
    topic_id: int,
    is_correct: bool,
    today: date,
    now: datetime | None = None,
) -> GrammarProgress:
    with transaction(db_path) as conn:
        row = conn.execute(
            "SELECT * FROM grammar_progress WHERE learner_id = ? AND topic_id = ?",
            (learner_id, topic_id),
        ).fetchone()
        previous = grammar_from_row(row) if row else None
        progress = update_mastery(previous, is_correct, today, now=now)
        _write_grammar_progress(conn, learner_id, topic_id, progress)
    logger.debug(
        "Grammar %s/%s correct=%s -> mastery %.0f%%",
        learner_id, topic_id, is_correct, progress.mastery_percentage,
    )
    return progress


# --- Streaks and activity ---


def streak_from_row(row) -> StreakState:
    return StreakState(
        current_streak=row["current_streak"],
        longest_streak=row["longest_streak"],
        last_activity_date=parse_date(row["last_activity_date"]),
    )


def _write_streak(conn, learner_id: str, state: StreakState) -> None:
    conn.execute(
        """INSERT INTO streaks (learner_id, current_streak, longest_streak, last_activity_date)
        VALUES (?, ?, ?, ?)
        ON CONFLICT(learner_id) DO UPDATE SET
            current_streak=excluded.current_streak,
            longest_streak=excluded.longest_streak,
            last_activity_date=excluded.last_activity_date""",
        (learner_id, state.current_streak, state.longest_streak, _iso(state.last_activity_date)),
    )


def get_streak(db_path: str, learner_id: str) -> StreakState:
    """The learner's streak; a learner with no activity yet gets an empty one."""
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM streaks WHERE learner_id = ?", (learner_id,)).fetchone()
    conn.close()
    return streak_from_row(row) if row else StreakState()


def save_streak(db_path: str, learner_id: str, state: StreakState) -> None:
    with transaction(db_path) as conn:
        _write_streak(conn, learner_id, state)


def record_activity(db_path: str, learner_id: str, today: date) -> StreakState:
    """Count one completed lesson, quiz or drill toward the daily streak."""
    with transaction(db_path) as conn:
        row = conn.execute("SELECT * FROM streaks WHERE learner_id = ?", (learner_id,)).fetchone()
        previous = streak_from_row(row) if row else StreakState()
        state = update_streak(previous, today)
        _write_streak(conn, learner_id, state)
    logger.debug("Streak for %s is now %d", learner_id, state.current_streak)
    return state


def log_daily_activity(
    db_path: str,
    learner_id: str,
    today: date,
    questions_answered: int = 0,
    correct_answers: int = 0,
    sessions_completed: int = 0,
) -> None:
    """Add to the learner's activity totals for the day."""
    with transaction(db_path) as conn:
        conn.execute(
            """INSERT INTO daily_activity (learner_id, activity_date, questions_answered,
                correct_answers, sessions_completed)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(learner_id, activity_date) DO UPDATE SET
                questions_answered = questions_answered + excluded.questions_answered,
                correct_answers = correct_answers + excluded.correct_answers,
                sessions_completed = sessions_completed + excluded.sessions_completed""",
            (learner_id, parse_date(today).isoformat(), questions_answered,
             correct_answers, sessions_completed),
        )


def get_weekly_activity(db_path: str, learner_id: str, today: date) -> list[dict]:
    """Activity rows for the seven days ending today, oldest first."""
    today = parse_date(today)
    since = (today - timedelta(days=6)).isoformat()
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT * FROM daily_activity
        WHERE learner_id = ? AND activity_date BETWEEN ? AND ?
        ORDER BY activity_date""",
        (learner_id, since, today.isoformat()),
    ).fetchall()
    conn.close()
    return [
        {
            "activity_date": parse_date(r["activity_date"]),
            "questions_answered": r["questions_answered"],
            "correct_answers": r["correct_answers"],
            "sessions_completed": r["sessions_completed"],
        }
        for r in rows
    ]


def apply_quiz_answer(
    db_path: str,
    learner_id: str,
    question: QuizQuestion,
    is_correct: bool,
    today: date,
    now: datetime | None = None,
):
    """Feed one answered quiz question back into the matching tracker."""
    ref = question.source_ref
    if isinstance(ref, VocabularyRef):
        result = record_vocab_result(db_path, learner_id, ref.vocabulary_id, is_correct, today, now=now)
    elif isinstance(ref, GrammarRef):
        result = record_grammar_result(db_path, learner_id, ref.topic_id, is_correct, today, now=now)
    else:
        raise TypeError(f"Unsupported quiz source reference: {ref!r}")
    log_daily_activity(
        db_path, learner_id, today, questions_answered=1, correct_answers=int(is_correct),
    )
    return result
