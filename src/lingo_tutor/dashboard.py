"""Progress dashboard statistics."""
from datetime import date

from lingo_tutor.db import get_connection
from lingo_tutor.models import STATUS_MASTERED, STATUS_NEW, parse_date, parse_datetime
from lingo_tutor.progress import get_streak
from lingo_tutor.streak import is_streak_alive


def get_mastery_label(score: float) -> str:
    if score >= 100:
        return "MASTERED"
    elif score >= 60:
        return "STRONG"
    elif score > 0:
        return "LEARNING"
    return "NEW"


def get_mastery_color(score: float) -> str:
    if score >= 100:
        return "green"
    elif score >= 60:
        return "yellow"
    elif score > 0:
        return "dark_orange"
    return "red"


def get_category_stats(db_path: str, learner_id: str) -> list[dict]:
    """Words per category and how many the learner has started reviewing."""
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT COALESCE(v.category, 'other') AS category,
            COUNT(*) AS total,
            SUM(CASE WHEN r.status IS NOT NULL AND r.status != ? THEN 1 ELSE 0 END) AS learned
        FROM vocabulary v
        LEFT JOIN review_states r ON r.vocabulary_id = v.id AND r.learner_id = ?
        GROUP BY COALESCE(v.category, 'other')
        ORDER BY category""",
        (STATUS_NEW, learner_id),
    ).fetchall()
    conn.close()
    return [
        {
            "name": r["category"].capitalize(),
            "word_count": r["total"],
            "learned_count": r["learned"],
            "mastery_percentage": round(r["learned"] / r["total"] * 100, 1) if r["total"] else 0.0,
        }
        for r in rows
    ]


def get_grammar_overview(db_path: str, learner_id: str) -> list[dict]:
    """Every grammar topic with the learner's progress; untouched topics read as zero."""
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT t.id, t.title, t.title_fr, t.sort_order,
            COALESCE(p.mastery_percentage, 0) AS mastery_percentage,
            COALESCE(p.unique_days_correct, 0) AS unique_days_correct,
            COALESCE(p.exercises_completed, 0) AS exercises_completed,
            p.last_practiced_at
        FROM grammar_topics t
        LEFT JOIN grammar_progress p ON p.topic_id = t.id AND p.learner_id = ?
        ORDER BY t.sort_order, t.id""",
        (learner_id,),
    ).fetchall()
    conn.close()
    return [
        {
            "topic_id": r["id"],
            "title": r["title"],
            "title_fr": r["title_fr"],
            "mastery_percentage": r["mastery_percentage"],
            "unique_days_correct": r["unique_days_correct"],
            "exercises_completed": r["exercises_completed"],
            "last_practiced_at": parse_datetime(r["last_practiced_at"]),
        }
        for r in rows
    ]


def get_learner_summary(db_path: str, learner_id: str, today: date) -> dict:
    today = parse_date(today)
    streak = get_streak(db_path, learner_id)
    conn = get_connection(db_path)
    row = conn.execute(
        """SELECT
            SUM(CASE WHEN status != ? THEN 1 ELSE 0 END) AS learned,
            SUM(CASE WHEN status = ? THEN 1 ELSE 0 END) AS mastered,
            SUM(CASE WHEN next_review_date <= ? THEN 1 ELSE 0 END) AS due
        FROM review_states WHERE learner_id = ?""",
        (STATUS_NEW, STATUS_MASTERED, today.isoformat(), learner_id),
    ).fetchone()
    conn.close()
    return {
        # A stored streak that missed yesterday is already broken
        "current_streak": streak.current_streak if is_streak_alive(streak, today) else 0,
        "longest_streak": streak.longest_streak,
        "words_learned": row["learned"] or 0,
        "words_mastered": row["mastered"] or 0,
        "due_today": row["due"] or 0,
    }
