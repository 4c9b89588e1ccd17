"""Database initialization and connection management."""
import os
import sqlite3
from pathlib import Path

DEFAULT_DB_PATH = os.environ.get(
    "LINGO_TUTOR_DB", str(Path.home() / ".lingo_tutor" / "tutor.db")
)

SCHEMA = """
CREATE TABLE IF NOT EXISTS vocabulary (
    id INTEGER PRIMARY KEY,
    word TEXT NOT NULL,
    translation TEXT NOT NULL,
    category TEXT,
    part_of_speech TEXT,
    gender TEXT,
    example_sentence TEXT DEFAULT '',
    example_translation TEXT DEFAULT ''
);

CREATE TABLE IF NOT EXISTS grammar_topics (
    id INTEGER PRIMARY KEY,
    title TEXT NOT NULL,
    title_fr TEXT DEFAULT '',
    description TEXT DEFAULT '',
    explanation TEXT DEFAULT '',
    sort_order INTEGER DEFAULT 0
);

CREATE TABLE IF NOT EXISTS grammar_exercises (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    topic_id INTEGER NOT NULL REFERENCES grammar_topics(id),
    exercise_type TEXT NOT NULL,
    difficulty INTEGER DEFAULT 1,
    content TEXT NOT NULL,
    hint TEXT DEFAULT ''
);

CREATE TABLE IF NOT EXISTS review_states (
    learner_id TEXT NOT NULL,
    vocabulary_id INTEGER NOT NULL REFERENCES vocabulary(id),
    ease_factor REAL NOT NULL DEFAULT 2.5,
    interval_days INTEGER NOT NULL DEFAULT 1,
    repetitions INTEGER NOT NULL DEFAULT 0,
    next_review_date TEXT NOT NULL,
    last_reviewed_at TEXT,
    times_correct INTEGER NOT NULL DEFAULT 0,
    times_incorrect INTEGER NOT NULL DEFAULT 0,
    unique_days_correct INTEGER NOT NULL DEFAULT 0,
    last_correct_date TEXT,
    status TEXT NOT NULL DEFAULT 'new',
    PRIMARY KEY (learner_id, vocabulary_id)
);

CREATE TABLE IF NOT EXISTS grammar_progress (
    learner_id TEXT NOT NULL,
    topic_id INTEGER NOT NULL REFERENCES grammar_topics(id),
    mastery_percentage REAL NOT NULL DEFAULT 0,
    exercises_completed INTEGER NOT NULL DEFAULT 0,
    unique_days_correct INTEGER NOT NULL DEFAULT 0,
    last_correct_date TEXT,
    last_practiced_at TEXT,
    PRIMARY KEY (learner_id, topic_id)
);

CREATE TABLE IF NOT EXISTS streaks (
    learner_id TEXT PRIMARY KEY,
    current_streak INTEGER NOT NULL DEFAULT 0,
    longest_streak INTEGER NOT NULL DEFAULT 0,
    last_activity_date TEXT
);

CREATE TABLE IF NOT EXISTS daily_activity (
    learner_id TEXT NOT NULL,
    activity_date TEXT NOT NULL,
    questions_answered INTEGER NOT NULL DEFAULT 0,
    correct_answers INTEGER NOT NULL DEFAULT 0,
    sessions_completed INTEGER NOT NULL DEFAULT 0,
    PRIMARY KEY (learner_id, activity_date)
);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory and foreign keys enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()
