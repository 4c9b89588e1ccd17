"""Seed the database with the bundled vocabulary and grammar content."""
import json
import logging
from pathlib import Path

from lingo_tutor.db import get_connection
from lingo_tutor.errors import ValidationError
from lingo_tutor.models import exercise_from_dict

CONTENT_DIR = Path(__file__).parent / "content"

logger = logging.getLogger(__name__)


def is_seeded(db_path: str) -> bool:
    """Check whether the database already holds vocabulary."""
    conn = get_connection(db_path)
    count = conn.execute("SELECT COUNT(*) FROM vocabulary").fetchone()[0]
    conn.close()
    return count > 0


def seed_vocabulary(db_path: str, path: Path = CONTENT_DIR / "vocabulary.json") -> None:
    """Insert all words from vocabulary.json."""
    data = json.loads(path.read_text(encoding="utf-8"))
    conn = get_connection(db_path)
    for word in data["vocabulary"]:
        conn.execute(
            """INSERT OR IGNORE INTO vocabulary
            (id, word, translation, category, part_of_speech, gender, example_sentence, example_translation)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                word["id"], word["word"], word["translation"], word.get("category"),
                word.get("part_of_speech"), word.get("gender"),
                word.get("example_sentence", ""), word.get("example_translation", ""),
            ),
        )
    conn.commit()
    conn.close()


def seed_grammar(db_path: str, path: Path = CONTENT_DIR / "grammar.json") -> int:
    """Insert grammar topics and their exercises. Returns the number of exercises skipped."""
    data = json.loads(path.read_text(encoding="utf-8"))
    skipped = 0
    conn = get_connection(db_path)
    for topic in data["topics"]:
        conn.execute(
            """INSERT OR IGNORE INTO grammar_topics
            (id, title, title_fr, description, explanation, sort_order)
            VALUES (?, ?, ?, ?, ?, ?)""",
            (
                topic["id"], topic["title"], topic.get("title_fr", ""),
                topic.get("description", ""), topic.get("explanation", ""),
                topic.get("sort_order", 0),
            ),
        )
        for exercise in topic["exercises"]:
            # Reject content that could never be served
            try:
                exercise_from_dict(exercise.get("type"), exercise.get("content"))
            except ValidationError as e:
                logger.warning("Skipping exercise in topic %s: %s", topic["title"], e)
                skipped += 1
                continue
            conn.execute(
                """INSERT INTO grammar_exercises (topic_id, exercise_type, difficulty, content, hint)
                VALUES (?, ?, ?, ?, ?)""",
                (
                    topic["id"], exercise["type"], exercise.get("difficulty", 1),
                    json.dumps(exercise["content"], ensure_ascii=False), exercise.get("hint", ""),
                ),
            )
    conn.commit()
    conn.close()
    return skipped


def seed_all(db_path: str) -> None:
    """Run all seed functions in order."""
    if is_seeded(db_path):
        return
    seed_vocabulary(db_path)
    seed_grammar(db_path)
