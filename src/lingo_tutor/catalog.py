"""Read-only access to vocabulary and grammar content."""
import json
import logging

from lingo_tutor.db import get_connection
from lingo_tutor.errors import NotFoundError, ValidationError
from lingo_tutor.models import (
    GrammarExercise, GrammarPool, GrammarTopic, VocabularyItem, exercise_from_dict,
)

logger = logging.getLogger(__name__)


def vocab_from_row(row) -> VocabularyItem:
    return VocabularyItem(
        id=row["id"],
        word=row["word"],
        translation=row["translation"],
        category=row["category"],
        part_of_speech=row["part_of_speech"],
        gender=row["gender"],
        example_sentence=row["example_sentence"] or "",
        example_translation=row["example_translation"] or "",
    )


def exercise_from_row(row) -> GrammarExercise:
    """Decode a grammar_exercises row. Raises ValidationError on bad content."""
    try:
        content = json.loads(row["content"])
    except (TypeError, json.JSONDecodeError) as e:
        raise ValidationError(f"Exercise {row['id']} has unreadable content") from e
    return GrammarExercise(
        id=row["id"],
        topic_id=row["topic_id"],
        content=exercise_from_dict(row["exercise_type"], content),
        difficulty=row["difficulty"],
        hint=row["hint"] or "",
    )


def _decode_exercises(rows) -> list[GrammarExercise]:
    exercises = []
    for row in rows:
        try:
            exercises.append(exercise_from_row(row))
        except ValidationError as e:
            logger.warning("Skipping grammar exercise %s: %s", row["id"], e)
    return exercises


def get_vocabulary(db_path: str, vocabulary_id: int) -> VocabularyItem:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM vocabulary WHERE id = ?", (vocabulary_id,)).fetchone()
    conn.close()
    if row is None:
        raise NotFoundError(f"Vocabulary item {vocabulary_id} not found")
    return vocab_from_row(row)


def get_vocabulary_by_category(db_path: str, category: str) -> list[VocabularyItem]:
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT * FROM vocabulary WHERE lower(category) = lower(?) ORDER BY id", (category,)
    ).fetchall()
    conn.close()
    return [vocab_from_row(r) for r in rows]


def get_categories(db_path: str) -> list[str]:
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT DISTINCT COALESCE(category, 'other') AS category FROM vocabulary ORDER BY category"
    ).fetchall()
    conn.close()
    return [r["category"] for r in rows]


def get_grammar_topics(db_path: str) -> list[GrammarTopic]:
    conn = get_connection(db_path)
    rows = conn.execute("SELECT * FROM grammar_topics ORDER BY sort_order, id").fetchall()
    conn.close()
    return [
        GrammarTopic(
            id=r["id"],
            title=r["title"],
            title_fr=r["title_fr"] or "",
            description=r["description"] or "",
            explanation=r["explanation"] or "",
            sort_order=r["sort_order"],
        )
        for r in rows
    ]


def get_grammar_topic(db_path: str, topic_id: int) -> GrammarTopic:
    for topic in get_grammar_topics(db_path):
        if topic.id == topic_id:
            return topic
    raise NotFoundError(f"Grammar topic {topic_id} not found")


def get_grammar_exercises(
    db_path: str,
    topic_id: int,
    difficulty: tuple[int, int] | None = None,
    limit: int | None = None,
) -> list[GrammarExercise]:
    """Exercises for a topic in random order, optionally within an inclusive difficulty band."""
    query = "SELECT * FROM grammar_exercises WHERE topic_id = ?"
    params: list = [topic_id]
    if difficulty is not None:
        low, high = difficulty
        if low > high:
            raise ValidationError(f"Invalid difficulty range {low}..{high}")
        query += " AND difficulty BETWEEN ? AND ?"
        params.extend([low, high])
    query += " ORDER BY RANDOM()"
    if limit is not None:
        query += " LIMIT ?"
        params.append(limit)
    conn = get_connection(db_path)
    rows = conn.execute(query, params).fetchall()
    conn.close()
    return _decode_exercises(rows)


def get_grammar_pools(db_path: str) -> list[GrammarPool]:
    """Every topic with its decodable exercises, for quiz composition."""
    return [
        GrammarPool(topic=topic, exercises=get_grammar_exercises(db_path, topic.id))
        for topic in get_grammar_topics(db_path)
    ]
