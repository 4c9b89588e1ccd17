# tests/test_catalog.py
import json
import logging

import pytest

from lingo_tutor.catalog import (
    get_categories, get_grammar_exercises, get_grammar_pools, get_grammar_topic,
    get_grammar_topics, get_vocabulary, get_vocabulary_by_category,
)
from lingo_tutor.db import init_db, get_connection
from lingo_tutor.errors import NotFoundError, ValidationError
from lingo_tutor.models import FillBlank, MultipleChoice, Translation
from lingo_tutor.seed import seed_all


def seeded(tmp_db):
    init_db(tmp_db)
    seed_all(tmp_db)
    return tmp_db


def test_get_vocabulary(tmp_db):
    seeded(tmp_db)
    word = get_vocabulary(tmp_db, 1)
    assert word.word == "bonjour"
    assert word.translation == "hello"
    assert word.category == "greetings"


def test_get_vocabulary_missing(tmp_db):
    seeded(tmp_db)
    with pytest.raises(NotFoundError):
        get_vocabulary(tmp_db, 999)


def test_get_vocabulary_by_category_case_insensitive(tmp_db):
    seeded(tmp_db)
    words = get_vocabulary_by_category(tmp_db, "Family")
    assert [w.word for w in words] == ["la mère", "le père", "la sœur", "le frère"]


def test_get_categories(tmp_db):
    seeded(tmp_db)
    assert get_categories(tmp_db) == [
        "colors", "family", "food", "greetings", "numbers", "politeness", "travel",
    ]


def test_get_grammar_topics_in_sort_order(tmp_db):
    seeded(tmp_db)
    topics = get_grammar_topics(tmp_db)
    assert [t.id for t in topics] == [1, 2, 3, 4]
    assert topics[0].title == "Definite articles"
    assert get_grammar_topic(tmp_db, 3).title == "Negation"
    with pytest.raises(NotFoundError):
        get_grammar_topic(tmp_db, 42)


def test_get_grammar_exercises_decodes_variants(tmp_db):
    seeded(tmp_db)
    exercises = get_grammar_exercises(tmp_db, 2)
    assert len(exercises) == 6
    kinds = {type(ex.content) for ex in exercises}
    assert kinds == {MultipleChoice, FillBlank, Translation}
    assert all(ex.topic_id == 2 for ex in exercises)


def test_get_grammar_exercises_difficulty_range(tmp_db):
    seeded(tmp_db)
    easy = get_grammar_exercises(tmp_db, 1, difficulty=(1, 4))
    assert len(easy) == 4
    assert all(1 <= ex.difficulty <= 4 for ex in easy)
    hard = get_grammar_exercises(tmp_db, 4, difficulty=(5, 10))
    assert sorted(ex.difficulty for ex in hard) == [5, 9, 10]


def test_get_grammar_exercises_limit(tmp_db):
    seeded(tmp_db)
    assert len(get_grammar_exercises(tmp_db, 1, limit=2)) == 2


def test_get_grammar_exercises_invalid_range(tmp_db):
    seeded(tmp_db)
    with pytest.raises(ValidationError):
        get_grammar_exercises(tmp_db, 1, difficulty=(7, 3))


def test_malformed_exercise_rows_are_skipped(tmp_db, caplog):
    seeded(tmp_db)
    conn = get_connection(tmp_db)
    conn.execute(
        "INSERT INTO grammar_exercises (topic_id, exercise_type, difficulty, content) VALUES (?, ?, ?, ?)",
        (1, "multiple_choice", 2, json.dumps({"question": "?", "options": ["a"], "correct_index": 3})),
    )
    conn.execute(
        "INSERT INTO grammar_exercises (topic_id, exercise_type, difficulty, content) VALUES (?, ?, ?, ?)",
        (1, "fill_blank", 2, "{not json"),
    )
    conn.execute(
        "INSERT INTO grammar_exercises (topic_id, exercise_type, difficulty, content) VALUES (?, ?, ?, ?)",
        (1, "multiple_choice", 2, json.dumps({"question": "?", "options": None, "correct_index": 0})),
    )
    conn.execute(
        "INSERT INTO grammar_exercises (topic_id, exercise_type, difficulty, content) VALUES (?, ?, ?, ?)",
        (1, "matching", 2, json.dumps({"pairs": [{"l": "chat", "r": "cat"}]})),
    )
    conn.commit()
    conn.close()
    with caplog.at_level(logging.WARNING, logger="lingo_tutor.catalog"):
        exercises = get_grammar_exercises(tmp_db, 1)
    assert len(exercises) == 6
    assert caplog.text.count("Skipping grammar exercise") == 4


def test_grammar_pools_survive_malformed_rows(tmp_db):
    seeded(tmp_db)
    conn = get_connection(tmp_db)
    conn.execute(
        "INSERT INTO grammar_exercises (topic_id, exercise_type, difficulty, content) VALUES (?, ?, ?, ?)",
        (2, "matching", 3, json.dumps({"pairs": 5})),
    )
    conn.commit()
    conn.close()
    pools = get_grammar_pools(tmp_db)
    assert sum(len(p.exercises) for p in pools) == 22


def test_get_grammar_pools(tmp_db):
    seeded(tmp_db)
    pools = get_grammar_pools(tmp_db)
    assert [p.topic.id for p in pools] == [1, 2, 3, 4]
    assert sum(len(p.exercises) for p in pools) == 22


def test_get_grammar_pools_empty_catalog(tmp_db):
    init_db(tmp_db)
    assert get_grammar_pools(tmp_db) == []
