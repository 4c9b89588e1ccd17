"""Quiz composition from vocabulary and grammar pools."""
import random

from lingo_tutor.config import QUIZ
from lingo_tutor.errors import ValidationError
from lingo_tutor.models import (
    FillBlank, GrammarExercise, GrammarRef, MultipleChoice, QuizQuestion,
    ReviewableVocabItem, VocabularyRef,
    QUESTION_FILL_BLANK, QUESTION_MULTIPLE_CHOICE, QUESTION_VOCABULARY,
)

QUIZ_MODES = {
    "quick": 10,
    "full": 25,
}

# Generic wrong answers for vocabulary questions, unrelated to the word's topic
DISTRACTOR_POOL = [
    "to eat", "to drink", "to sleep", "to walk", "to run",
    "hello", "goodbye", "please", "thank you", "yes", "no",
    "the house", "the car", "the book", "the dog", "the cat",
    "big", "small", "good", "bad", "happy", "sad",
]


def vocab_options(correct: str, rng: random.Random) -> tuple[list, int]:
    """Correct translation plus distractors, shuffled. Returns (options, correct_index)."""
    distractors = [d for d in DISTRACTOR_POOL if d.lower() != correct.lower()]
    options = [correct] + rng.sample(distractors, QUIZ.distractor_count)
    rng.shuffle(options)
    return options, options.index(correct)


def vocabulary_question(entry: ReviewableVocabItem, rng: random.Random) -> QuizQuestion:
    vocab = entry.item
    options, correct_index = vocab_options(vocab.translation, rng)
    return QuizQuestion(
        kind=QUESTION_VOCABULARY,
        text=f"What does '{vocab.word}' mean?",
        options=options,
        correct_answer=vocab.translation,
        correct_index=correct_index,
        source_ref=VocabularyRef(vocab.id),
    )


def is_quizzable(exercise: GrammarExercise) -> bool:
    return isinstance(exercise.content, (MultipleChoice, FillBlank))


def grammar_question(exercise: GrammarExercise) -> QuizQuestion:
    """Wrap a stored grammar exercise as a quiz question, content reused verbatim."""
    content = exercise.content
    ref = GrammarRef(topic_id=exercise.topic_id, exercise_id=exercise.id)
    if isinstance(content, MultipleChoice):
        return QuizQuestion(
            kind=QUESTION_MULTIPLE_CHOICE,
            text=content.question,
            options=list(content.options),
            correct_answer=content.correct_answer,
            correct_index=content.correct_index,
            source_ref=ref,
        )
    if isinstance(content, FillBlank):
        return QuizQuestion(
            kind=QUESTION_FILL_BLANK,
            text=content.sentence,
            options=[],
            correct_answer=content.correct_answer,
            correct_index=None,
            source_ref=ref,
        )
    raise ValidationError(f"Exercise {exercise.id} of kind {content.kind!r} cannot be quizzed")


def compose_quiz(
    vocab_pool: list,
    grammar_pools: list,
    count: int,
    rng: random.Random | None = None,
) -> list[QuizQuestion]:
    """Assemble a mixed quiz of at most `count` questions.

    Half the questions (rounded down) come from the vocabulary pool, in pool
    order. The rest are drawn from up to three randomly chosen grammar topics
    that have quizzable exercises. Everything is shuffled together; a short
    pool yields a short quiz.
    """
    if not isinstance(count, int) or isinstance(count, bool) or count < 0:
        raise ValidationError(f"Question count must be a non-negative integer, got {count!r}")
    rng = rng or random.Random()

    questions = [vocabulary_question(entry, rng) for entry in vocab_pool[:count // 2]]

    grammar_count = count - len(questions)
    topics = [
        [ex for ex in pool.exercises if is_quizzable(ex)]
        for pool in grammar_pools
    ]
    topics = [exercises for exercises in topics if exercises]
    if grammar_count > 0 and topics:
        chosen = rng.sample(topics, min(QUIZ.max_grammar_topics, len(topics)))
        per_topic = grammar_count // len(chosen) + 1
        for exercises in chosen:
            picked = rng.sample(exercises, min(per_topic, len(exercises)))
            questions.extend(grammar_question(ex) for ex in picked)

    rng.shuffle(questions)
    return questions[:count]


def check_answer(question: QuizQuestion, response) -> bool:
    """Exact-match grading: a chosen option index, or fill-blank text."""
    if question.kind == QUESTION_FILL_BLANK:
        return str(response).strip().lower() == question.correct_answer.strip().lower()
    return response == question.correct_index
