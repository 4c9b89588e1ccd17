"""Data classes for the learner progress and content model."""
from dataclasses import MISSING, asdict, dataclass, field, fields
from datetime import date, datetime, timedelta
from typing import ClassVar, Optional, Union

from lingo_tutor.config import SCHEDULER
from lingo_tutor.errors import ValidationError

STATUS_NEW = "new"
STATUS_LEARNING = "learning"
STATUS_MASTERED = "mastered"

QUESTION_VOCABULARY = "vocabulary"
QUESTION_MULTIPLE_CHOICE = "grammar_multiple_choice"
QUESTION_FILL_BLANK = "grammar_fill_blank"


def parse_date(value) -> Optional[date]:
    """Coerce an ISO string, date or datetime to a calendar date."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value).strip()).date()
    except ValueError as e:
        raise ValidationError(f"Unparsable date: {value!r}") from e


def parse_datetime(value) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    try:
        return datetime.fromisoformat(str(value).strip())
    except ValueError as e:
        raise ValidationError(f"Unparsable timestamp: {value!r}") from e


# --- Progress records ---


@dataclass
class ReviewState:
    next_review_date: date
    ease_factor: float = SCHEDULER.default_ease
    interval_days: int = 1
    repetitions: int = 0
    last_reviewed_at: Optional[datetime] = None
    times_correct: int = 0
    times_incorrect: int = 0
    unique_days_correct: int = 0
    last_correct_date: Optional[date] = None
    status: str = STATUS_NEW

    @classmethod
    def introduce(cls, today: date) -> "ReviewState":
        """Default state for a word the learner has just met."""
        return cls(next_review_date=parse_date(today) + timedelta(days=1))

    def is_due(self, today: date) -> bool:
        return self.next_review_date <= parse_date(today)


@dataclass
class GrammarProgress:
    mastery_percentage: float = 0.0
    exercises_completed: int = 0
    unique_days_correct: int = 0
    last_correct_date: Optional[date] = None
    last_practiced_at: Optional[datetime] = None


@dataclass
class StreakState:
    current_streak: int = 0
    longest_streak: int = 0
    last_activity_date: Optional[date] = None


# --- Content ---


@dataclass
class VocabularyItem:
    id: int
    word: str
    translation: str
    category: Optional[str] = None
    part_of_speech: Optional[str] = None
    gender: Optional[str] = None
    example_sentence: str = ""
    example_translation: str = ""


@dataclass
class ReviewableVocabItem:
    item: VocabularyItem
    state: ReviewState


@dataclass
class GrammarTopic:
    id: int
    title: str
    title_fr: str = ""
    description: str = ""
    explanation: str = ""
    sort_order: int = 0


# Exercise content is a tagged variant: one class per kind, selected by `kind`.


@dataclass
class VocabularyIntro:
    kind: ClassVar[str] = "vocabulary_intro"
    word: str
    translation: str
    example_sentence: str = ""
    example_translation: str = ""


@dataclass
class MultipleChoice:
    kind: ClassVar[str] = "multiple_choice"
    question: str
    options: list
    correct_index: int

    def __post_init__(self):
        if not isinstance(self.options, list):
            raise ValidationError(f"options must be a list, got {type(self.options).__name__}")
        if not isinstance(self.correct_index, int) or isinstance(self.correct_index, bool):
            raise ValidationError(f"correct_index must be an integer, got {self.correct_index!r}")
        if not 0 <= self.correct_index < len(self.options):
            raise ValidationError(
                f"correct_index {self.correct_index} out of range for {len(self.options)} options"
            )

    @property
    def correct_answer(self) -> str:
        return self.options[self.correct_index]


@dataclass
class Translation:
    kind: ClassVar[str] = "translation"
    source_text: str
    accepted_answers: list
    source_language: str = "fr"
    target_language: str = "en"


@dataclass
class FillBlank:
    kind: ClassVar[str] = "fill_blank"
    sentence: str
    correct_answer: str


@dataclass
class Matching:
    kind: ClassVar[str] = "matching"
    pairs: list


@dataclass
class Listening:
    kind: ClassVar[str] = "listening"
    text: str


@dataclass
class Speaking:
    kind: ClassVar[str] = "speaking"
    text: str


@dataclass
class ConversationPrompt:
    kind: ClassVar[str] = "conversation_prompt"
    context: str
    ai_message: str
    expected_response_hint: str = ""
    sample_response: str = ""


ExerciseContent = Union[
    VocabularyIntro, MultipleChoice, Translation, FillBlank,
    Matching, Listening, Speaking, ConversationPrompt,
]

EXERCISE_TYPES = {
    cls.kind: cls
    for cls in (
        VocabularyIntro, MultipleChoice, Translation, FillBlank,
        Matching, Listening, Speaking, ConversationPrompt,
    )
}


def exercise_from_dict(kind: str, content: dict) -> ExerciseContent:
    """Build the exercise variant named by `kind` from a raw content mapping."""
    cls = EXERCISE_TYPES.get(kind) if isinstance(kind, str) else None
    if cls is None:
        raise ValidationError(f"Unknown exercise kind: {kind!r}")
    if not isinstance(content, dict):
        raise ValidationError(f"Exercise content must be a mapping, got {type(content).__name__}")
    known = {f.name for f in fields(cls)}
    required = {
        f.name for f in fields(cls)
        if f.default is MISSING and f.default_factory is MISSING
    }
    missing = required - content.keys()
    if missing:
        raise ValidationError(f"{kind} exercise missing fields: {', '.join(sorted(missing))}")
    data = {k: v for k, v in content.items() if k in known}
    for f in fields(cls):
        # Only str and list fields are checked; correct_index has its own check
        if f.name in data and f.type in (str, list) and not isinstance(data[f.name], f.type):
            raise ValidationError(
                f"{kind} field {f.name} must be {f.type.__name__}, "
                f"got {type(data[f.name]).__name__}"
            )
    if cls is Matching:
        data["pairs"] = [_matching_pair(p) for p in data["pairs"]]
    return cls(**data)


def _matching_pair(pair) -> tuple:
    if isinstance(pair, dict):
        if "left" not in pair or "right" not in pair:
            raise ValidationError(f"Matching pair needs left and right, got {pair!r}")
        return pair["left"], pair["right"]
    if isinstance(pair, (list, tuple)) and len(pair) == 2:
        return tuple(pair)
    raise ValidationError(f"Matching pair must have two sides, got {pair!r}")


def exercise_to_dict(content: ExerciseContent) -> dict:
    return asdict(content)


@dataclass
class GrammarExercise:
    id: int
    topic_id: int
    content: ExerciseContent
    difficulty: int = 1
    hint: str = ""


@dataclass
class GrammarPool:
    topic: GrammarTopic
    exercises: list = field(default_factory=list)


# --- Quiz ---


@dataclass(frozen=True)
class VocabularyRef:
    vocabulary_id: int


@dataclass(frozen=True)
class GrammarRef:
    topic_id: int
    exercise_id: int


@dataclass
class QuizQuestion:
    kind: str
    text: str
    options: list
    correct_answer: str
    correct_index: Optional[int]
    source_ref: Union[VocabularyRef, GrammarRef]
