"""Tunable parameters for scheduling, mastery and quiz composition."""
from dataclasses import dataclass


@dataclass(frozen=True)
class SchedulerParams:
    default_ease: float = 2.5
    ease_floor: float = 1.3
    correct_quality: float = 4.0
    incorrect_quality: float = 2.0
    # Distinct correct days before an item counts as mastered
    mastery_days: int = 5


@dataclass(frozen=True)
class QuizParams:
    distractor_count: int = 3
    max_grammar_topics: int = 3


@dataclass(frozen=True)
class DailyLimits:
    due_words: int = 20
    drill_exercises: int = 10
    new_words: int = 5


SCHEDULER = SchedulerParams()
QUIZ = QuizParams()
LIMITS = DailyLimits()
