"""Closed enums and the per-topic progress record."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional


class ExamType(str, Enum):
    NEET = "NEET"
    JEE = "JEE"
    UPSC = "UPSC"
    SAT = "SAT"
    GRE = "GRE"
    IELTS = "IELTS"
    TOEFL = "TOEFL"
    CODING = "CODING"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"


class Source(str, Enum):
    TEST = "test"
    PRACTICE = "practice"
    QUIZ = "quiz"
    FLASHCARDS = "flashcards"


class MasteryLevel(str, Enum):
    MASTERED = "mastered"
    PROFICIENT = "proficient"
    COMPETENT = "competent"
    LEARNING = "learning"
    BEGINNER = "beginner"

    @classmethod
    def for_accuracy(cls, accuracy: float) -> "MasteryLevel":
        if accuracy >= 90:
            return cls.MASTERED
        if accuracy >= 75:
            return cls.PROFICIENT
        if accuracy >= 60:
            return cls.COMPETENT
        if accuracy >= 40:
            return cls.LEARNING
        return cls.BEGINNER


def percent(correct: int, total: int) -> float:
    """100 * correct / total, or 0.0 when nothing has been attempted."""
    if total == 0:
        return 0.0
    return 100 * correct / total


@dataclass
class SubtopicStats:
    subtopic: str
    total_questions: int = 0
    correct_answers: int = 0
    time_spent_seconds: int = 0

    @property
    def accuracy(self) -> float:
        return percent(self.correct_answers, self.total_questions)


@dataclass
class StreakState:
    current: int = 0
    best: int = 0
    last_updated_date: Optional[date] = None


@dataclass
class Metadata:
    source: Source = Source.TEST
    test_id: Optional[str] = None
    session_id: Optional[str] = None

    def __post_init__(self):
        self.source = Source(self.source)


@dataclass
class TopicProgress:
    """One evolving record per (learner_id, topic, exam_type).

    ``accuracy`` and ``confidence`` are derived fields maintained by the
    attempt pipeline in :mod:`mastertrack.engine.recorder`.
    """
    learner_id: str
    topic: str
    exam_type: ExamType
    total_questions: int = 0
    correct_answers: int = 0
    time_spent_seconds: int = 0
    accuracy: float = 0.0
    difficulty: Difficulty = Difficulty.MEDIUM
    confidence: float = 50.0
    improvement_rate: float = 0.0
    subtopic_breakdown: list[SubtopicStats] = field(default_factory=list)
    streak: StreakState = field(default_factory=StreakState)
    last_attempted_at: Optional[datetime] = None
    metadata: Metadata = field(default_factory=Metadata)

    def __post_init__(self):
        # Contract checks for values that bypassed the input gate.
        self.exam_type = ExamType(self.exam_type)
        self.difficulty = Difficulty(self.difficulty)
        if self.total_questions < 0 or self.time_spent_seconds < 0:
            raise ValueError("Counts and time spent must be non-negative")
        if not 0 <= self.correct_answers <= self.total_questions:
            raise ValueError(
                f"correct_answers {self.correct_answers} outside "
                f"[0, {self.total_questions}]"
            )

    @property
    def key(self) -> tuple[str, str, ExamType]:
        return (self.learner_id, self.topic, self.exam_type)

    @property
    def mastery_level(self) -> MasteryLevel:
        return MasteryLevel.for_accuracy(self.accuracy)

    @property
    def efficiency(self) -> float:
        """Accuracy per average second spent on a question, times 100.

        Units are loose; zero time spent yields 0.
        """
        if self.time_spent_seconds == 0 or self.total_questions == 0:
            return 0.0
        return (self.accuracy / (self.time_spent_seconds / self.total_questions)) * 100

    def find_subtopic(self, subtopic: str) -> Optional[SubtopicStats]:
        for entry in self.subtopic_breakdown:
            if entry.subtopic == subtopic:
                return entry
        return None
