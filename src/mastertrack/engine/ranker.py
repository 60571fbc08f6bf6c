"""Ranks a learner's topics by how urgently they should be studied."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional

from mastertrack.engine.models import ExamType, TopicProgress

MIN_QUESTIONS = 5
DEFAULT_LIMIT = 5

ACCURACY_WEIGHT = 0.6
CONFIDENCE_WEIGHT = 0.3
RECENCY_WEIGHT = 0.1

SECONDS_PER_DAY = 86400


class Advice(str, Enum):
    FUNDAMENTALS = "Focus on fundamental concepts"
    BASICS = "Practice basic problems"
    APPLICATION = "Work on application problems"
    ADVANCED = "Master advanced concepts"
    MAINTAIN = "Maintain proficiency with occasional practice"

    @classmethod
    def for_accuracy(cls, accuracy: float) -> "Advice":
        if accuracy < 40:
            return cls.FUNDAMENTALS
        if accuracy < 60:
            return cls.BASICS
        if accuracy < 75:
            return cls.APPLICATION
        if accuracy < 90:
            return cls.ADVANCED
        return cls.MAINTAIN


@dataclass(frozen=True)
class Recommendation:
    topic: str
    exam_type: ExamType
    accuracy: float
    confidence: float
    last_attempted_at: Optional[datetime]
    priority: float
    recommendation: Advice


def days_since(last_attempted_at: Optional[datetime], now: datetime) -> Optional[float]:
    if last_attempted_at is None:
        return None
    elapsed = (now - last_attempted_at).total_seconds() / SECONDS_PER_DAY
    return max(0.0, elapsed)


def priority(progress: TopicProgress, now: datetime) -> float:
    """Higher means study sooner.

    Weak accuracy dominates, low confidence follows, and the recency term
    gives a small edge to topics attempted more recently.
    """
    score = (
        ACCURACY_WEIGHT * (100 - progress.accuracy)
        + CONFIDENCE_WEIGHT * (100 - progress.confidence)
    )
    elapsed = days_since(progress.last_attempted_at, now)
    if elapsed is not None:
        score += RECENCY_WEIGHT * (1 / (1 + elapsed))
    return score


def recommend(
    records: Iterable[TopicProgress],
    now: datetime,
    limit: int = DEFAULT_LIMIT,
    exam_type: Optional[ExamType] = None,
) -> list[Recommendation]:
    """Top ``limit`` eligible topics, highest priority first.

    Topics with fewer than ``MIN_QUESTIONS`` questions are skipped. Equal
    priorities keep their input order.
    """
    if exam_type is not None:
        exam_type = ExamType(exam_type)

    scored = [
        (priority(r, now), r)
        for r in records
        if r.total_questions >= MIN_QUESTIONS
        and (exam_type is None or r.exam_type == exam_type)
    ]
    scored.sort(key=lambda pair: pair[0], reverse=True)

    return [
        Recommendation(
            topic=r.topic,
            exam_type=r.exam_type,
            accuracy=r.accuracy,
            confidence=r.confidence,
            last_attempted_at=r.last_attempted_at,
            priority=score,
            recommendation=Advice.for_accuracy(r.accuracy),
        )
        for score, r in scored[:max(0, limit)]
    ]
