"""Weak/strong subtopic classification for a single record."""

from __future__ import annotations

from dataclasses import dataclass

from mastertrack.engine.models import TopicProgress

WEAK_THRESHOLD = 60
STRONG_THRESHOLD = 80


@dataclass(frozen=True)
class SubtopicAccuracy:
    subtopic: str
    accuracy: float
    total_questions: int


def _attempted(progress: TopicProgress) -> list[SubtopicAccuracy]:
    # Subtopics with no questions yet have no accuracy to classify.
    return [
        SubtopicAccuracy(s.subtopic, s.accuracy, s.total_questions)
        for s in progress.subtopic_breakdown
        if s.total_questions > 0
    ]


def weak(progress: TopicProgress, threshold: float = WEAK_THRESHOLD) -> list[SubtopicAccuracy]:
    """Subtopics below ``threshold``, worst first."""
    items = [s for s in _attempted(progress) if s.accuracy < threshold]
    return sorted(items, key=lambda s: s.accuracy)


def strong(progress: TopicProgress, threshold: float = STRONG_THRESHOLD) -> list[SubtopicAccuracy]:
    """Subtopics at or above ``threshold``, best first."""
    items = [s for s in _attempted(progress) if s.accuracy >= threshold]
    return sorted(items, key=lambda s: s.accuracy, reverse=True)
