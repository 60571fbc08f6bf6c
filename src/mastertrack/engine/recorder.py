"""Applies a single question attempt to a topic-progress record.

The update runs as an explicit ordered pipeline so each stage can be
tested on its own:

    apply_attempt -> recompute_accuracy -> streak.touch -> confidence.estimate
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from mastertrack.engine import confidence, streak
from mastertrack.engine.models import (
    Difficulty,
    Source,
    SubtopicStats,
    TopicProgress,
    percent,
)

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    return datetime.now()


def apply_attempt(
    progress: TopicProgress,
    correct: bool,
    time_spent: int,
    subtopic: Optional[str] = None,
    *,
    now: datetime,
) -> TopicProgress:
    """Bump the raw counters on the record and on its subtopic entry."""
    if time_spent < 0:
        raise ValueError(f"time_spent must be >= 0, got {time_spent}")

    progress.total_questions += 1
    if correct:
        progress.correct_answers += 1
    progress.time_spent_seconds += time_spent
    progress.last_attempted_at = now

    if subtopic:
        entry = progress.find_subtopic(subtopic)
        if entry is None:
            entry = SubtopicStats(subtopic=subtopic)
            progress.subtopic_breakdown.append(entry)
        entry.total_questions += 1
        if correct:
            entry.correct_answers += 1
        entry.time_spent_seconds += time_spent

    return progress


def recompute_accuracy(progress: TopicProgress) -> TopicProgress:
    progress.accuracy = percent(progress.correct_answers, progress.total_questions)
    return progress


def refresh_derived(progress: TopicProgress, now: datetime) -> TopicProgress:
    """Recompute accuracy, then streak, then confidence, in that order."""
    recompute_accuracy(progress)
    streak.touch(progress.streak, progress.accuracy, now.date())
    progress.confidence = confidence.estimate(progress.accuracy, progress.streak.current)
    return progress


class AttemptRecorder:
    """Runs the attempt pipeline against a record using an injectable clock."""

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or system_clock

    def record(
        self,
        progress: TopicProgress,
        correct: bool,
        time_spent: int,
        subtopic: Optional[str] = None,
        *,
        difficulty: Optional[Difficulty] = None,
        source: Optional[Source] = None,
        test_id: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> TopicProgress:
        # One clock read per attempt so the timestamp and the streak day agree.
        now = self.clock()

        apply_attempt(progress, correct, time_spent, subtopic, now=now)
        if difficulty is not None:
            progress.difficulty = Difficulty(difficulty)
        if source is not None:
            progress.metadata.source = Source(source)
        if test_id is not None:
            progress.metadata.test_id = test_id
        if session_id is not None:
            progress.metadata.session_id = session_id

        return refresh_derived(progress, now)
