"""Shared fixtures for Mastertrack tests."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from mastertrack.config.settings import Settings
from mastertrack.engine.models import ExamType, SubtopicStats, TopicProgress, percent
from mastertrack.state.progress import ProgressStore
from mastertrack.state.tracker import ProgressTracker


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 3, 10, 9, 0, 0))


@pytest.fixture
def settings(tmp_path):
    return Settings(data_dir=tmp_path / "data")


@pytest.fixture
def store(tmp_path):
    return ProgressStore(db_path=tmp_path / "data" / "progress.db")


@pytest.fixture
def tracker(store, settings, clock):
    return ProgressTracker(store=store, settings=settings, clock=clock)


@pytest.fixture
def make_record():
    """Build a record with consistent accuracy from raw counts."""

    def _make(
        topic: str = "Physics",
        exam_type: ExamType = ExamType.JEE,
        total: int = 10,
        correct: int = 5,
        learner_id: str = "learner-1",
        subtopics: list[tuple[str, int, int]] | None = None,
        **kwargs,
    ) -> TopicProgress:
        kwargs.setdefault("accuracy", percent(correct, total))
        return TopicProgress(
            learner_id=learner_id,
            topic=topic,
            exam_type=exam_type,
            total_questions=total,
            correct_answers=correct,
            subtopic_breakdown=[
                SubtopicStats(subtopic=name, total_questions=t, correct_answers=c)
                for name, t, c in (subtopics or [])
            ],
            **kwargs,
        )

    return _make
