"""Write path and read paths over the progress store.

Attempts on the same (learner, topic, exam type) are serialized twice: a
per-key lock orders threads sharing one tracker, and the store runs the
fetch -> apply -> save sequence in one SQLite write transaction so trackers
in other threads or processes cannot lose an update either.
Reads take a snapshot from the store and run the pure engine functions.
"""

from __future__ import annotations

import logging
import threading
import weakref
from typing import Optional

from mastertrack.config.settings import Settings
from mastertrack.engine import classifier, ranker, reporter
from mastertrack.engine.models import Difficulty, ExamType, Source, TopicProgress
from mastertrack.engine.recorder import AttemptRecorder, Clock
from mastertrack.state.progress import ProgressStore

logger = logging.getLogger(__name__)

Key = tuple[str, str, ExamType]


class ProgressTracker:
    def __init__(
        self,
        store: Optional[ProgressStore] = None,
        settings: Optional[Settings] = None,
        clock: Optional[Clock] = None,
    ):
        self.settings = settings or Settings.load()
        self.store = store or ProgressStore(db_path=self.settings.db_path)
        self.recorder = AttemptRecorder(clock=clock)

        # Entries vanish once no caller holds the lock.
        self._locks: weakref.WeakValueDictionary[Key, threading.Lock] = weakref.WeakValueDictionary()
        self._locks_guard = threading.Lock()

    @property
    def clock(self) -> Clock:
        return self.recorder.clock

    def _lock_for(self, key: Key) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    def record_attempt(
        self,
        learner_id: str,
        topic: str,
        exam_type: ExamType,
        correct: bool,
        time_spent: int,
        subtopic: Optional[str] = None,
        difficulty: Optional[Difficulty] = None,
        source: Optional[Source] = None,
        test_id: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> TopicProgress:
        exam_type = ExamType(exam_type)
        key = (learner_id, topic, exam_type)

        def apply(progress: Optional[TopicProgress]) -> TopicProgress:
            if progress is None:
                progress = TopicProgress(learner_id=learner_id, topic=topic, exam_type=exam_type)
                logger.info("Starting progress for %s / %s / %s", *key)
            return self.recorder.record(
                progress,
                correct,
                time_spent,
                subtopic,
                difficulty=difficulty,
                source=source,
                test_id=test_id,
                session_id=session_id,
            )

        with self._lock_for(key):
            progress = self.store.update(learner_id, topic, exam_type, apply)

        logger.debug(
            "Attempt on %s: accuracy=%.2f confidence=%.2f streak=%d",
            key, progress.accuracy, progress.confidence, progress.streak.current,
        )
        return progress

    def get(self, learner_id: str, topic: str, exam_type: ExamType) -> Optional[TopicProgress]:
        return self.store.get(learner_id, topic, exam_type)

    def _require(self, learner_id: str, topic: str, exam_type: ExamType) -> TopicProgress:
        progress = self.store.get(learner_id, topic, exam_type)
        if progress is None:
            raise ValueError(f"No progress for {learner_id} / {topic} / {ExamType(exam_type).value}")
        return progress

    def weak_subtopics(
        self,
        learner_id: str,
        topic: str,
        exam_type: ExamType,
        threshold: Optional[float] = None,
    ) -> list[classifier.SubtopicAccuracy]:
        progress = self._require(learner_id, topic, exam_type)
        if threshold is None:
            threshold = self.settings.weak_threshold
        return classifier.weak(progress, threshold)

    def strong_subtopics(
        self,
        learner_id: str,
        topic: str,
        exam_type: ExamType,
        threshold: Optional[float] = None,
    ) -> list[classifier.SubtopicAccuracy]:
        progress = self._require(learner_id, topic, exam_type)
        if threshold is None:
            threshold = self.settings.strong_threshold
        return classifier.strong(progress, threshold)

    def summary(self, learner_id: str, exam_type: Optional[ExamType] = None) -> reporter.AggregateReport:
        return reporter.summarize(self.store.find(learner_id), exam_type)

    def recommendations(
        self,
        learner_id: str,
        exam_type: Optional[ExamType] = None,
        limit: Optional[int] = None,
    ) -> list[ranker.Recommendation]:
        if limit is None:
            limit = self.settings.recommend_limit
        return ranker.recommend(
            self.store.find(learner_id, exam_type),
            now=self.clock(),
            limit=limit,
        )

    def timeline(self, learner_id: str, topic: str, days: int = 30) -> list[reporter.TimelinePoint]:
        return reporter.timeline(
            self.store.find(learner_id),
            topic,
            today=self.clock().date(),
            days=days,
        )
