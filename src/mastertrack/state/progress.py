"""SQLite-backed storage for topic-progress records."""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import date, datetime
from pathlib import Path
from typing import Callable, Optional

from mastertrack.engine.models import (
    Difficulty,
    ExamType,
    Metadata,
    Source,
    StreakState,
    SubtopicStats,
    TopicProgress,
)

logger = logging.getLogger(__name__)

_COLUMNS = (
    "learner_id", "topic", "exam_type", "total_questions", "correct_answers",
    "time_spent", "accuracy", "difficulty", "confidence", "improvement_rate",
    "subtopics", "streak_current", "streak_best", "streak_last_updated",
    "last_attempted_at", "source", "test_id", "session_id",
)

_SELECT_ONE = (
    f"SELECT {', '.join(_COLUMNS)} FROM progress "
    "WHERE learner_id = ? AND topic = ? AND exam_type = ?"
)

# ON CONFLICT keeps the original rowid, so find() order stays stable.
_UPSERT = (
    f"INSERT INTO progress ({', '.join(_COLUMNS)}) "
    f"VALUES ({', '.join('?' for _ in _COLUMNS)}) "
    "ON CONFLICT (learner_id, topic, exam_type) DO UPDATE SET "
    + ", ".join(f"{c} = excluded.{c}" for c in _COLUMNS[3:])
)

# Seconds a writer waits for another process to release the write lock.
_LOCK_TIMEOUT = 30


def _to_row(p: TopicProgress) -> tuple:
    subtopics = json.dumps([
        {
            "subtopic": s.subtopic,
            "totalQuestions": s.total_questions,
            "correctAnswers": s.correct_answers,
            "timeSpent": s.time_spent_seconds,
        }
        for s in p.subtopic_breakdown
    ])
    return (
        p.learner_id, p.topic, p.exam_type.value, p.total_questions,
        p.correct_answers, p.time_spent_seconds, p.accuracy,
        p.difficulty.value, p.confidence, p.improvement_rate, subtopics,
        p.streak.current, p.streak.best,
        p.streak.last_updated_date.isoformat() if p.streak.last_updated_date else None,
        p.last_attempted_at.isoformat() if p.last_attempted_at else None,
        p.metadata.source.value, p.metadata.test_id, p.metadata.session_id,
    )


def _from_row(r: tuple) -> TopicProgress:
    return TopicProgress(
        learner_id=r[0],
        topic=r[1],
        exam_type=ExamType(r[2]),
        total_questions=r[3],
        correct_answers=r[4],
        time_spent_seconds=r[5],
        accuracy=r[6],
        difficulty=Difficulty(r[7]),
        confidence=r[8],
        improvement_rate=r[9],
        subtopic_breakdown=[
            SubtopicStats(
                subtopic=s["subtopic"],
                total_questions=s["totalQuestions"],
                correct_answers=s["correctAnswers"],
                time_spent_seconds=s["timeSpent"],
            )
            for s in json.loads(r[10])
        ],
        streak=StreakState(
            current=r[11],
            best=r[12],
            last_updated_date=date.fromisoformat(r[13]) if r[13] else None,
        ),
        last_attempted_at=datetime.fromisoformat(r[14]) if r[14] else None,
        metadata=Metadata(source=Source(r[15]), test_id=r[16], session_id=r[17]),
    )


class ProgressStore:
    """One row per (learner_id, topic, exam_type).

    Every read returns freshly built records, so callers get a snapshot they
    can hand to the read-side engine functions without affecting storage.
    """

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = db_path or (Path.home() / ".mastertrack" / "progress.db")
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS progress (
                    learner_id TEXT NOT NULL,
                    topic TEXT NOT NULL,
                    exam_type TEXT NOT NULL,
                    total_questions INTEGER DEFAULT 0,
                    correct_answers INTEGER DEFAULT 0,
                    time_spent INTEGER DEFAULT 0,
                    accuracy REAL DEFAULT 0,
                    difficulty TEXT DEFAULT 'medium',
                    confidence REAL DEFAULT 50,
                    improvement_rate REAL DEFAULT 0,
                    subtopics TEXT DEFAULT '[]',
                    streak_current INTEGER DEFAULT 0,
                    streak_best INTEGER DEFAULT 0,
                    streak_last_updated TEXT,
                    last_attempted_at TEXT,
                    source TEXT DEFAULT 'test',
                    test_id TEXT,
                    session_id TEXT,
                    PRIMARY KEY (learner_id, topic, exam_type)
                )
            """)

    def _conn(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def get(self, learner_id: str, topic: str, exam_type: ExamType) -> Optional[TopicProgress]:
        with self._conn() as conn:
            row = conn.execute(
                _SELECT_ONE, (learner_id, topic, ExamType(exam_type).value)
            ).fetchone()
        if not row:
            return None
        return _from_row(row)

    def find(self, learner_id: str, exam_type: Optional[ExamType] = None) -> list[TopicProgress]:
        """All records for a learner in first-created order."""
        query = f"SELECT {', '.join(_COLUMNS)} FROM progress WHERE learner_id = ?"
        params: tuple = (learner_id,)
        if exam_type is not None:
            query += " AND exam_type = ?"
            params += (ExamType(exam_type).value,)
        query += " ORDER BY rowid"
        with self._conn() as conn:
            rows = conn.execute(query, params).fetchall()
        return [_from_row(r) for r in rows]

    def upsert(self, progress: TopicProgress) -> None:
        with self._conn() as conn:
            conn.execute(_UPSERT, _to_row(progress))
        logger.debug("Saved progress %s", progress.key)

    def update(
        self,
        learner_id: str,
        topic: str,
        exam_type: ExamType,
        mutate: Callable[[Optional[TopicProgress]], TopicProgress],
    ) -> TopicProgress:
        """Read, mutate and write one record inside a single write transaction.

        ``BEGIN IMMEDIATE`` takes the database write lock before the read, so
        writers in other processes wait instead of overwriting each other.
        ``mutate`` receives None when the record does not exist yet. If it
        raises, nothing is written.
        """
        conn = sqlite3.connect(self.db_path, isolation_level=None, timeout=_LOCK_TIMEOUT)
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                row = conn.execute(
                    _SELECT_ONE, (learner_id, topic, ExamType(exam_type).value)
                ).fetchone()
                progress = mutate(_from_row(row) if row else None)
                conn.execute(_UPSERT, _to_row(progress))
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
        finally:
            conn.close()
        logger.debug("Saved progress %s", progress.key)
        return progress

    def delete_learner(self, learner_id: str) -> None:
        with self._conn() as conn:
            conn.execute(
                "DELETE FROM progress WHERE learner_id = ?",
                (learner_id,),
            )
