"""Roll-ups across many topic-progress records for dashboards."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, Optional

from mastertrack.engine.models import ExamType, TopicProgress, percent

MASTERED_THRESHOLD = 80
LEARNING_THRESHOLD = 40


@dataclass
class MasteryDistribution:
    mastered: int = 0
    learning: int = 0
    beginner: int = 0


@dataclass
class ExamTypeStats:
    topic_count: int
    average_accuracy: float
    total_questions: int


@dataclass
class AggregateReport:
    total_topics: int = 0
    total_questions: int = 0
    total_correct: int = 0
    total_time_spent: int = 0
    average_accuracy: float = 0.0
    overall_accuracy: float = 0.0
    mastery_distribution: MasteryDistribution = field(default_factory=MasteryDistribution)
    exam_type_breakdown: dict[ExamType, ExamTypeStats] = field(default_factory=dict)


@dataclass
class TimelinePoint:
    date: str
    accuracy: float
    attempts: int
    questions_attempted: int
    correct_answers: int


def _mean(values: list[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def _bucket(distribution: MasteryDistribution, accuracy: float) -> None:
    if accuracy >= MASTERED_THRESHOLD:
        distribution.mastered += 1
    elif accuracy >= LEARNING_THRESHOLD:
        distribution.learning += 1
    else:
        distribution.beginner += 1


def summarize(
    records: Iterable[TopicProgress],
    exam_type: Optional[ExamType] = None,
) -> AggregateReport:
    """Summarize ``records``, optionally restricted to one exam type.

    Empty input produces an all-zero report rather than a division error.
    Input records are not modified.
    """
    if exam_type is not None:
        exam_type = ExamType(exam_type)
        selected = [r for r in records if r.exam_type == exam_type]
    else:
        selected = list(records)

    report = AggregateReport(total_topics=len(selected))
    by_exam: dict[ExamType, list[TopicProgress]] = defaultdict(list)

    for r in selected:
        report.total_questions += r.total_questions
        report.total_correct += r.correct_answers
        report.total_time_spent += r.time_spent_seconds
        _bucket(report.mastery_distribution, r.accuracy)
        by_exam[r.exam_type].append(r)

    report.average_accuracy = round(_mean([r.accuracy for r in selected]), 2)
    report.overall_accuracy = round(percent(report.total_correct, report.total_questions), 2)

    # defaultdict keeps first-seen order of exam types
    for et, group in by_exam.items():
        report.exam_type_breakdown[et] = ExamTypeStats(
            topic_count=len(group),
            average_accuracy=round(_mean([r.accuracy for r in group]), 2),
            total_questions=sum(r.total_questions for r in group),
        )
    return report


def timeline(
    records: Iterable[TopicProgress],
    topic: str,
    today: date,
    days: int = 30,
) -> list[TimelinePoint]:
    """Daily accuracy points for ``topic`` over the last ``days`` days."""
    start = today - timedelta(days=days)
    by_day: dict[date, list[TopicProgress]] = defaultdict(list)
    for r in records:
        if r.topic != topic or r.last_attempted_at is None:
            continue
        day = r.last_attempted_at.date()
        if start <= day <= today:
            by_day[day].append(r)

    return [
        TimelinePoint(
            date=day.isoformat(),
            accuracy=round(_mean([r.accuracy for r in group]), 2),
            attempts=len(group),
            questions_attempted=sum(r.total_questions for r in group),
            correct_answers=sum(r.correct_answers for r in group),
        )
        for day, group in sorted(by_day.items())
    ]
