"""CLI entry point for Mastertrack."""

from __future__ import annotations

import logging
import sys

import click

from mastertrack.engine.models import Difficulty, ExamType, Source

EXAM_TYPES = click.Choice([e.value for e in ExamType])


def format_duration(seconds: int) -> str:
    if not seconds:
        return "0s"
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if secs or not parts:
        parts.append(f"{secs}s")
    return " ".join(parts)


def _tracker(ctx: click.Context):
    from mastertrack.state.progress import ProgressStore
    from mastertrack.state.tracker import ProgressTracker

    if "tracker" not in ctx.obj:
        # An explicit --data-dir wins over MASTERTRACK_DATA_DIR.
        data_dir = ctx.obj.get("data_dir")
        store = ProgressStore(db_path=data_dir / "progress.db") if data_dir else None
        ctx.obj["tracker"] = ProgressTracker(store=store, settings=ctx.obj["settings"])
    return ctx.obj["tracker"]


@click.group()
@click.option("--data-dir", type=click.Path(file_okay=False), help="Override the data directory")
@click.pass_context
def main(ctx: click.Context, data_dir: str | None) -> None:
    """Mastertrack — learner progress analytics."""
    from pathlib import Path

    from mastertrack.config.settings import Settings

    ctx.ensure_object(dict)
    settings = ctx.obj.get("settings") or Settings.load()
    if data_dir:
        settings.data_dir = Path(data_dir)
        ctx.obj["data_dir"] = settings.data_dir
    ctx.obj["settings"] = settings

    # stdout carries command output only
    logging.basicConfig(
        stream=sys.stderr,
        level=settings.get_log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("learner")
@click.argument("topic")
@click.argument("exam_type", type=EXAM_TYPES)
@click.option("--correct/--incorrect", required=True, help="Whether the answer was right")
@click.option("--time", "time_spent", type=click.IntRange(min=0), default=0, show_default=True,
              help="Seconds spent on the question")
@click.option("--subtopic", default=None)
@click.option("--difficulty", type=click.Choice([d.value for d in Difficulty]), default=None)
@click.option("--source", type=click.Choice([s.value for s in Source]), default=None)
@click.pass_context
def record(ctx, learner, topic, exam_type, correct, time_spent, subtopic, difficulty, source) -> None:
    """Record one question attempt."""
    p = _tracker(ctx).record_attempt(
        learner, topic, ExamType(exam_type), correct, time_spent,
        subtopic=subtopic,
        difficulty=Difficulty(difficulty) if difficulty else None,
        source=Source(source) if source else None,
    )
    click.echo(
        f"{p.topic} ({p.exam_type.value}): {p.correct_answers}/{p.total_questions} "
        f"accuracy {p.accuracy:.2f}% confidence {p.confidence:.2f} "
        f"streak {p.streak.current} (best {p.streak.best}) [{p.mastery_level.value}]"
    )


@main.command()
@click.argument("learner")
@click.option("--exam-type", type=EXAM_TYPES, default=None)
@click.pass_context
def summary(ctx, learner, exam_type) -> None:
    """Show overall statistics for a learner."""
    report = _tracker(ctx).summary(learner, ExamType(exam_type) if exam_type else None)
    dist = report.mastery_distribution
    click.echo(f"Topics: {report.total_topics}")
    click.echo(f"Questions: {report.total_correct}/{report.total_questions} "
               f"({report.overall_accuracy:.2f}% overall, {report.average_accuracy:.2f}% average)")
    click.echo(f"Time spent: {format_duration(report.total_time_spent)}")
    click.echo(f"Mastered: {dist.mastered}  Learning: {dist.learning}  Beginner: {dist.beginner}")
    for et, stats in report.exam_type_breakdown.items():
        click.echo(f"  {et.value}: {stats.topic_count} topics, "
                   f"{stats.average_accuracy:.2f}% average, {stats.total_questions} questions")


@main.command()
@click.argument("learner")
@click.option("--exam-type", type=EXAM_TYPES, default=None)
@click.option("--limit", type=click.IntRange(min=1), default=None)
@click.pass_context
def recommend(ctx, learner, exam_type, limit) -> None:
    """List the topics to study next."""
    recs = _tracker(ctx).recommendations(
        learner, ExamType(exam_type) if exam_type else None, limit
    )
    if not recs:
        click.echo("Not enough data yet. Answer at least 5 questions in a topic.")
        return
    for i, r in enumerate(recs, 1):
        click.echo(f"{i}. {r.topic} ({r.exam_type.value}) accuracy {r.accuracy:.2f}% "
                   f"confidence {r.confidence:.2f}: {r.recommendation.value}")


@main.command()
@click.argument("learner")
@click.argument("topic")
@click.argument("exam_type", type=EXAM_TYPES)
@click.option("--weak-threshold", type=click.FloatRange(0, 100), default=None)
@click.option("--strong-threshold", type=click.FloatRange(0, 100), default=None)
@click.pass_context
def subtopics(ctx, learner, topic, exam_type, weak_threshold, strong_threshold) -> None:
    """Show weak and strong subtopics within a topic."""
    tracker = _tracker(ctx)
    try:
        weak = tracker.weak_subtopics(learner, topic, ExamType(exam_type), weak_threshold)
        strong = tracker.strong_subtopics(learner, topic, ExamType(exam_type), strong_threshold)
    except ValueError as e:
        raise click.ClickException(str(e))

    click.echo("Weak:")
    for s in weak:
        click.echo(f"  {s.subtopic}: {s.accuracy:.2f}% of {s.total_questions}")
    click.echo("Strong:")
    for s in strong:
        click.echo(f"  {s.subtopic}: {s.accuracy:.2f}% of {s.total_questions}")


@main.command()
@click.argument("learner")
@click.argument("topic")
@click.option("--days", type=click.IntRange(min=1), default=30, show_default=True)
@click.pass_context
def timeline(ctx, learner, topic, days) -> None:
    """Show daily accuracy for a topic."""
    for point in _tracker(ctx).timeline(learner, topic, days):
        click.echo(f"{point.date}  {point.accuracy:6.2f}%  "
                   f"{point.correct_answers}/{point.questions_attempted} "
                   f"({point.attempts} records)")
