"""Tests for the command-line front end."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from mastertrack.cli import format_duration, main
from mastertrack.config.settings import Settings


@pytest.fixture
def run(settings, monkeypatch):
    monkeypatch.delenv("MASTERTRACK_DATA_DIR", raising=False)
    runner = CliRunner()
    obj = {"settings": settings}

    def _run(*args):
        return runner.invoke(main, list(args), obj=obj)

    return _run


def _record(run, topic, correct, n, exam_type="JEE", subtopic=None):
    flag = "--correct" if correct else "--incorrect"
    for _ in range(n):
        args = ["record", "learner-1", topic, exam_type, flag, "--time", "30"]
        if subtopic:
            args += ["--subtopic", subtopic]
        result = run(*args)
        assert result.exit_code == 0, result.output


class TestFormatDuration:
    @pytest.mark.parametrize(
        "seconds, text",
        [(0, "0s"), (45, "45s"), (60, "1m"), (125, "2m 5s"), (3661, "1h 1m 1s"), (7200, "2h")],
    )
    def test_format(self, seconds, text):
        assert format_duration(seconds) == text


class TestRecord:
    def test_record(self, run):
        result = run("record", "learner-1", "Physics", "JEE", "--correct", "--time", "40")
        assert result.exit_code == 0
        assert "1/1" in result.output
        assert "accuracy 100.00%" in result.output
        assert "[mastered]" in result.output

    def test_rejects_unknown_exam_type(self, run):
        result = run("record", "learner-1", "Physics", "MCAT", "--correct")
        assert result.exit_code == 2

    def test_rejects_negative_time(self, run):
        result = run("record", "learner-1", "Physics", "JEE", "--correct", "--time", "-3")
        assert result.exit_code == 2

    def test_requires_outcome(self, run):
        result = run("record", "learner-1", "Physics", "JEE")
        assert result.exit_code == 2


class TestReports:
    def test_summary(self, run):
        _record(run, "Physics", True, 3)
        _record(run, "Verbal", False, 1, exam_type="GRE")
        result = run("summary", "learner-1")
        assert result.exit_code == 0
        assert "Topics: 2" in result.output
        assert "3/4 (75.00% overall" in result.output
        assert "Time spent: 2m" in result.output
        assert "GRE: 1 topics" in result.output

    def test_recommend(self, run):
        _record(run, "Physics", False, 5)
        result = run("recommend", "learner-1")
        assert result.exit_code == 0
        assert "1. Physics (JEE)" in result.output
        assert "Focus on fundamental concepts" in result.output

    def test_recommend_without_data(self, run):
        result = run("recommend", "learner-1")
        assert result.exit_code == 0
        assert "Not enough data" in result.output

    def test_subtopics(self, run):
        _record(run, "Physics", True, 2, subtopic="Optics")
        _record(run, "Physics", False, 2, subtopic="Waves")
        result = run("subtopics", "learner-1", "Physics", "JEE")
        assert result.exit_code == 0
        weak, strong = result.output.split("Strong:")
        assert "Waves: 0.00% of 2" in weak
        assert "Optics: 100.00% of 2" in strong

    def test_subtopics_unknown_topic(self, run):
        result = run("subtopics", "learner-1", "History", "UPSC")
        assert result.exit_code == 1
        assert "No progress" in result.output

    def test_timeline(self, run):
        _record(run, "Physics", True, 2)
        result = run("timeline", "learner-1", "Physics")
        assert result.exit_code == 0
        assert "100.00%" in result.output
        assert "2/2" in result.output


class TestEnvironment:
    def test_data_dir_flag_beats_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MASTERTRACK_DATA_DIR", str(tmp_path / "from-env"))
        result = CliRunner().invoke(
            main,
            ["--data-dir", str(tmp_path / "from-flag"),
             "record", "learner-1", "Physics", "JEE", "--correct"],
            obj={"settings": Settings(data_dir=tmp_path / "default")},
        )
        assert result.exit_code == 0, result.output
        assert (tmp_path / "from-flag" / "progress.db").exists()
        assert not (tmp_path / "from-env" / "progress.db").exists()

    def test_unknown_log_level_does_not_abort(self, run, monkeypatch):
        monkeypatch.setenv("MASTERTRACK_LOG_LEVEL", "verbose")
        result = run("record", "learner-1", "Physics", "JEE", "--correct")
        assert result.exit_code == 0, result.output
