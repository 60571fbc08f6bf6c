"""Tests for weak/strong subtopic classification."""

import pytest

from mastertrack.engine import classifier

SUBTOPICS = [
    ("Vectors", 4, 1),        # 25
    ("Kinematics", 10, 5),    # 50
    ("Optics", 10, 9),        # 90
    ("Waves", 5, 4),          # 80
    ("Relativity", 0, 0),     # not attempted
    ("Thermodynamics", 10, 7),  # 70, gap band
    ("Gravitation", 2, 1),    # 50, ties with Kinematics
]


@pytest.fixture
def record(make_record):
    return make_record(total=41, correct=27, subtopics=SUBTOPICS)


class TestWeak:
    def test_worst_first_with_stable_ties(self, record):
        weak = classifier.weak(record)
        assert [s.subtopic for s in weak] == ["Vectors", "Kinematics", "Gravitation"]
        assert weak[0].accuracy == 25.0
        assert weak[0].total_questions == 4

    def test_custom_threshold(self, record):
        weak = classifier.weak(record, threshold=30)
        assert [s.subtopic for s in weak] == ["Vectors"]

    def test_unattempted_excluded(self, record):
        names = {s.subtopic for s in classifier.weak(record, threshold=101)}
        assert "Relativity" not in names


class TestStrong:
    def test_best_first_threshold_inclusive(self, record):
        strong = classifier.strong(record)
        assert [s.subtopic for s in strong] == ["Optics", "Waves"]
        assert strong[1].accuracy == 80.0

    def test_stable_ties_descending(self, record):
        strong = classifier.strong(record, threshold=50)
        assert [s.subtopic for s in strong] == [
            "Optics", "Waves", "Thermodynamics", "Kinematics", "Gravitation",
        ]

    def test_no_subtopics(self, make_record):
        assert classifier.strong(make_record()) == []
        assert classifier.weak(make_record()) == []


class TestPartition:
    @pytest.mark.parametrize("weak_at, strong_at", [(60, 80), (50, 50), (0, 100), (70, 70)])
    def test_disjoint_and_covering(self, record, weak_at, strong_at):
        weak = {s.subtopic for s in classifier.weak(record, weak_at)}
        strong = {s.subtopic for s in classifier.strong(record, strong_at)}
        assert weak.isdisjoint(strong)
        if weak_at == strong_at:
            attempted = {name for name, total, _ in SUBTOPICS if total > 0}
            assert weak | strong == attempted
