"""Confidence score from accuracy and streak."""

from __future__ import annotations

STREAK_BONUS_PER_DAY = 2
MAX_CONFIDENCE = 100.0


def estimate(accuracy: float, streak_current: int) -> float:
    confidence = accuracy + STREAK_BONUS_PER_DAY * streak_current
    return max(0.0, min(MAX_CONFIDENCE, confidence))
