from __future__ import annotations

import math

from pydantic import BaseModel

from glucose_wars.core.models import BodyMetrics, SessionResult, SessionState, ZoneSeconds


class SessionSummary(BaseModel):
    """Post-game report shown on the result screen."""

    session_id: str
    result: SessionResult
    battle_points: int
    final_score: int
    grade: str
    accuracy: float
    correct: int
    incorrect: int
    optimal_choices: int
    misses: int
    zone_seconds: ZoneSeconds
    plot_twists: int
    shares: int
    metrics: BodyMetrics
    metrics_history: list[BodyMetrics]


# (min score, min accuracy, grade), best first.
GRADES: tuple[tuple[int, float, str], ...] = (
    (500, 0.9, "S"),
    (400, 0.8, "A"),
    (300, 0.7, "B"),
    (200, 0.6, "C"),
)


def accuracy(correct: int, incorrect: int) -> float:
    total = correct + incorrect
    return correct / total if total > 0 else 0.0


def final_score(battle_points: int, stability: float, balanced_seconds: int, correct: int, incorrect: int) -> tuple[int, str]:
    stability_bonus = 1.2 if 40 <= stability <= 60 else 0.8
    time_bonus = 1 + (balanced_seconds / 60) * 0.5
    acc = accuracy(correct, incorrect)
    accuracy_bonus = 1 + acc * 0.3

    score = math.floor(battle_points * stability_bonus * time_bonus * accuracy_bonus)
    grade = next((g for min_score, min_acc, g in GRADES if score >= min_score and acc >= min_acc), "D")
    return score, grade


def summarize(state: SessionState) -> SessionSummary:
    c = state.counters
    score, grade = final_score(state.score, state.stability, state.zone_seconds.balanced, c.correct, c.incorrect)
    return SessionSummary(
        session_id=state.session_id,
        result=state.result,
        battle_points=state.score,
        final_score=score,
        grade=grade,
        accuracy=accuracy(c.correct, c.incorrect),
        correct=c.correct,
        incorrect=c.incorrect,
        optimal_choices=c.optimal_choices,
        misses=c.misses,
        zone_seconds=state.zone_seconds.model_copy(),
        plot_twists=state.plot_twist.triggered,
        shares=state.social.shares,
        metrics=state.metrics.model_copy(),
        metrics_history=[m.model_copy() for m in state.metrics_history],
    )
