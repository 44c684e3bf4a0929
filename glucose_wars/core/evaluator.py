from __future__ import annotations

from glucose_wars.core.models import GameMode, SessionResult, SessionState
from glucose_wars.difficulty import DifficultyProfile

CLASSIC_DEFEAT_LOW = 5.0
CLASSIC_DEFEAT_HIGH = 95.0
CLASSIC_VICTORY_RANGE = (30.0, 70.0)
LIFE_DEFEAT_AT = 5.0
LIFE_VICTORY_ABOVE = 15.0


def immediate_defeat(state: SessionState) -> bool:
    if state.mode == GameMode.classic:
        return state.stability <= CLASSIC_DEFEAT_LOW or state.stability >= CLASSIC_DEFEAT_HIGH
    if state.mode == GameMode.life:
        return any(v <= LIFE_DEFEAT_AT for v in state.metrics.values().values())
    raise ValueError(f"Unknown mode: {state.mode}")


def metrics_healthy(state: SessionState) -> bool:
    if state.mode == GameMode.classic:
        low, high = CLASSIC_VICTORY_RANGE
        return low <= state.stability <= high
    if state.mode == GameMode.life:
        return all(v > LIFE_VICTORY_ABOVE for v in state.metrics.values().values())
    raise ValueError(f"Unknown mode: {state.mode}")


def time_up_result(state: SessionState, profile: DifficultyProfile) -> SessionResult:
    if metrics_healthy(state) and state.score >= profile.min_victory_score:
        return SessionResult.victory
    return SessionResult.defeat


def evaluate(state: SessionState, profile: DifficultyProfile) -> SessionResult:
    """Result for the current snapshot; immediate defeat wins over a same-tick time-up."""

    if state.result != SessionResult.in_progress:
        return state.result
    if immediate_defeat(state):
        return SessionResult.defeat
    if state.time_remaining <= 0:
        return time_up_result(state, profile)
    return SessionResult.in_progress
