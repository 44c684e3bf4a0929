from __future__ import annotations

import random

from glucose_wars.catalog.plot_twists import twist_pool
from glucose_wars.core.body import apply_delta
from glucose_wars.core.events import RandomDraw
from glucose_wars.core.models import AnnouncementKind, GameMode, PlotTwist, SessionState
from glucose_wars.core.outcomes import PlotTwistExpired, PlotTwistStarted
from glucose_wars.core.step import Step
from glucose_wars.difficulty import DifficultyProfile

MAX_TWISTS_PER_SESSION = 2
MIN_SECONDS_REMAINING = 10


def twists_enabled(state: SessionState, profile: DifficultyProfile) -> bool:
    return state.mode == GameMode.life and profile.plot_twists_enabled


def can_fire(state: SessionState) -> bool:
    pt = state.plot_twist
    return (
        pt.active is None
        and pt.triggered < MAX_TWISTS_PER_SESSION
        and state.time_remaining >= MIN_SECONDS_REMAINING
    )


def select(pool: tuple[PlotTwist, ...], *, draw: RandomDraw | None, rng: random.Random) -> PlotTwist:
    """Uniform pick from the pool: the provider's value when present, else the session RNG."""

    if draw is not None:
        return pool[draw.value % len(pool)]
    return rng.choice(pool)


def fire(step: Step, draw: RandomDraw | None) -> PlotTwist | None:
    state = step.state
    state.plot_twist.check_pending = False
    if not twists_enabled(state, step.profile) or not can_fire(state):
        return None

    twist = select(twist_pool(state.audience), draw=draw, rng=step.rng)
    verifiable = draw is not None

    pt = state.plot_twist
    pt.active = twist
    pt.remaining = twist.duration_seconds
    pt.triggered += 1
    pt.verifiable = verifiable
    pt.proof = draw.proof if draw is not None else None
    state.metrics = apply_delta(state.metrics, twist.immediate_effect)

    text = f"{twist.icon} {twist.name}" + (" ⚖️ FAIR" if verifiable else "")
    step.announce(text, AnnouncementKind.plot_twist, science=twist.bonus_condition)
    step.emit(PlotTwistStarted(twist_id=twist.id, name=twist.name, verifiable=verifiable, proof=pt.proof))
    return twist


def tick(step: Step) -> None:
    """Per-second decay of the active twist; arms the next check when it expires."""

    state = step.state
    pt = state.plot_twist
    if pt.active is None or pt.remaining <= 0:
        return
    pt.remaining -= 1
    if pt.remaining > 0:
        return

    step.emit(PlotTwistExpired(twist_id=pt.active.id))
    pt.active = None
    pt.verifiable = False
    pt.proof = None
    if pt.triggered < MAX_TWISTS_PER_SESSION:
        pt.check_pending = True
