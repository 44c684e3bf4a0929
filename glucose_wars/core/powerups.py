from __future__ import annotations

from glucose_wars.catalog.announcements import Category
from glucose_wars.core.body import apply_delta
from glucose_wars.core.events import PowerUpKind
from glucose_wars.core.models import AnnouncementKind, GameMode, MetricDelta, Metric
from glucose_wars.core.outcomes import ActionOutcome
from glucose_wars.core.step import Step

POWER_UP_EFFECTS: dict[PowerUpKind, MetricDelta] = {
    # Lowers stability (good when too high); burns energy in Life mode.
    "exercise": MetricDelta(stability=-25, energy=-15),
    # Raises stability (good when too low); a small boost to everything in Life mode.
    "rations": MetricDelta(stability=15, energy=10, hydration=8, nutrition=8),
}

_CATEGORIES: dict[PowerUpKind, Category] = {
    "exercise": Category.exercise_used,
    "rations": Category.rations_used,
}


def effect_for(kind: PowerUpKind, mode: GameMode) -> MetricDelta:
    effect = POWER_UP_EFFECTS[kind]
    if mode == GameMode.classic:
        return effect.only(Metric.stability)
    return effect


def use(step: Step, kind: PowerUpKind) -> ActionOutcome:
    """Spend one charge. Charge availability is checked by the validator pipeline."""

    state = step.state
    charges = getattr(state.power_ups, kind)
    if charges <= 0:
        return ActionOutcome.rejected("no_charges")

    setattr(state.power_ups, kind, charges - 1)
    state.metrics = apply_delta(state.metrics, effect_for(kind, state.mode))
    step.announce_random(_CATEGORIES[kind], AnnouncementKind.success)
    return ActionOutcome(accepted=True)
