from __future__ import annotations

import random
from dataclasses import dataclass, field

from glucose_wars.core.models import BodyMetrics, Metric


@dataclass(frozen=True, slots=True)
class MorningCondition:
    """How the player's day starts: starting metrics and drain speed for Life mode."""

    id: str
    name: str
    icon: str
    description: str
    starting_metrics: BodyMetrics
    drain_multipliers: dict[Metric, float] = field(default_factory=dict)
    preferred_foods: frozenset[str] = frozenset()
    avoid_foods: frozenset[str] = frozenset()


def _m(energy: float, hydration: float, nutrition: float, stability: float) -> BodyMetrics:
    return BodyMetrics(energy=energy, hydration=hydration, nutrition=nutrition, stability=stability)


def _d(energy: float, hydration: float, nutrition: float, stability: float) -> dict[Metric, float]:
    return {
        Metric.energy: energy,
        Metric.hydration: hydration,
        Metric.nutrition: nutrition,
        Metric.stability: stability,
    }


MORNING_CONDITIONS: dict[str, MorningCondition] = {
    c.id: c
    for c in (
        MorningCondition(
            "well_rested", "Well Rested", "😴", "Great sleep! +10% energy capacity",
            _m(60, 50, 50, 55), _d(0.8, 1.0, 1.0, 1.0),
        ),
        MorningCondition(
            "poor_sleep", "Poor Sleep", "😫", "Tired... need caffeine & easy foods",
            _m(30, 45, 50, 45), _d(1.5, 1.2, 1.0, 1.2),
            preferred_foods=frozenset({"coffee", "tea", "fruit"}),
            avoid_foods=frozenset({"alcohol"}),
        ),
        MorningCondition(
            "sick_day", "Sick Day", "🤒", "Under the weather - hydration critical!",
            _m(35, 35, 45, 45), _d(1.2, 2.0, 1.3, 1.0),
            preferred_foods=frozenset({"water", "tea", "fruit"}),
            avoid_foods=frozenset({"processed", "fast_food", "alcohol", "coffee"}),
        ),
        MorningCondition(
            "marathon_day", "Marathon Day", "🏃", "Big workout ahead - carbs & hydration!",
            _m(45, 40, 50, 50), _d(1.8, 1.8, 1.2, 1.0),
            preferred_foods=frozenset({"whole_grain", "fruit", "water", "protein"}),
            avoid_foods=frozenset({"alcohol", "fast_food"}),
        ),
        MorningCondition(
            "stressed", "Stressed Out", "😰", "High stress - avoid stimulants!",
            _m(55, 45, 45, 40), _d(1.0, 1.3, 1.2, 1.5),
            preferred_foods=frozenset({"tea", "vegetable", "nuts"}),
            avoid_foods=frozenset({"coffee", "energy_drink", "sugar", "candy"}),
        ),
        MorningCondition(
            "recovery_day", "Recovery Day", "💪", "Post-workout - protein priority!",
            _m(40, 40, 45, 50), _d(1.3, 1.5, 1.5, 1.0),
            preferred_foods=frozenset({"protein", "water", "fruit", "dairy"}),
            avoid_foods=frozenset({"alcohol", "processed"}),
        ),
        MorningCondition(
            "normal_day", "Normal Day", "😊", "A regular day - stay balanced!",
            _m(50, 50, 50, 50), _d(1.0, 1.0, 1.0, 1.0),
        ),
    )
}

DEFAULT_CONDITION = "normal_day"


def get_condition(condition_id: str) -> MorningCondition:
    return MORNING_CONDITIONS.get(condition_id) or MORNING_CONDITIONS[DEFAULT_CONDITION]


def pick_condition(rng: random.Random) -> MorningCondition:
    return MORNING_CONDITIONS[rng.choice(sorted(MORNING_CONDITIONS))]
