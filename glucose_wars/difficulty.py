from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from glucose_wars.config import get_default_tier
from glucose_wars.core.models import Action, GameMode

logger = logging.getLogger(__name__)

MODE_ACTIONS: dict[GameMode, frozenset[Action]] = {
    GameMode.classic: frozenset({Action.consume, Action.reject}),
    GameMode.life: frozenset(Action),
}


class MissPenalties(BaseModel):
    model_config = ConfigDict(frozen=True)

    enemy_get_through: float = Field(default=8, ge=0)
    ally_missed: float = Field(default=3, ge=0)
    # Extra energy loss on an enemy miss (Life mode only).
    enemy_energy: float = Field(default=0, ge=0)


class DifficultyProfile(BaseModel):
    """Static pacing/penalty policy for one session.

    Field defaults are the documented fallbacks used when a session is created
    without a tier.
    """

    model_config = ConfigDict(frozen=True)

    tier: str = "default"
    name: str = "Default"
    description: str = ""
    mode: GameMode = GameMode.classic

    duration_seconds: int = Field(default=60, gt=0)
    spawn_interval_initial_ms: int = Field(default=1500, gt=0)
    spawn_interval_min_ms: int = Field(default=600, gt=0)
    spawn_interval_step_ms: int = Field(default=50, ge=0)
    max_concurrent_entities: int = Field(default=8, gt=0)
    allowed_actions: frozenset[Action] = frozenset(Action)

    penalties: MissPenalties = Field(default_factory=MissPenalties)
    wrong_action_stability_penalty: float = Field(default=8, ge=0)
    wrong_reject_nutrition_penalty: float = Field(default=3, ge=0)

    plot_twists_enabled: bool = True
    # Time-up victory also needs score >= this (1 means "score > 0").
    min_victory_score: int = Field(default=1, ge=0)

    def actions_for(self, mode: GameMode) -> frozenset[Action]:
        return self.allowed_actions & MODE_ACTIONS[mode]


TIERS: dict[str, DifficultyProfile] = {
    "tier1": DifficultyProfile(
        tier="tier1",
        name="Tutorial",
        description="Warm-up Round: Learn the basics",
        mode=GameMode.classic,
        duration_seconds=30,
        spawn_interval_initial_ms=1500,
        max_concurrent_entities=3,
        allowed_actions=frozenset({Action.consume, Action.reject}),
        penalties=MissPenalties(enemy_get_through=8, ally_missed=3),
        plot_twists_enabled=False,
        min_victory_score=100,
    ),
    "tier2": DifficultyProfile(
        tier="tier2",
        name="Challenge 1",
        description="Manage your health",
        mode=GameMode.life,
        duration_seconds=60,
        spawn_interval_initial_ms=1200,
        max_concurrent_entities=5,
        penalties=MissPenalties(enemy_get_through=15, ally_missed=5),
        plot_twists_enabled=False,
    ),
    "tier3": DifficultyProfile(
        tier="tier3",
        name="Challenge 2",
        description="Master advanced play",
        mode=GameMode.life,
        duration_seconds=90,
        spawn_interval_initial_ms=1000,
        max_concurrent_entities=7,
        penalties=MissPenalties(enemy_get_through=25, ally_missed=8, enemy_energy=10),
        plot_twists_enabled=True,
    ),
}

# Most lenient known profile; used for unknown or malformed input.
FALLBACK_TIER = "tier1"


def get_profile(tier: str | None = None) -> DifficultyProfile:
    key = tier or get_default_tier()
    profile = TIERS.get(key)
    if profile is None:
        logger.warning("Unknown difficulty tier %r; falling back to %s", key, FALLBACK_TIER)
        return TIERS[FALLBACK_TIER]
    return profile


def load_profile(raw: Mapping[str, Any] | str | None) -> DifficultyProfile:
    """Resolve a tier key or an inline profile mapping.

    Never raises: anything that does not validate falls back to the most lenient tier.
    """

    if raw is None or isinstance(raw, str):
        return get_profile(raw)

    try:
        return DifficultyProfile.model_validate(dict(raw))
    except ValidationError as e:
        logger.warning("Malformed difficulty profile (%s); falling back to %s", e.error_count(), FALLBACK_TIER)
        return TIERS[FALLBACK_TIER]
