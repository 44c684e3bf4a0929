from __future__ import annotations

import random
from collections.abc import Callable
from typing import Any

import pytest

from glucose_wars.catalog.foods import FoodDefinition, food_by_name
from glucose_wars.core.models import BodyMetrics, FoodEntity, GameMode, SessionState
from glucose_wars.core.spawner import DEFAULT_PLAYFIELD, build_entity
from glucose_wars.difficulty import TIERS, DifficultyProfile


def _state(mode: GameMode = GameMode.classic, *, tier: str | None = None, **overrides: Any) -> SessionState:
    profile = TIERS[tier or ("tier1" if mode == GameMode.classic else "tier2")]
    data: dict[str, Any] = {
        "session_id": "s-test",
        "seed": 1234,
        "mode": mode,
        "tier": profile.tier,
        "duration": profile.duration_seconds,
        "time_remaining": profile.duration_seconds,
        "metrics": BodyMetrics(),
    }
    data.update(overrides)
    return SessionState(**data)


def _entity(
    state: SessionState,
    name: str,
    *,
    entity_id: str = "food-1",
    position: float | None = None,
    speed: float = 1.0,
    rng: random.Random | None = None,
) -> FoodEntity:
    definition: FoodDefinition | None = food_by_name(name)
    if definition is None:
        raise AssertionError(f"food not found: {name}")
    entity = build_entity(definition, entity_id=entity_id, state=state, rng=rng or random.Random(0))
    return entity.model_copy(update={"position": 0.0 if position is None else position, "speed": speed})


@pytest.fixture()
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture()
def make_state() -> Callable[..., SessionState]:
    return _state


@pytest.fixture()
def make_entity() -> Callable[..., FoodEntity]:
    return _entity


@pytest.fixture()
def tier1() -> DifficultyProfile:
    return TIERS["tier1"]


@pytest.fixture()
def tier2() -> DifficultyProfile:
    return TIERS["tier2"]


@pytest.fixture()
def tier3() -> DifficultyProfile:
    return TIERS["tier3"]


@pytest.fixture()
def boundary() -> float:
    return DEFAULT_PLAYFIELD.boundary
