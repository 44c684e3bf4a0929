from __future__ import annotations

import random
from dataclasses import dataclass
from itertools import accumulate

from glucose_wars.catalog.conditions import get_condition
from glucose_wars.catalog.foods import ALLY_FOODS, ENEMY_FOODS, FoodDefinition
from glucose_wars.core.models import Action, Faction, FoodEntity, GameMode, OptimalAction, SessionState, TimePhase
from glucose_wars.difficulty import DifficultyProfile

ALLY_SPAWN_CHANCE = 0.65
OPTIMAL_MULTIPLIER = 1.5


@dataclass(frozen=True, slots=True)
class Playfield:
    width: float = 390
    height: float = 844
    spawn_y: float = -60
    # Distance from the bottom edge where entities count as missed.
    gate_offset: float = 200
    classic_margin: float = 40
    # Life mode reserves room for the side panels (80 + 20).
    life_margin: float = 100
    min_speed: float = 1.2
    speed_range: float = 0.8

    @property
    def boundary(self) -> float:
        return self.height - self.gate_offset

    def margin(self, mode: GameMode) -> float:
        return self.life_margin if mode == GameMode.life else self.classic_margin


DEFAULT_PLAYFIELD = Playfield()


class WeightedTable:
    """Cumulative-weight table for one faction's food definitions.

    Built once; each draw is a single uniform sample bisected against the
    running totals.
    """

    def __init__(self, definitions: tuple[FoodDefinition, ...]):
        if not definitions:
            raise ValueError("WeightedTable needs at least one definition")
        self.definitions = definitions
        self.cum_weights = list(accumulate(d.spawn_weight for d in definitions))

    @property
    def total(self) -> int:
        return self.cum_weights[-1]

    def pick(self, rng: random.Random) -> FoodDefinition:
        return rng.choices(self.definitions, cum_weights=self.cum_weights, k=1)[0]


ALLY_TABLE = WeightedTable(ALLY_FOODS)
ENEMY_TABLE = WeightedTable(ENEMY_FOODS)


def spawn_interval_ms(profile: DifficultyProfile, elapsed_seconds: int) -> int:
    reduction = (elapsed_seconds // 10) * profile.spawn_interval_step_ms
    return max(profile.spawn_interval_min_ms, profile.spawn_interval_initial_ms - reduction)


def optimal_action_for(definition: FoodDefinition, state: SessionState) -> OptimalAction | None:
    if state.mode != GameMode.life:
        return None
    condition = get_condition(state.morning_condition)
    if definition.food_type in condition.preferred_foods:
        return OptimalAction(action=Action.consume, multiplier=OPTIMAL_MULTIPLIER, reason=f"{condition.name} needs this")
    if definition.food_type in condition.avoid_foods:
        return OptimalAction(action=Action.reject, multiplier=OPTIMAL_MULTIPLIER, reason=f"Avoid on a {condition.name}")
    return None


def build_entity(
    definition: FoodDefinition,
    *,
    entity_id: str,
    state: SessionState,
    rng: random.Random,
    playfield: Playfield = DEFAULT_PLAYFIELD,
) -> FoodEntity:
    margin = playfield.margin(state.mode)
    phase: TimePhase = state.time_phase
    is_good = True
    if definition.faction == Faction.contextual:
        is_good = definition.time_modifiers.get(phase, 1.0) > 0

    return FoodEntity(
        id=entity_id,
        food_type=definition.food_type,
        name=definition.name,
        sprite=definition.sprite,
        faction=definition.faction,
        effects=definition.effects,
        glucose_impact=definition.glucose_impact,
        time_modifiers=dict(definition.time_modifiers),
        x=margin + rng.random() * (playfield.width - 2 * margin),
        position=playfield.spawn_y,
        speed=playfield.min_speed + rng.random() * playfield.speed_range,
        boundary=playfield.boundary,
        base_points=definition.base_points,
        optimal_action=optimal_action_for(definition, state),
        is_contextually_good=is_good,
    )


def spawn(
    state: SessionState,
    *,
    profile: DifficultyProfile,
    rng: random.Random,
    playfield: Playfield = DEFAULT_PLAYFIELD,
) -> FoodEntity | None:
    """Append one new entity to `state.entities` (mutates), or None when at the cap."""

    if len(state.entities) >= profile.max_concurrent_entities:
        return None

    table = ALLY_TABLE if rng.random() < ALLY_SPAWN_CHANCE else ENEMY_TABLE
    definition = table.pick(rng)

    state.spawn_seq += 1
    entity = build_entity(definition, entity_id=f"food-{state.spawn_seq}", state=state, rng=rng, playfield=playfield)
    state.entities.append(entity)
    return entity
