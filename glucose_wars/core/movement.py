from __future__ import annotations

from glucose_wars.catalog.announcements import Category
from glucose_wars.core import combo
from glucose_wars.core.body import apply_delta
from glucose_wars.core.models import AnnouncementKind, Faction, FoodEntity, GameMode, MetricDelta
from glucose_wars.core.step import Step
from glucose_wars.difficulty import DifficultyProfile


def miss_penalty(entity: FoodEntity, mode: GameMode, profile: DifficultyProfile) -> MetricDelta:
    """Metric delta for an entity that reached its boundary unresolved.

    Contextual entities are penalised on the ally side, like the pool they spawn from.
    """

    penalties = profile.penalties
    if entity.faction == Faction.enemy:
        if mode == GameMode.life:
            return MetricDelta(stability=-penalties.enemy_get_through, energy=-penalties.enemy_energy)
        return MetricDelta(stability=-penalties.enemy_get_through)
    if mode == GameMode.life:
        return MetricDelta(nutrition=-penalties.ally_missed)
    return MetricDelta(stability=-penalties.ally_missed)


def advance(step: Step) -> list[FoodEntity]:
    """Move every free entity by its speed and return the ones that were missed.

    Held entities stay put. Missed entities are removed, their penalties applied
    and the combo broken.
    """

    state = step.state
    kept: list[FoodEntity] = []
    missed: list[FoodEntity] = []

    for entity in state.entities:
        if entity.held:
            kept.append(entity)
            continue
        entity.position += entity.speed
        if entity.position >= entity.boundary:
            missed.append(entity)
        else:
            kept.append(entity)

    state.entities = kept
    if not missed:
        return missed

    for entity in missed:
        state.metrics = apply_delta(state.metrics, miss_penalty(entity, state.mode, step.profile))
    state.counters.misses += len(missed)

    if state.combo.count > 0:
        step.announce_random(Category.combo_break, AnnouncementKind.warning)
    state.combo = combo.broken(state.combo)
    return missed
