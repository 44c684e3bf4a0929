"""Player action resolution.

Validation (entity exists, action allowed, storage free) has already run by the
time `resolve` is called; everything here is scoring and metric bookkeeping on
the step's working copy.
"""

from __future__ import annotations

from glucose_wars.catalog import announcements
from glucose_wars.catalog.announcements import Category
from glucose_wars.core import combo
from glucose_wars.core.body import StabilityZone, apply_delta, crossed_low, stability_zone
from glucose_wars.core.models import (
    Action,
    AnnouncementKind,
    FoodEntity,
    GameMode,
    MetricDelta,
    SavedSlot,
    SessionState,
)
from glucose_wars.core.outcomes import ActionOutcome, FoodConsumed, FoodNutrients
from glucose_wars.core.step import Step

BAD_CONSUME_POINTS = 0.5
SAVE_POINTS = 0.3
SAVED_CONSUME_POINTS = 1.5
SHARE_BASE_BONUS = 15
SHARE_METER_STEP = 10
SHARE_METER_BONUS_AT = 70
SHARE_METER_MULTIPLIER = 1.5
SHARE_TWIST_MULTIPLIER = 2.0
SHARE_TWIST_STABILITY = 5
TWIST_ACTION_MULTIPLIER = 1.5


def is_correct(entity: FoodEntity, action: Action) -> bool:
    if action == Action.consume:
        return entity.is_good()
    if action == Action.reject:
        return not entity.is_good()
    # Save and share succeed whenever they get past validation.
    return True


def nutrients_of(entity: FoodEntity, effects: MetricDelta) -> FoodNutrients:
    return FoodNutrients(
        name=entity.name,
        food_type=entity.food_type,
        faction=entity.faction.value,
        glucose_impact=entity.glucose_impact,
        effects=effects,
    )


def bonus_multiplier(state: SessionState, entity: FoodEntity, action: Action, meter_after: int) -> tuple[float, bool]:
    """Everything except the combo tier; returns (multiplier, hit the optimal action)."""

    multiplier = 1.0
    optimal = entity.optimal_action is not None and entity.optimal_action.action == action
    if optimal:
        multiplier *= entity.optimal_action.multiplier  # type: ignore[union-attr]

    twist = state.plot_twist.active
    if twist is not None:
        if action in twist.bonus_actions:
            multiplier *= TWIST_ACTION_MULTIPLIER
        if twist.share_bonus and action == Action.share:
            multiplier *= SHARE_TWIST_MULTIPLIER

    if action == Action.share and meter_after >= SHARE_METER_BONUS_AT:
        multiplier *= SHARE_METER_MULTIPLIER
    return multiplier, optimal


def _label(entity: FoodEntity) -> str:
    return f"{entity.sprite} {entity.name}"


def _announce_zone_change(step: Step, before: float) -> None:
    old, new = stability_zone(before), stability_zone(step.state.stability)
    if new == old:
        return
    if new == StabilityZone.critical_high:
        step.announce_random(Category.critical_high, AnnouncementKind.error)
    elif new == StabilityZone.critical_low:
        step.announce_random(Category.critical_low, AnnouncementKind.error)


def _resolve_classic(step: Step, entity: FoodEntity, action: Action) -> ActionOutcome:
    state = step.state
    now = state.elapsed_ms
    before = state.stability

    if not is_correct(entity, action):
        state.metrics = apply_delta(state.metrics, MetricDelta(stability=-step.profile.wrong_action_stability_penalty))
        state.combo = combo.advance(state.combo, correct=False, now_ms=now)
        state.counters.incorrect += 1
        step.announce_random(Category.wrong_swipe, AnnouncementKind.error)
        return ActionOutcome(accepted=True, action=action, correct=False)

    state.combo = combo.advance(state.combo, correct=True, now_ms=now)
    points = round(entity.base_points * combo.multiplier_for(state.combo.count))
    if action == Action.consume:
        state.metrics = apply_delta(state.metrics, MetricDelta(stability=entity.glucose_impact))
        step.emit(FoodConsumed(nutrients=nutrients_of(entity, MetricDelta(stability=entity.glucose_impact))))
    state.score += points
    state.counters.correct += 1
    # Combo tiers and zone changes below replace this with something louder.
    step.announce(announcements.resolved(_label(entity), points), AnnouncementKind.success)

    tier = combo.tier_reached(state.combo.count)
    if tier is not None:
        step.announce(tier.title, AnnouncementKind.success)
    _announce_zone_change(step, before)
    return ActionOutcome(accepted=True, action=action, correct=True, points=points)


def _resolve_life(step: Step, entity: FoodEntity, action: Action) -> ActionOutcome:
    state = step.state
    now = state.elapsed_ms
    before = state.metrics.model_copy()
    correct = is_correct(entity, action)
    streak_alive = combo.is_active(state.combo, now)

    meter_after = min(100, state.social.meter + SHARE_METER_STEP) if action == Action.share else state.social.meter
    state.combo = combo.advance(state.combo, correct=correct, now_ms=now)
    bonus, optimal = bonus_multiplier(state, entity, action, meter_after)
    multiplier = combo.multiplier_for(state.combo.count) * bonus

    points = 0
    if action == Action.consume:
        if correct:
            effects = entity.effects.scaled(abs(entity.time_modifier(state.time_phase)))
            points = round(entity.base_points * multiplier)
            step.announce(announcements.resolved(_label(entity), points), AnnouncementKind.success)
        else:
            effects = entity.effects
            points = round(entity.base_points * BAD_CONSUME_POINTS)
            step.announce(announcements.UNHEALTHY_CONSUMED, AnnouncementKind.warning)
        state.metrics = apply_delta(state.metrics, effects)
        step.emit(FoodConsumed(nutrients=nutrients_of(entity, effects)))
    elif action == Action.reject:
        if correct:
            points = round(entity.base_points * multiplier)
            step.announce(announcements.resolved(_label(entity), points), AnnouncementKind.success)
        else:
            penalty = MetricDelta(nutrition=-step.profile.wrong_reject_nutrition_penalty)
            state.metrics = apply_delta(state.metrics, penalty)
            step.announce(announcements.HEALTHY_REJECTED, AnnouncementKind.error)
    elif action == Action.save:
        slot = next(i for i, s in enumerate(state.saved_slots) if s.food is None)
        stored = entity.model_copy(update={"held": False})
        state.saved_slots[slot] = SavedSlot(food=stored, saved_at_ms=now)
        points = round(entity.base_points * SAVE_POINTS * multiplier)
        step.announce(announcements.SAVED)
    elif action == Action.share:
        social = state.social
        social.shares += 1
        social.streak = social.streak + 1 if streak_alive else 1
        social.meter = meter_after
        twist = state.plot_twist.active
        if twist is not None and twist.share_bonus:
            state.metrics = apply_delta(state.metrics, MetricDelta(stability=SHARE_TWIST_STABILITY))
        points = round((entity.base_points + SHARE_BASE_BONUS) * multiplier)
        step.announce(announcements.shared(points), AnnouncementKind.success)
    else:
        raise ValueError(f"Unknown action: {action}")

    state.score += points
    if correct:
        state.counters.correct += 1
    else:
        state.counters.incorrect += 1
    if optimal and correct:
        state.counters.optimal_choices += 1

    tier = combo.tier_reached(state.combo.count) if correct else None
    if tier is not None:
        step.announce(tier.title, AnnouncementKind.success)
    for metric in crossed_low(before, state.metrics):
        step.announce_random(announcements.LOW_METRIC_CATEGORIES[metric], AnnouncementKind.warning)

    return ActionOutcome(accepted=True, action=action, correct=correct, points=points, optimal=optimal and correct)


def resolve(step: Step, entity_id: str, action: Action) -> ActionOutcome:
    state = step.state
    entity = state.find_entity(entity_id)
    if entity is None:
        return ActionOutcome.rejected("unknown_entity", action)

    if state.mode == GameMode.classic:
        outcome = _resolve_classic(step, entity, action)
    elif state.mode == GameMode.life:
        outcome = _resolve_life(step, entity, action)
    else:
        raise ValueError(f"Unknown mode: {state.mode}")

    state.entities = [e for e in state.entities if e.id != entity_id]
    state.last_action = action
    return outcome


def consume_saved(step: Step, slot: int) -> ActionOutcome:
    state = step.state
    food = state.saved_slots[slot].food
    if food is None:
        return ActionOutcome.rejected("empty_slot", Action.consume)

    effects = food.effects.scaled(abs(food.time_modifier(state.time_phase)))
    before = state.metrics.model_copy()
    state.metrics = apply_delta(state.metrics, effects)
    points = round(food.base_points * SAVED_CONSUME_POINTS)
    state.score += points
    state.saved_slots[slot] = SavedSlot()
    step.emit(FoodConsumed(nutrients=nutrients_of(food, effects)))
    step.announce(announcements.resolved(_label(food), points), AnnouncementKind.success)
    for metric in crossed_low(before, state.metrics):
        step.announce_random(announcements.LOW_METRIC_CATEGORIES[metric], AnnouncementKind.warning)
    return ActionOutcome(accepted=True, action=Action.consume, correct=True, points=points)
