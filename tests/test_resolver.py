from __future__ import annotations

import random

import pytest

from glucose_wars.catalog import announcements
from glucose_wars.catalog.plot_twists import PERSONAL_TWISTS
from glucose_wars.core.engine import transition
from glucose_wars.core.events import ConsumeSaved, ResolveAction
from glucose_wars.core.models import Action, GameMode, PlotTwistState, SavedSlot, SocialMeter, TimePhase
from glucose_wars.core.outcomes import FoodConsumed


def _twist(twist_id: str):
    return next(t for t in PERSONAL_TWISTS if t.id == twist_id)


def _resolve(state, entity_id: str, action: Action, profile):
    return transition(state, ResolveAction(entity_id=entity_id, action=action), profile=profile, rng=random.Random(9))


def test_classic_correct_consume_applies_glucose_impact(make_state, make_entity, tier1) -> None:
    state = make_state(GameMode.classic)
    state.entities = [make_entity(state, "Broccoli Knight")]

    applied = _resolve(state, "food-1", Action.consume, tier1)

    assert applied.outcome is not None
    assert applied.outcome.correct and applied.outcome.points == 10
    assert applied.state.stability == 53
    assert applied.state.score == 10
    assert applied.state.entities == []
    assert applied.state.last_action == Action.consume
    consumed = [n for n in applied.notifications if isinstance(n, FoodConsumed)]
    assert consumed and consumed[0].nutrients.name == "Broccoli Knight"


def test_classic_wrong_action_costs_stability(make_state, make_entity, tier1) -> None:
    state = make_state(GameMode.classic)
    state.entities = [make_entity(state, "Donut Demon")]

    applied = _resolve(state, "food-1", Action.consume, tier1)

    assert applied.outcome is not None
    assert applied.outcome.accepted and not applied.outcome.correct
    assert applied.outcome.points == 0
    assert applied.state.stability == 42
    assert applied.state.counters.incorrect == 1
    assert applied.state.combo.count == 0


def test_classic_rejects_life_only_actions(make_state, make_entity, tier1) -> None:
    state = make_state(GameMode.classic)
    state.entities = [make_entity(state, "Broccoli Knight")]

    applied = _resolve(state, "food-1", Action.share, tier1)

    assert not applied.state_changed
    assert applied.outcome is not None
    assert applied.outcome.reason == "action_not_allowed"
    assert applied.state is state


def test_stale_entity_id_is_a_rejected_outcome(make_state, tier1) -> None:
    state = make_state(GameMode.classic)
    applied = _resolve(state, "food-99", Action.consume, tier1)

    assert not applied.state_changed
    assert applied.outcome is not None
    assert not applied.outcome.accepted
    assert applied.outcome.reason == "unknown_entity"


def test_life_consume_ally_applies_effects(make_state, make_entity, tier2) -> None:
    state = make_state(GameMode.life)
    state.entities = [make_entity(state, "Broccoli Knight")]

    applied = _resolve(state, "food-1", Action.consume, tier2)
    m = applied.state.metrics

    assert applied.outcome is not None and applied.outcome.points == 10
    assert (m.energy, m.hydration, m.nutrition, m.stability) == (53, 55, 62, 53)
    assert applied.state.counters.correct == 1


def test_life_contextual_food_flips_in_the_evening(make_state, make_entity, tier2) -> None:
    state = make_state(GameMode.life, time_phase=TimePhase.evening)
    state.entities = [
        make_entity(state, "Coffee Commander", entity_id="food-1"),
        make_entity(state, "Coffee Commander", entity_id="food-2"),
    ]
    assert not state.entities[0].is_good()

    applied = _resolve(state, "food-1", Action.consume, tier2)
    assert applied.outcome is not None
    assert not applied.outcome.correct
    # half points, full unscaled effects
    assert applied.outcome.points == 4
    assert applied.state.metrics.energy == 68
    assert applied.state.metrics.hydration == 42
    assert applied.state.announcement is not None
    assert applied.state.announcement.text == announcements.UNHEALTHY_CONSUMED

    applied = _resolve(applied.state, "food-2", Action.reject, tier2)
    assert applied.outcome is not None
    assert applied.outcome.correct and applied.outcome.points == 8


def test_life_wrong_reject_costs_nutrition(make_state, make_entity, tier2) -> None:
    state = make_state(GameMode.life)
    state.entities = [make_entity(state, "Apple Archer")]

    applied = _resolve(state, "food-1", Action.reject, tier2)

    assert applied.outcome is not None
    assert applied.outcome.points == 0
    assert applied.state.metrics.nutrition == 47
    assert applied.state.announcement is not None
    assert applied.state.announcement.text == announcements.HEALTHY_REJECTED


def test_life_save_stores_food_and_awards_partial_points(make_state, make_entity, tier2) -> None:
    state = make_state(GameMode.life)
    state.entities = [make_entity(state, "Broccoli Knight")]

    applied = _resolve(state, "food-1", Action.save, tier2)

    assert applied.outcome is not None and applied.outcome.points == 3
    slot = applied.state.saved_slots[0]
    assert slot.food is not None and slot.food.name == "Broccoli Knight"
    assert applied.state.entities == []


def test_life_save_with_full_storage_is_rejected(make_state, make_entity, tier2) -> None:
    state = make_state(GameMode.life)
    stored = make_entity(state, "Carrot Scout", entity_id="food-0")
    state.saved_slots = [SavedSlot(food=stored) for _ in range(3)]
    state.entities = [make_entity(state, "Broccoli Knight")]

    applied = _resolve(state, "food-1", Action.save, tier2)

    assert not applied.state_changed
    assert applied.outcome is not None
    assert applied.outcome.reason == "storage_full"


def test_life_share_raises_meter_and_scores(make_state, make_entity, tier2) -> None:
    state = make_state(GameMode.life)
    state.entities = [make_entity(state, "Broccoli Knight")]

    applied = _resolve(state, "food-1", Action.share, tier2)

    assert applied.outcome is not None and applied.outcome.points == 25
    assert applied.state.social.shares == 1
    assert applied.state.social.meter == 10
    assert applied.state.social.streak == 1


def test_life_share_meter_bonus_counts_this_share(make_state, make_entity, tier2) -> None:
    state = make_state(GameMode.life, social=SocialMeter(shares=6, streak=0, meter=60))
    state.entities = [make_entity(state, "Broccoli Knight")]

    applied = _resolve(state, "food-1", Action.share, tier2)

    assert applied.state.social.meter == 70
    assert applied.outcome is not None and applied.outcome.points == 38


def test_share_bonus_twist_doubles_once_and_steadies(make_state, make_entity, tier3) -> None:
    twist = _twist("stressful_call")
    state = make_state(GameMode.life, tier="tier3", plot_twist=PlotTwistState(active=twist, remaining=5, triggered=1))
    state.entities = [make_entity(state, "Broccoli Knight")]

    applied = _resolve(state, "food-1", Action.share, tier3)

    assert applied.outcome is not None and applied.outcome.points == 50
    assert applied.state.stability == 55


def test_twist_bonus_action_multiplier(make_state, make_entity, tier3) -> None:
    twist = _twist("surprise_meeting")
    state = make_state(GameMode.life, tier="tier3", plot_twist=PlotTwistState(active=twist, remaining=5, triggered=1))
    state.entities = [make_entity(state, "Broccoli Knight")]

    applied = _resolve(state, "food-1", Action.consume, tier3)

    assert applied.outcome is not None and applied.outcome.points == 15


def test_optimal_action_from_morning_condition(make_state, make_entity, tier2) -> None:
    state = make_state(GameMode.life, morning_condition="poor_sleep")
    state.entities = [make_entity(state, "Apple Archer")]
    assert state.entities[0].optimal_action is not None

    applied = _resolve(state, "food-1", Action.consume, tier2)

    assert applied.outcome is not None
    assert applied.outcome.optimal
    assert applied.outcome.points == 12
    assert applied.state.counters.optimal_choices == 1


def test_consume_saved_food(make_state, make_entity, tier2) -> None:
    state = make_state(GameMode.life)
    state.saved_slots[1] = SavedSlot(food=make_entity(state, "Broccoli Knight", entity_id="food-7"))

    applied = transition(state, ConsumeSaved(slot=1), profile=tier2, rng=random.Random(1))

    assert applied.outcome is not None and applied.outcome.accepted
    assert applied.outcome.points == 15
    assert applied.state.saved_slots[1].food is None
    assert applied.state.metrics.nutrition == 62


@pytest.mark.parametrize("slot", [0, 5, -1])
def test_consume_saved_empty_or_bad_slot(make_state, tier2, slot: int) -> None:
    state = make_state(GameMode.life)
    applied = transition(state, ConsumeSaved(slot=slot), profile=tier2, rng=random.Random(1))

    assert not applied.state_changed
    assert applied.outcome is not None
    assert applied.outcome.reason == "empty_slot"


def test_consume_saved_is_life_only(make_state, tier1) -> None:
    state = make_state(GameMode.classic)
    applied = transition(state, ConsumeSaved(slot=0), profile=tier1, rng=random.Random(1))

    assert applied.outcome is not None
    assert applied.outcome.reason == "action_not_allowed"


def test_classic_correct_action_announces_the_outcome(make_state, make_entity, tier1) -> None:
    state = make_state(GameMode.classic)
    state.entities = [make_entity(state, "Broccoli Knight")]

    applied = _resolve(state, "food-1", Action.consume, tier1)

    assert applied.state.announcement is not None
    assert applied.state.announcement.text == "🥦 Broccoli Knight +10"


def test_life_correct_reject_announces_the_outcome(make_state, make_entity, tier2) -> None:
    state = make_state(GameMode.life)
    state.entities = [make_entity(state, "Soda Specter")]

    applied = _resolve(state, "food-1", Action.reject, tier2)

    assert applied.outcome is not None and applied.outcome.correct
    assert applied.state.announcement is not None
    assert applied.state.announcement.text == announcements.resolved("🥤 Soda Specter", applied.outcome.points)
