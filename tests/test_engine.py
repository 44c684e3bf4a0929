from __future__ import annotations

import random

import pytest

from glucose_wars.catalog import announcements
from glucose_wars.catalog.announcements import Category
from glucose_wars.catalog.conditions import MORNING_CONDITIONS
from glucose_wars.core.engine import HISTORY_LIMIT, create_session_state, phase_for, transition
from glucose_wars.core.events import (
    ClearAnnouncement,
    CountdownTick,
    EndSession,
    MovementTick,
    Pause,
    ResolveAction,
    Resume,
    SpawnTick,
)
from glucose_wars.core.models import Action, Audience, BodyMetrics, GameMode, SessionResult, TimePhase
from glucose_wars.core.outcomes import SessionEnded


def test_create_classic_session(tier1) -> None:
    state = create_session_state(session_id="s1", seed=7, profile=tier1, rng=random.Random(7))

    assert state.mode == GameMode.classic
    assert state.duration == state.time_remaining == 30
    assert state.metrics == BodyMetrics()
    assert state.morning_condition == "normal_day"
    assert not state.plot_twist.check_pending
    assert state.announcement is not None
    assert state.announcement.text in announcements.ANNOUNCEMENTS[Category.game_start]


def test_create_life_session_uses_a_morning_condition(tier3) -> None:
    state = create_session_state(
        session_id="s1", seed=7, profile=tier3, rng=random.Random(7), audience=Audience.curious
    )
    condition = MORNING_CONDITIONS[state.morning_condition]

    assert state.mode == GameMode.life
    assert state.metrics == condition.starting_metrics
    assert state.audience == Audience.curious
    assert state.plot_twist.check_pending
    assert state.announcement is not None
    assert state.announcement.science is not None
    assert condition.name in state.announcement.science


def test_mode_override(tier1) -> None:
    state = create_session_state(session_id="s1", seed=7, profile=tier1, rng=random.Random(7), mode=GameMode.life)
    assert state.mode == GameMode.life
    # tier1 keeps twists off even in life mode
    assert not state.plot_twist.check_pending


def test_transition_never_mutates_its_input(make_state, make_entity, tier1) -> None:
    state = make_state(GameMode.classic)
    state.entities = [make_entity(state, "Broccoli Knight")]
    before = state.model_dump()
    rng = random.Random(1)

    for event in (MovementTick(), CountdownTick(), SpawnTick(), ResolveAction(entity_id="food-1", action=Action.consume)):
        applied = transition(state, event, profile=tier1, rng=rng)
        assert applied.state is not state
        assert state.model_dump() == before


def test_unknown_event_raises(make_state, tier1) -> None:
    with pytest.raises(ValueError, match="Unknown event"):
        transition(make_state(), object(), profile=tier1, rng=random.Random(1))  # type: ignore[arg-type]


def test_phases_split_the_session_in_quarters() -> None:
    assert phase_for(60, 60) == TimePhase.morning
    assert phase_for(60, 45) == TimePhase.midday
    assert phase_for(60, 30) == TimePhase.afternoon
    assert phase_for(60, 15) == TimePhase.evening
    assert phase_for(60, 0) == TimePhase.evening


def test_phase_change_is_announced_in_life_mode(make_state, tier2) -> None:
    state = make_state(GameMode.life, time_remaining=46)

    applied = transition(state, CountdownTick(), profile=tier2, rng=random.Random(1))

    assert applied.state.time_phase == TimePhase.midday
    assert applied.state.announcement is not None
    assert applied.state.announcement.text in announcements.ANNOUNCEMENTS[Category.phase_midday]


def test_final_wave_announcement(make_state, tier1) -> None:
    state = make_state(GameMode.classic, time_remaining=11)

    applied = transition(state, CountdownTick(), profile=tier1, rng=random.Random(1))

    assert applied.state.announcement is not None
    assert applied.state.announcement.text in announcements.ANNOUNCEMENTS[Category.final_wave]


def test_zone_seconds_and_bounded_history(make_state, tier1) -> None:
    state = make_state(GameMode.classic, duration=500, time_remaining=500, metrics=BodyMetrics(stability=35))
    rng = random.Random(1)

    for _ in range(HISTORY_LIMIT + 5):
        state = transition(state, CountdownTick(), profile=tier1, rng=rng).state

    assert state.zone_seconds.warning == HISTORY_LIMIT + 5
    assert state.zone_seconds.balanced == 0
    assert len(state.metrics_history) == HISTORY_LIMIT


def test_spawn_tick_adds_entities_until_the_cap(make_state, tier1) -> None:
    state = make_state(GameMode.classic)
    rng = random.Random(4)

    for _ in range(tier1.max_concurrent_entities):
        applied = transition(state, SpawnTick(), profile=tier1, rng=rng)
        assert applied.state_changed
        state = applied.state

    assert [e.id for e in state.entities] == ["food-1", "food-2", "food-3"]
    applied = transition(state, SpawnTick(), profile=tier1, rng=rng)
    assert not applied.state_changed
    assert applied.state is state


def test_pause_freezes_ticks_and_rejects_actions(make_state, make_entity, tier1) -> None:
    state = make_state(GameMode.classic)
    state.entities = [make_entity(state, "Broccoli Knight")]
    rng = random.Random(1)

    paused = transition(state, Pause(), profile=tier1, rng=rng).state
    assert paused.paused

    for event in (CountdownTick(), MovementTick(), SpawnTick()):
        assert not transition(paused, event, profile=tier1, rng=rng).state_changed

    applied = transition(paused, ResolveAction(entity_id="food-1", action=Action.consume), profile=tier1, rng=rng)
    assert applied.outcome is not None
    assert applied.outcome.reason == "paused"

    # pausing twice is a no-op
    assert not transition(paused, Pause(), profile=tier1, rng=rng).state_changed

    resumed = transition(paused, Resume(), profile=tier1, rng=rng).state
    assert not resumed.paused
    assert transition(resumed, CountdownTick(), profile=tier1, rng=rng).state.time_remaining == 29


def test_resume_while_running_is_a_noop(make_state, tier1) -> None:
    state = make_state(GameMode.classic)
    applied = transition(state, Resume(), profile=tier1, rng=random.Random(1))
    assert not applied.state_changed


def test_end_session_abandons_without_a_result(make_state, make_entity, tier1) -> None:
    state = make_state(GameMode.classic, score=30)
    state.entities = [make_entity(state, "Broccoli Knight")]
    rng = random.Random(1)

    applied = transition(state, EndSession(), profile=tier1, rng=rng)
    ended = applied.state

    assert not ended.active
    assert ended.result == SessionResult.in_progress
    assert ended.is_terminal()
    assert any(isinstance(n, SessionEnded) for n in applied.notifications)

    late = transition(ended, ResolveAction(entity_id="food-1", action=Action.consume), profile=tier1, rng=rng)
    assert late.outcome is not None
    assert late.outcome.reason == "session_over"
    assert not transition(ended, CountdownTick(), profile=tier1, rng=rng).state_changed


def test_end_session_from_pause(make_state, tier1) -> None:
    rng = random.Random(1)
    paused = transition(make_state(), Pause(), profile=tier1, rng=rng).state

    ended = transition(paused, EndSession(), profile=tier1, rng=rng).state

    assert not ended.active
    assert not ended.paused


def test_clear_announcement_only_clears_the_current_one(make_state, tier1) -> None:
    state = create_session_state(session_id="s1", seed=1, profile=tier1, rng=random.Random(1))
    assert state.announcement is not None
    current = state.announcement.id
    rng = random.Random(1)

    assert not transition(state, ClearAnnouncement(announcement_id=current + 1), profile=tier1, rng=rng).state_changed

    cleared = transition(state, ClearAnnouncement(announcement_id=current), profile=tier1, rng=rng).state
    assert cleared.announcement is None
