"""The single serialized state-update function.

`transition(state, event, ...)` never mutates `state`: it applies `event` to a
deep copy and returns the copy wrapped in an AppliedEvent. Stale ids, paused
ticks and anything arriving after the session ended come back unchanged.
"""

from __future__ import annotations

import random

from statemachine.exceptions import TransitionNotAllowed

from glucose_wars.catalog import announcements
from glucose_wars.catalog.announcements import Category
from glucose_wars.catalog.conditions import DEFAULT_CONDITION, get_condition, pick_condition
from glucose_wars.core import movement, powerups, resolver, spawner, twists
from glucose_wars.core.body import StabilityZone, apply_delta, crossed_low, drain_delta, stability_zone
from glucose_wars.core.evaluator import evaluate
from glucose_wars.core.events import (
    ClearAnnouncement,
    ConsumeSaved,
    CountdownTick,
    EndSession,
    HoldEntity,
    MovementTick,
    Pause,
    PlotTwistCheck,
    ResolveAction,
    Resume,
    SessionEvent,
    SpawnTick,
    UsePowerUp,
)
from glucose_wars.core.fsm import SessionFSM
from glucose_wars.core.models import (
    Action,
    Audience,
    AnnouncementKind,
    BodyMetrics,
    GameMode,
    SessionResult,
    SessionState,
    TimePhase,
)
from glucose_wars.core.outcomes import ActionOutcome, AppliedEvent, RejectReason, SessionEnded
from glucose_wars.core.spawner import DEFAULT_PLAYFIELD, Playfield
from glucose_wars.core.step import Step
from glucose_wars.core.validators import ActionRejected, ValidationContext, pipeline_for_command
from glucose_wars.difficulty import DifficultyProfile

HISTORY_LIMIT = 120
FINAL_WAVE_AT = 10

_PHASES = tuple(TimePhase)
_PLAYER_EVENTS = (ResolveAction, HoldEntity, UsePowerUp, ConsumeSaved)
# The only events a paused session still reacts to.
_WHILE_PAUSED = (Resume, EndSession, ClearAnnouncement)


def phase_for(duration: int, time_remaining: int) -> TimePhase:
    """Four equal bands of the session, most recent first."""

    elapsed = max(0, duration - time_remaining)
    return _PHASES[min(len(_PHASES) - 1, elapsed * len(_PHASES) // duration)]


def create_session_state(
    *,
    session_id: str,
    seed: int,
    profile: DifficultyProfile,
    rng: random.Random,
    mode: GameMode | None = None,
    audience: Audience = Audience.personal,
) -> SessionState:
    mode = mode or profile.mode
    if mode == GameMode.life:
        condition = pick_condition(rng)
    else:
        condition = get_condition(DEFAULT_CONDITION)

    state = SessionState(
        session_id=session_id,
        seed=seed,
        mode=mode,
        tier=profile.tier,
        audience=audience,
        morning_condition=condition.id,
        duration=profile.duration_seconds,
        time_remaining=profile.duration_seconds,
        metrics=condition.starting_metrics.model_copy() if mode == GameMode.life else BodyMetrics(),
    )
    state.plot_twist.check_pending = twists.twists_enabled(state, profile)

    step = Step(state, profile, rng)
    if mode == GameMode.life:
        step.announce(
            announcements.pick(Category.life_mode_start, rng),
            science=f"{condition.icon} {condition.name}: {condition.description}",
        )
    else:
        step.announce_random(Category.game_start)
    step.flush_announcement()
    return state


def _unchanged(state: SessionState, event: SessionEvent, reason: RejectReason | None = None) -> AppliedEvent:
    outcome = None
    if isinstance(event, _PLAYER_EVENTS):
        action = event.action if isinstance(event, ResolveAction) else None
        outcome = ActionOutcome.rejected(reason, action)  # type: ignore[arg-type]
    return AppliedEvent(state=state, state_changed=False, outcome=outcome)


def _context_for(state: SessionState, event: SessionEvent) -> tuple[str, ValidationContext]:
    if isinstance(event, ResolveAction):
        return "resolve", ValidationContext(
            session_id=state.session_id, command="resolve", entity_id=event.entity_id, action=event.action
        )
    if isinstance(event, HoldEntity):
        return "hold", ValidationContext(session_id=state.session_id, command="hold", entity_id=event.entity_id)
    if isinstance(event, UsePowerUp):
        return "power_up", ValidationContext(session_id=state.session_id, command="power_up", power_up=event.kind)
    if isinstance(event, ConsumeSaved):
        return "consume_saved", ValidationContext(
            session_id=state.session_id, command="consume_saved", action=Action.consume, slot=event.slot
        )
    raise ValueError(f"Not a player command: {event!r}")


def _finish(step: Step, result: SessionResult) -> None:
    state = step.state
    fsm = SessionFSM(state)
    if result == SessionResult.victory:
        fsm.win()
    elif result == SessionResult.defeat:
        fsm.lose()
    else:
        fsm.abandon()
    fsm.sync_to_model()

    state.plot_twist.active = None
    state.plot_twist.remaining = 0
    state.plot_twist.check_pending = False
    step.emit(SessionEnded(result=state.result, score=state.score))


def _settle(step: Step) -> None:
    result = evaluate(step.state, step.profile)
    if result != SessionResult.in_progress:
        _finish(step, result)


def _countdown(step: Step) -> None:
    state = step.state

    zone = stability_zone(state.stability)
    if zone == StabilityZone.balanced:
        state.zone_seconds.balanced += 1
    elif zone in (StabilityZone.warning_low, StabilityZone.warning_high):
        state.zone_seconds.warning += 1
    else:
        state.zone_seconds.critical += 1

    state.time_remaining = max(0, state.time_remaining - 1)
    new_phase = phase_for(state.duration, state.time_remaining)

    before = state.metrics.model_copy()
    if state.mode == GameMode.life:
        condition = get_condition(state.morning_condition)
        state.metrics = apply_delta(state.metrics, drain_delta(condition.drain_multipliers))
        if state.plot_twist.active is not None:
            state.metrics = apply_delta(state.metrics, state.plot_twist.active.ongoing_effect_per_second)
    twists.tick(step)

    state.metrics_history.append(state.metrics.model_copy())
    if len(state.metrics_history) > HISTORY_LIMIT:
        del state.metrics_history[: len(state.metrics_history) - HISTORY_LIMIT]

    if state.mode == GameMode.life:
        for metric in crossed_low(before, state.metrics):
            step.announce_random(announcements.LOW_METRIC_CATEGORIES[metric], AnnouncementKind.warning)
        if new_phase != state.time_phase:
            step.announce_random(announcements.PHASE_CATEGORIES[new_phase])
    if state.time_remaining == FINAL_WAVE_AT:
        step.announce_random(Category.final_wave, AnnouncementKind.warning)
    state.time_phase = new_phase


def _lifecycle(step: Step, event: Pause | Resume | EndSession) -> bool:
    if isinstance(event, EndSession):
        _finish(step, SessionResult.in_progress)
        return True

    fsm = SessionFSM(step.state)
    try:
        if isinstance(event, Pause):
            fsm.pause()
        else:
            fsm.resume()
    except TransitionNotAllowed:
        return False
    fsm.sync_to_model()
    return True


def transition(
    state: SessionState,
    event: SessionEvent,
    *,
    profile: DifficultyProfile,
    rng: random.Random,
    playfield: Playfield = DEFAULT_PLAYFIELD,
) -> AppliedEvent:
    if isinstance(event, _PLAYER_EVENTS):
        command, ctx = _context_for(state, event)
        try:
            pipeline_for_command(command).validate(ctx=ctx, state=state, profile=profile)
        except ActionRejected as e:
            return _unchanged(state, event, e.reason)
    elif state.is_terminal():
        return _unchanged(state, event, "session_over")
    elif state.paused and not isinstance(event, _WHILE_PAUSED):
        return _unchanged(state, event, "paused")

    step = Step(state.model_copy(deep=True), profile, rng, playfield)
    outcome: ActionOutcome | None = None

    if isinstance(event, CountdownTick):
        _countdown(step)
        _settle(step)
    elif isinstance(event, MovementTick):
        step.state.elapsed_ms += event.elapsed_ms
        movement.advance(step)
        _settle(step)
    elif isinstance(event, SpawnTick):
        if spawner.spawn(step.state, profile=profile, rng=rng, playfield=playfield) is None:
            return _unchanged(state, event)
    elif isinstance(event, PlotTwistCheck):
        twists.fire(step, event.draw)
        _settle(step)
    elif isinstance(event, ResolveAction):
        outcome = resolver.resolve(step, event.entity_id, event.action)
        _settle(step)
    elif isinstance(event, HoldEntity):
        entity = step.state.find_entity(event.entity_id)
        if entity is not None:
            entity.held = event.held
        outcome = ActionOutcome(accepted=True)
    elif isinstance(event, UsePowerUp):
        outcome = powerups.use(step, event.kind)
        _settle(step)
    elif isinstance(event, ConsumeSaved):
        outcome = resolver.consume_saved(step, event.slot)
        _settle(step)
    elif isinstance(event, ClearAnnouncement):
        current = step.state.announcement
        if current is None or current.id != event.announcement_id:
            return _unchanged(state, event)
        step.state.announcement = None
    elif isinstance(event, (Pause, Resume, EndSession)):
        if not _lifecycle(step, event):
            return _unchanged(state, event)
    else:
        raise ValueError(f"Unknown event: {event!r}")

    step.flush_announcement()
    return AppliedEvent(state=step.state, state_changed=True, notifications=step.notifications, outcome=outcome)
