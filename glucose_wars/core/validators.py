from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from glucose_wars.core.models import Action, GameMode, SessionState
from glucose_wars.core.outcomes import RejectReason
from glucose_wars.difficulty import DifficultyProfile


class ActionRejected(ValueError):
    """Raised by validators; the reducer turns it into a rejected ActionOutcome."""

    def __init__(self, reason: RejectReason, message: str):
        super().__init__(message)
        self.reason: RejectReason = reason


@dataclass(frozen=True, slots=True)
class ValidationContext:
    """Inputs available to validators.

    Keep this tight and serializable-ish so we can safely log it.
    """

    session_id: str
    command: str
    entity_id: str | None = None
    action: Action | None = None
    slot: int | None = None
    power_up: str | None = None


class CommandValidator(ABC):
    """A small, composable validation unit for an incoming player command."""

    @abstractmethod
    def validate(self, *, ctx: ValidationContext, state: SessionState, profile: DifficultyProfile) -> None:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class SessionActiveValidator(CommandValidator):
    def validate(self, *, ctx: ValidationContext, state: SessionState, profile: DifficultyProfile) -> None:
        if state.is_terminal():
            raise ActionRejected("session_over", "Session is over")


@dataclass(frozen=True, slots=True)
class NotPausedValidator(CommandValidator):
    def validate(self, *, ctx: ValidationContext, state: SessionState, profile: DifficultyProfile) -> None:
        if state.paused:
            raise ActionRejected("paused", "Session is paused")


@dataclass(frozen=True, slots=True)
class EntityExistsValidator(CommandValidator):
    """Stale ids are expected: the entity may already have been resolved or missed."""

    def validate(self, *, ctx: ValidationContext, state: SessionState, profile: DifficultyProfile) -> None:
        if ctx.entity_id is None or state.find_entity(ctx.entity_id) is None:
            raise ActionRejected("unknown_entity", f"Entity not found: {ctx.entity_id}")


@dataclass(frozen=True, slots=True)
class AllowedActionValidator(CommandValidator):
    def validate(self, *, ctx: ValidationContext, state: SessionState, profile: DifficultyProfile) -> None:
        allowed = profile.actions_for(state.mode)
        if ctx.action not in allowed:
            names = ",".join(sorted(a.value for a in allowed))
            raise ActionRejected(
                "action_not_allowed",
                f"Action '{ctx.action}' not allowed in {state.mode.value} mode (allowed: {names})",
            )


@dataclass(frozen=True, slots=True)
class StorageValidator(CommandValidator):
    """Save needs an empty slot; other actions pass through."""

    def validate(self, *, ctx: ValidationContext, state: SessionState, profile: DifficultyProfile) -> None:
        if ctx.action == Action.save and all(s.food is not None for s in state.saved_slots):
            raise ActionRejected("storage_full", "All saved slots are occupied")


@dataclass(frozen=True, slots=True)
class LifeModeValidator(CommandValidator):
    def validate(self, *, ctx: ValidationContext, state: SessionState, profile: DifficultyProfile) -> None:
        if state.mode != GameMode.life:
            raise ActionRejected("action_not_allowed", f"'{ctx.command}' is only available in life mode")


@dataclass(frozen=True, slots=True)
class SavedSlotValidator(CommandValidator):
    def validate(self, *, ctx: ValidationContext, state: SessionState, profile: DifficultyProfile) -> None:
        if ctx.slot is None or not 0 <= ctx.slot < len(state.saved_slots):
            raise ActionRejected("empty_slot", f"No such saved slot: {ctx.slot}")
        if state.saved_slots[ctx.slot].food is None:
            raise ActionRejected("empty_slot", f"Saved slot {ctx.slot} is empty")


@dataclass(frozen=True, slots=True)
class ChargesValidator(CommandValidator):
    def validate(self, *, ctx: ValidationContext, state: SessionState, profile: DifficultyProfile) -> None:
        if getattr(state.power_ups, ctx.power_up or "", 0) <= 0:
            raise ActionRejected("no_charges", f"No charges left for '{ctx.power_up}'")


@dataclass(frozen=True, slots=True)
class ValidatorPipeline:
    validators: tuple[CommandValidator, ...]

    def validate(self, *, ctx: ValidationContext, state: SessionState, profile: DifficultyProfile) -> None:
        for v in self.validators:
            v.validate(ctx=ctx, state=state, profile=profile)


_LIVE = (SessionActiveValidator(), NotPausedValidator())

DEFAULT_COMMAND_PIPELINES: dict[str, ValidatorPipeline] = {
    "resolve": ValidatorPipeline(
        validators=(*_LIVE, EntityExistsValidator(), AllowedActionValidator(), StorageValidator())
    ),
    "hold": ValidatorPipeline(validators=(*_LIVE, EntityExistsValidator())),
    "power_up": ValidatorPipeline(validators=(*_LIVE, ChargesValidator())),
    "consume_saved": ValidatorPipeline(validators=(*_LIVE, LifeModeValidator(), SavedSlotValidator())),
}


def pipeline_for_command(command: str) -> ValidatorPipeline:
    pipe = DEFAULT_COMMAND_PIPELINES.get(command)
    if pipe is None:
        raise ValueError(f"Unknown command: {command}")
    return pipe
