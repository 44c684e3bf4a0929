from __future__ import annotations

from pydantic import BaseModel, Field

from glucose_wars.core.models import Action, Audience, GameMode, SessionState
from glucose_wars.core.outcomes import ActionOutcome, RejectReason
from glucose_wars.difficulty import DifficultyProfile


class SessionCreateRequest(BaseModel):
    # None means "whatever the tier says".
    mode: GameMode | None = None
    tier: str | None = None
    audience: Audience = Audience.personal
    seed: int | None = Field(default=None, ge=1)
    autostart: bool = True


class ActionRequest(BaseModel):
    entity_id: str = Field(..., min_length=1)
    action: Action


class HoldRequest(BaseModel):
    entity_id: str = Field(..., min_length=1)
    held: bool = True


class OutcomeModel(BaseModel):
    accepted: bool
    action: Action | None = None
    correct: bool = False
    points: int = 0
    optimal: bool = False
    reason: RejectReason | None = None

    @classmethod
    def from_outcome(cls, outcome: ActionOutcome) -> OutcomeModel:
        return cls(
            accepted=outcome.accepted,
            action=outcome.action,
            correct=outcome.correct,
            points=outcome.points,
            optimal=outcome.optimal,
            reason=outcome.reason,
        )


class CommandResponse(BaseModel):
    outcome: OutcomeModel | None = None
    session: SessionState


class SessionListResponse(BaseModel):
    sessions: list[SessionState]


class TierListResponse(BaseModel):
    tiers: list[DifficultyProfile]
