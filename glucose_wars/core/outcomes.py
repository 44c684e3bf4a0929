from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from glucose_wars.core.models import Action, MetricDelta, SessionResult, SessionState

RejectReason = Literal[
    "unknown_entity",
    "action_not_allowed",
    "storage_full",
    "empty_slot",
    "no_charges",
    "paused",
    "session_over",
]


@dataclass(frozen=True, slots=True)
class FoodNutrients:
    """Descriptor handed to the external health/CGM collaborator on every consume."""

    name: str
    food_type: str
    faction: str
    glucose_impact: float
    effects: MetricDelta


@dataclass(frozen=True, slots=True)
class FoodConsumed:
    nutrients: FoodNutrients
    type: str = "food_consumed"

    def to_fields(self) -> dict[str, str]:
        n = self.nutrients
        return {
            "type": self.type,
            "name": n.name,
            "food_type": n.food_type,
            "faction": n.faction,
            "glucose_impact": str(n.glucose_impact),
            "energy": str(n.effects.energy),
            "hydration": str(n.effects.hydration),
            "nutrition": str(n.effects.nutrition),
            "stability": str(n.effects.stability),
        }


@dataclass(frozen=True, slots=True)
class PlotTwistStarted:
    twist_id: str
    name: str
    verifiable: bool
    proof: str | None = None
    type: str = "plot_twist_started"

    def to_fields(self) -> dict[str, str]:
        return {
            "type": self.type,
            "twist_id": self.twist_id,
            "name": self.name,
            "verifiable": "1" if self.verifiable else "0",
            "proof": self.proof or "",
        }


@dataclass(frozen=True, slots=True)
class PlotTwistExpired:
    twist_id: str
    type: str = "plot_twist_expired"

    def to_fields(self) -> dict[str, str]:
        return {"type": self.type, "twist_id": self.twist_id}


@dataclass(frozen=True, slots=True)
class AnnouncementPosted:
    announcement_id: int
    text: str
    duration_ms: int
    type: str = "announcement"

    def to_fields(self) -> dict[str, str]:
        return {
            "type": self.type,
            "announcement_id": str(self.announcement_id),
            "text": self.text,
            "duration_ms": str(self.duration_ms),
        }


@dataclass(frozen=True, slots=True)
class SessionEnded:
    result: SessionResult
    score: int
    type: str = "session_ended"

    def to_fields(self) -> dict[str, str]:
        return {"type": self.type, "result": self.result.value, "score": str(self.score)}


Notification = FoodConsumed | PlotTwistStarted | PlotTwistExpired | AnnouncementPosted | SessionEnded


@dataclass(frozen=True, slots=True)
class ActionOutcome:
    accepted: bool
    action: Action | None = None
    correct: bool = False
    points: int = 0
    optimal: bool = False
    reason: RejectReason | None = None

    @staticmethod
    def rejected(reason: RejectReason, action: Action | None = None) -> ActionOutcome:
        return ActionOutcome(accepted=False, action=action, reason=reason)


@dataclass(frozen=True, slots=True)
class AppliedEvent:
    """Result of applying one event.

    - `state`: the next snapshot (the previous one is never mutated).
    - `state_changed`: False for no-ops (stale ids, terminal sessions, paused ticks).
    - `notifications`: outbox entries for the clock to publish.
    - `outcome`: set for player-facing events (actions, power-ups, saved slots).
    """

    state: SessionState
    state_changed: bool
    notifications: list[Notification] = field(default_factory=list)
    outcome: ActionOutcome | None = None
