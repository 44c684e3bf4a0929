from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from glucose_wars.core.models import Action

PowerUpKind = Literal["exercise", "rations"]


@dataclass(frozen=True, slots=True)
class CountdownTick:
    """One second of session time has passed (slow loop)."""


@dataclass(frozen=True, slots=True)
class MovementTick:
    """One fast frame; `elapsed_ms` advances the pause-aware session clock."""

    elapsed_ms: int = 32


@dataclass(frozen=True, slots=True)
class SpawnTick:
    pass


@dataclass(frozen=True, slots=True)
class RandomDraw:
    """A value supplied by a randomness provider, with its proof."""

    value: int
    proof: str
    provider: str


@dataclass(frozen=True, slots=True)
class PlotTwistCheck:
    # None means "use the session's local RNG".
    draw: RandomDraw | None = None


@dataclass(frozen=True, slots=True)
class ResolveAction:
    entity_id: str
    action: Action


@dataclass(frozen=True, slots=True)
class HoldEntity:
    entity_id: str
    held: bool = True


@dataclass(frozen=True, slots=True)
class UsePowerUp:
    kind: PowerUpKind


@dataclass(frozen=True, slots=True)
class ConsumeSaved:
    slot: int


@dataclass(frozen=True, slots=True)
class ClearAnnouncement:
    announcement_id: int


@dataclass(frozen=True, slots=True)
class Pause:
    pass


@dataclass(frozen=True, slots=True)
class Resume:
    pass


@dataclass(frozen=True, slots=True)
class EndSession:
    """Explicit restart/exit from the presentation layer."""


SessionEvent = (
    CountdownTick
    | MovementTick
    | SpawnTick
    | PlotTwistCheck
    | ResolveAction
    | HoldEntity
    | UsePowerUp
    | ConsumeSaved
    | ClearAnnouncement
    | Pause
    | Resume
    | EndSession
)
