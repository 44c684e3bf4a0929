from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

METRIC_MIN = 0.0
METRIC_MAX = 100.0
SAVED_SLOT_COUNT = 3


class GameMode(StrEnum):
    classic = "classic"
    life = "life"


class Faction(StrEnum):
    ally = "ally"
    enemy = "enemy"
    contextual = "contextual"


class Action(StrEnum):
    consume = "consume"
    reject = "reject"
    save = "save"
    share = "share"


class TimePhase(StrEnum):
    morning = "morning"
    midday = "midday"
    afternoon = "afternoon"
    evening = "evening"


class SessionResult(StrEnum):
    in_progress = "in_progress"
    victory = "victory"
    defeat = "defeat"


class Audience(StrEnum):
    """Who the player is; selects the plot twist pool."""

    personal = "personal"
    caregiver = "caregiver"
    curious = "curious"


class AnnouncementKind(StrEnum):
    info = "info"
    success = "success"
    warning = "warning"
    error = "error"
    plot_twist = "plot_twist"


class Metric(StrEnum):
    energy = "energy"
    hydration = "hydration"
    nutrition = "nutrition"
    stability = "stability"


class MetricDelta(BaseModel):
    """Partial change to the body metrics. Missing components mean "no change"."""

    model_config = ConfigDict(frozen=True)

    energy: float = 0.0
    hydration: float = 0.0
    nutrition: float = 0.0
    stability: float = 0.0

    def scaled(self, factor: float) -> MetricDelta:
        return MetricDelta(
            energy=self.energy * factor,
            hydration=self.hydration * factor,
            nutrition=self.nutrition * factor,
            stability=self.stability * factor,
        )

    def only(self, *metrics: Metric) -> MetricDelta:
        keep = {m.value for m in metrics}
        return MetricDelta(**{k: v for k, v in self.model_dump().items() if k in keep})

    def is_empty(self) -> bool:
        return not any(self.model_dump().values())


class BodyMetrics(BaseModel):
    # 50 is balanced. Values are clamped on every write by core.body.
    energy: float = Field(default=50.0, ge=METRIC_MIN, le=METRIC_MAX)
    hydration: float = Field(default=50.0, ge=METRIC_MIN, le=METRIC_MAX)
    nutrition: float = Field(default=50.0, ge=METRIC_MIN, le=METRIC_MAX)
    stability: float = Field(default=50.0, ge=METRIC_MIN, le=METRIC_MAX)

    def values(self) -> dict[Metric, float]:
        return {m: getattr(self, m.value) for m in Metric}


class OptimalAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    action: Action
    multiplier: float = Field(default=1.5, gt=0)
    reason: str = ""


class FoodEntity(BaseModel):
    id: str
    food_type: str
    name: str
    sprite: str = ""
    faction: Faction
    effects: MetricDelta
    glucose_impact: float = 0.0
    time_modifiers: dict[TimePhase, float] = Field(default_factory=dict)

    x: float = 0.0
    position: float
    speed: float
    boundary: float

    base_points: int = Field(..., ge=0)
    optimal_action: OptimalAction | None = None

    # Resolved once at spawn from the time phase modifier's sign.
    is_contextually_good: bool = True
    # A gesture is in progress; movement skips held entities.
    held: bool = False

    def is_good(self) -> bool:
        if self.faction == Faction.contextual:
            return self.is_contextually_good
        return self.faction == Faction.ally

    def time_modifier(self, phase: TimePhase) -> float:
        return self.time_modifiers.get(phase, 1.0)


class PlotTwist(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    icon: str = ""
    description: str = ""
    duration_seconds: int = Field(..., gt=0)
    immediate_effect: MetricDelta = Field(default_factory=MetricDelta)
    ongoing_effect_per_second: MetricDelta = Field(default_factory=MetricDelta)
    bonus_actions: frozenset[Action] = frozenset()
    share_bonus: bool = False
    bonus_condition: str | None = None


class ComboState(BaseModel):
    count: int = Field(default=0, ge=0)
    # Session time (ms) of the last correct action; None before the first one.
    last_action_ms: int | None = None


class PlotTwistState(BaseModel):
    active: PlotTwist | None = None
    remaining: int = Field(default=0, ge=0)
    triggered: int = Field(default=0, ge=0, le=2)
    # True while a scheduled check is pending; cleared when it fires.
    check_pending: bool = False
    verifiable: bool = False
    proof: str | None = None


class SavedSlot(BaseModel):
    food: FoodEntity | None = None
    saved_at_ms: int = 0


class SocialMeter(BaseModel):
    shares: int = Field(default=0, ge=0)
    streak: int = Field(default=0, ge=0)
    meter: int = Field(default=0, ge=0, le=100)


class Counters(BaseModel):
    correct: int = 0
    incorrect: int = 0
    optimal_choices: int = 0
    misses: int = 0


class PowerUpCharges(BaseModel):
    exercise: int = Field(default=3, ge=0, le=3)
    rations: int = Field(default=3, ge=0, le=3)


class ZoneSeconds(BaseModel):
    balanced: int = 0
    warning: int = 0
    critical: int = 0


class Announcement(BaseModel):
    id: int
    text: str
    kind: AnnouncementKind = AnnouncementKind.info
    science: str | None = None
    duration_ms: int = 1500


class SessionState(BaseModel):
    session_id: str
    seed: int
    mode: GameMode
    tier: str
    audience: Audience = Audience.personal
    morning_condition: str = "normal_day"

    score: int = Field(default=0, ge=0)
    duration: int = Field(..., gt=0)
    time_remaining: int = Field(..., ge=0)
    time_phase: TimePhase = TimePhase.morning
    elapsed_ms: int = 0

    metrics: BodyMetrics = Field(default_factory=BodyMetrics)
    entities: list[FoodEntity] = Field(default_factory=list)
    spawn_seq: int = 0

    combo: ComboState = Field(default_factory=ComboState)
    plot_twist: PlotTwistState = Field(default_factory=PlotTwistState)
    saved_slots: list[SavedSlot] = Field(
        default_factory=lambda: [SavedSlot() for _ in range(SAVED_SLOT_COUNT)],
        min_length=SAVED_SLOT_COUNT,
        max_length=SAVED_SLOT_COUNT,
    )
    social: SocialMeter = Field(default_factory=SocialMeter)
    counters: Counters = Field(default_factory=Counters)
    power_ups: PowerUpCharges = Field(default_factory=PowerUpCharges)
    zone_seconds: ZoneSeconds = Field(default_factory=ZoneSeconds)
    metrics_history: list[BodyMetrics] = Field(default_factory=list)

    result: SessionResult = SessionResult.in_progress
    paused: bool = False
    # False once the session is over, with or without a result (explicit exit).
    active: bool = True

    announcement: Announcement | None = None
    announcement_seq: int = 0
    last_action: Action | None = None

    @property
    def stability(self) -> float:
        """Legacy single-scalar view used by Classic mode."""
        return self.metrics.stability

    def find_entity(self, entity_id: str) -> FoodEntity | None:
        return next((e for e in self.entities if e.id == entity_id), None)

    def is_terminal(self) -> bool:
        return self.result != SessionResult.in_progress or not self.active
