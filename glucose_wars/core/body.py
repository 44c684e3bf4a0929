from __future__ import annotations

from enum import StrEnum

from glucose_wars.core.models import METRIC_MAX, METRIC_MIN, BodyMetrics, Metric, MetricDelta

# Base drain per countdown tick (Life mode), before morning-condition multipliers.
DRAIN_RATES: dict[Metric, float] = {
    Metric.energy: 0.8,
    Metric.hydration: 0.6,
    Metric.nutrition: 0.4,
    Metric.stability: 0.3,
}

CRITICAL_LOW = 15.0
CRITICAL_HIGH = 85.0
WARNING_LOW = 30.0
WARNING_HIGH = 70.0
# Threshold that triggers a "low metric" announcement when crossed downward.
LOW_ALERT = 20.0


class Level(StrEnum):
    ok = "ok"
    warning = "warning"
    critical = "critical"


class StabilityZone(StrEnum):
    balanced = "balanced"
    warning_low = "warning_low"
    warning_high = "warning_high"
    critical_low = "critical_low"
    critical_high = "critical_high"


def clamp(value: float) -> float:
    return max(METRIC_MIN, min(METRIC_MAX, value))


def apply_delta(metrics: BodyMetrics, delta: MetricDelta) -> BodyMetrics:
    """Add `delta` component-wise, clamping every scalar to [0, 100]."""

    return BodyMetrics(
        energy=clamp(metrics.energy + delta.energy),
        hydration=clamp(metrics.hydration + delta.hydration),
        nutrition=clamp(metrics.nutrition + delta.nutrition),
        stability=clamp(metrics.stability + delta.stability),
    )


def drain_delta(multipliers: dict[Metric, float]) -> MetricDelta:
    return MetricDelta(**{m.value: -rate * multipliers.get(m, 1.0) for m, rate in DRAIN_RATES.items()})


def level(value: float) -> Level:
    if value <= CRITICAL_LOW or value >= CRITICAL_HIGH:
        return Level.critical
    if value <= WARNING_LOW or value >= WARNING_HIGH:
        return Level.warning
    return Level.ok


def stability_zone(stability: float) -> StabilityZone:
    if stability < 25:
        return StabilityZone.critical_low
    if stability > 75:
        return StabilityZone.critical_high
    if stability < 40:
        return StabilityZone.warning_low
    if stability > 60:
        return StabilityZone.warning_high
    return StabilityZone.balanced


def crossed_low(before: BodyMetrics, after: BodyMetrics) -> list[Metric]:
    """Metrics that dropped to or below the low-alert threshold in this update."""

    return [
        m
        for m in (Metric.energy, Metric.hydration, Metric.nutrition)
        if getattr(after, m.value) <= LOW_ALERT < getattr(before, m.value)
    ]
