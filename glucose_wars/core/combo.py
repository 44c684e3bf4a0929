from __future__ import annotations

from glucose_wars.catalog.combos import COMBO_TIERS, COMBO_WINDOW_MS, ComboTier
from glucose_wars.core.models import ComboState


def multiplier_for(count: int) -> float:
    multiplier = 1.0
    for tier in COMBO_TIERS:
        if count >= tier.count:
            multiplier = tier.multiplier
    return multiplier


def tier_reached(count: int) -> ComboTier | None:
    """The tier whose threshold is exactly `count`, for one-shot announcements."""

    return next((t for t in COMBO_TIERS if t.count == count), None)


def is_active(combo: ComboState, now_ms: int, window_ms: int = COMBO_WINDOW_MS) -> bool:
    return combo.last_action_ms is not None and now_ms - combo.last_action_ms <= window_ms


def advance(combo: ComboState, *, correct: bool, now_ms: int) -> ComboState:
    if not correct:
        return ComboState(count=0, last_action_ms=combo.last_action_ms)
    count = combo.count + 1 if is_active(combo, now_ms) and combo.count > 0 else 1
    return ComboState(count=count, last_action_ms=now_ms)


def broken(combo: ComboState) -> ComboState:
    return ComboState(count=0, last_action_ms=combo.last_action_ms)
