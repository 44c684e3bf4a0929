from __future__ import annotations

from dataclasses import dataclass

COMBO_WINDOW_MS = 2000


@dataclass(frozen=True, slots=True)
class ComboTier:
    count: int
    multiplier: float
    title: str


# Ascending thresholds; the highest tier whose count is reached applies.
COMBO_TIERS: tuple[ComboTier, ...] = (
    ComboTier(3, 1.5, "⚔️ DEFENDER!"),
    ComboTier(5, 2.0, "🛡️ GUARDIAN!"),
    ComboTier(8, 2.5, "🔥 EXECUTIONER!"),
    ComboTier(12, 3.5, "👑 REALM PROTECTOR!"),
    ComboTier(18, 5.0, "⚡ LEGENDARY!"),
    ComboTier(25, 7.0, "🌟 GLUCOSE MASTER!"),
)
