from __future__ import annotations

import random
from enum import StrEnum

from glucose_wars.core.models import Metric, TimePhase


class Category(StrEnum):
    game_start = "game_start"
    life_mode_start = "life_mode_start"
    final_wave = "final_wave"
    wrong_swipe = "wrong_swipe"
    combo_break = "combo_break"
    critical_high = "critical_high"
    critical_low = "critical_low"
    exercise_used = "exercise_used"
    rations_used = "rations_used"
    phase_morning = "phase_morning"
    phase_midday = "phase_midday"
    phase_afternoon = "phase_afternoon"
    phase_evening = "phase_evening"
    energy_low = "energy_low"
    hydration_low = "hydration_low"
    nutrition_low = "nutrition_low"


ANNOUNCEMENTS: dict[Category, tuple[str, ...]] = {
    Category.game_start: ("⚔️ DEFEND THE REALM!", "🏰 THE BATTLE BEGINS!", "🛡️ PROTECT YOUR KINGDOM!"),
    Category.life_mode_start: ("🌅 A NEW DAY BEGINS!", "☀️ SURVIVE THE DAY!", "🏰 24 HOURS OF BATTLE!"),
    Category.final_wave: ("⚠️ FINAL WAVE INCOMING!", "🔥 LAST STAND!", "💀 SURVIVE THE ONSLAUGHT!", "⏰ THE CLOCK STRIKES!"),
    Category.wrong_swipe: ("❌ WRONG DIRECTION!", "⚠️ WATCH YOUR SWIPE!", "💥 THAT WAS AN ALLY!", "🤦 Oops! Wrong food!"),
    Category.combo_break: ("💔 COMBO BROKEN!", "⚠️ MISSED ONE!", "🔄 START OVER!", "⏸️ Streak lost!"),
    Category.critical_high: ("🔥 GLUCOSE SPIKE!", "⚠️ TOO HIGH!", "🌋 DANGER ZONE!", "📈 Sugar overload!"),
    Category.critical_low: ("❄️ GLUCOSE CRASH!", "⚠️ TOO LOW!", "🥶 DANGER ZONE!", "📉 Need fuel!"),
    Category.exercise_used: ("🏃 EXERCISE ACTIVATED!", "💪 BURNING GLUCOSE!", "🏋️ Knights are training!"),
    Category.rations_used: ("🍽️ EMERGENCY RATIONS!", "🥗 QUICK SNACK!", "🍖 Royal feast served!"),
    Category.phase_morning: ("🌅 MORNING BEGINS!", "☀️ RISE AND SHINE!", "🐓 The rooster crows!"),
    Category.phase_midday: ("☀️ MIDDAY ARRIVES!", "🍽️ LUNCH TIME!", "🌞 Peak sun, peak hunger!"),
    Category.phase_afternoon: ("🌆 AFTERNOON SLUMP!", "⚡ ENERGY DIP INCOMING!", "😴 The 3pm wall approaches!"),
    Category.phase_evening: ("🌙 EVENING APPROACHES!", "🌃 WIND DOWN TIME!", "🦉 Night owls beware!"),
    Category.energy_low: ("⚡ ENERGY CRITICAL!", "😴 RUNNING ON EMPTY!", "🔋 Recharge needed!"),
    Category.hydration_low: ("💧 DEHYDRATION WARNING!", "🏜️ NEED WATER!", "🐪 Even camels drink!"),
    Category.nutrition_low: ("🥗 NUTRITION DEPLETED!", "🍎 EAT YOUR VEGGIES!", "🥦 Broccoli misses you!"),
}

PHASE_CATEGORIES: dict[TimePhase, Category] = {
    TimePhase.morning: Category.phase_morning,
    TimePhase.midday: Category.phase_midday,
    TimePhase.afternoon: Category.phase_afternoon,
    TimePhase.evening: Category.phase_evening,
}

LOW_METRIC_CATEGORIES: dict[Metric, Category] = {
    Metric.energy: Category.energy_low,
    Metric.hydration: Category.hydration_low,
    Metric.nutrition: Category.nutrition_low,
}

# Fixed outcome texts for Life mode actions.
UNHEALTHY_CONSUMED = "⚠️ That wasn't healthy!"
HEALTHY_REJECTED = "❌ That was healthy!"
SAVED = "📦 Saved for later!"


def shared(points: int) -> str:
    return f"🤝 Shared! +{points}"


def resolved(entity_label: str, points: int) -> str:
    return f"{entity_label} +{points}"


def pick(category: Category, rng: random.Random) -> str:
    return rng.choice(ANNOUNCEMENTS[category])
