from __future__ import annotations

from dataclasses import dataclass, field

from glucose_wars.core.models import Faction, MetricDelta, TimePhase


@dataclass(frozen=True, slots=True)
class FoodDefinition:
    food_type: str
    faction: Faction
    name: str
    sprite: str
    glucose_impact: float
    base_points: int
    spawn_weight: int
    effects: MetricDelta
    time_modifiers: dict[TimePhase, float] = field(default_factory=dict)


def _fx(energy: float, hydration: float, nutrition: float, stability: float) -> MetricDelta:
    return MetricDelta(energy=energy, hydration=hydration, nutrition=nutrition, stability=stability)


def _tm(morning: float, midday: float, afternoon: float, evening: float) -> dict[TimePhase, float]:
    return {
        TimePhase.morning: morning,
        TimePhase.midday: midday,
        TimePhase.afternoon: afternoon,
        TimePhase.evening: evening,
    }


A = Faction.ally
E = Faction.enemy

# Contextual foods spawn from the ally pool and resolve their goodness at spawn time.
ALLY_FOODS: tuple[FoodDefinition, ...] = (
    FoodDefinition("vegetable", A, "Broccoli Knight", "🥦", 3, 10, 20, _fx(3, 5, 12, 3)),
    FoodDefinition("vegetable", A, "Carrot Scout", "🥕", 2, 8, 18, _fx(4, 4, 10, 2)),
    FoodDefinition("vegetable", A, "Spinach Sage", "🥬", 2, 9, 15, _fx(5, 6, 15, 2)),
    FoodDefinition("vegetable", A, "Pepper Paladin", "🫑", 2, 8, 12, _fx(3, 5, 11, 2)),
    FoodDefinition("protein", A, "Egg Champion", "🥚", 4, 12, 15, _fx(10, 0, 12, 4)),
    FoodDefinition("protein", A, "Fish Warrior", "🐟", 5, 15, 10, _fx(12, 2, 15, 5)),
    FoodDefinition("protein", A, "Chicken Knight", "🍗", 4, 13, 12, _fx(14, -2, 13, 4)),
    FoodDefinition("protein", A, "Tofu Monk", "🧈", 3, 10, 8, _fx(8, 2, 10, 3)),
    FoodDefinition("whole_grain", A, "Bread Paladin", "🍞", 3, 10, 15, _fx(12, -3, 6, 3), _tm(1.5, 1.2, 0.8, 0.5)),
    FoodDefinition("whole_grain", A, "Rice Ranger", "🍚", 3, 9, 12, _fx(10, -2, 5, 3)),
    FoodDefinition("whole_grain", A, "Oat Oracle", "🥣", 4, 11, 10, _fx(14, 3, 8, 5), _tm(2.0, 0.8, 0.6, 0.4)),
    FoodDefinition("fruit", A, "Apple Archer", "🍎", 2, 8, 15, _fx(8, 8, 8, 2)),
    FoodDefinition("fruit", A, "Banana Bard", "🍌", 3, 9, 12, _fx(12, 4, 7, 3)),
    FoodDefinition("fruit", A, "Orange Oracle", "🍊", 2, 8, 12, _fx(7, 10, 10, 2)),
    FoodDefinition("fruit", A, "Berry Battalion", "🫐", 1, 10, 8, _fx(5, 6, 12, 1)),
    FoodDefinition("fruit", A, "Watermelon Warden", "🍉", 2, 8, 8, _fx(6, 15, 5, 2)),
    FoodDefinition("water", A, "Water Spirit", "💧", 1, 5, 20, _fx(2, 20, 0, 2)),
    FoodDefinition("water", A, "Coconut Cleric", "🥥", 2, 8, 6, _fx(5, 18, 4, 2)),
    FoodDefinition("dairy", A, "Milk Mage", "🥛", 3, 8, 10, _fx(6, 8, 8, 3)),
    FoodDefinition("dairy", A, "Yogurt Yogi", "🫙", 2, 9, 8, _fx(5, 5, 10, 2)),
    FoodDefinition("nuts", A, "Almond Assassin", "🥜", 2, 10, 8, _fx(10, -2, 10, 2)),
    FoodDefinition(
        "coffee", Faction.contextual, "Coffee Commander", "☕", -2, 8, 10, _fx(18, -8, 0, -3), _tm(1.5, 1.0, 0.5, -1.0)
    ),
    FoodDefinition("tea", A, "Tea Templar", "🍵", 1, 6, 8, _fx(8, 5, 2, 2), _tm(1.2, 1.0, 1.2, 0.8)),
)

ENEMY_FOODS: tuple[FoodDefinition, ...] = (
    FoodDefinition("sugar", E, "Donut Demon", "🍩", -8, 15, 18, _fx(8, -5, -8, -12)),
    FoodDefinition("candy", E, "Candy Curse", "🍬", -10, 18, 15, _fx(10, -3, -10, -15)),
    FoodDefinition("sugar", E, "Cake Calamity", "🍰", -15, 25, 8, _fx(12, -6, -12, -18)),
    FoodDefinition("candy", E, "Ice Cream Imp", "🍦", -9, 16, 10, _fx(8, -4, -8, -12)),
    FoodDefinition("sugar", E, "Cookie Chaos", "🍪", -7, 12, 15, _fx(7, -4, -6, -10)),
    FoodDefinition("candy", E, "Chocolate Chimera", "🍫", -8, 14, 12, _fx(9, -3, -5, -11)),
    FoodDefinition("soda", E, "Soda Specter", "🥤", -12, 20, 15, _fx(12, -12, -5, -15)),
    FoodDefinition(
        "energy_drink", E, "Energy Elemental", "🧃", -10, 18, 10, _fx(20, -10, -8, -12), _tm(0.8, 1.0, 1.2, 1.5)
    ),
    FoodDefinition("processed", E, "Chip Chaos", "🍟", -6, 12, 18, _fx(6, -8, -10, -8)),
    FoodDefinition("fast_food", E, "Burger Beast", "🍔", -7, 14, 15, _fx(10, -6, -8, -10)),
    FoodDefinition("fast_food", E, "Pizza Phantom", "🍕", -6, 13, 15, _fx(9, -5, -7, -8)),
    FoodDefinition("fast_food", E, "Hotdog Horror", "🌭", -5, 11, 12, _fx(7, -6, -9, -7)),
    FoodDefinition("processed", E, "Pretzel Poltergeist", "🥨", -4, 10, 10, _fx(5, -8, -5, -6)),
    FoodDefinition("alcohol", E, "Beer Banshee", "🍺", -8, 16, 8, _fx(-5, -15, -5, -10), _tm(1.5, 1.2, 1.0, 0.8)),
    FoodDefinition("alcohol", E, "Wine Wraith", "🍷", -6, 14, 6, _fx(-3, -12, -3, -8)),
)

ALL_FOODS: tuple[FoodDefinition, ...] = ALLY_FOODS + ENEMY_FOODS


def food_by_name(name: str) -> FoodDefinition | None:
    return next((f for f in ALL_FOODS if f.name == name), None)
