from __future__ import annotations

from glucose_wars.core.models import Action, Audience, MetricDelta, PlotTwist

C = Action.consume
R = Action.reject
S = Action.save
SH = Action.share


def _twist(
    id: str,
    name: str,
    icon: str,
    description: str,
    duration: int,
    effect: MetricDelta | None = None,
    ongoing: MetricDelta | None = None,
    bonus: tuple[Action, ...] = (),
    bonus_condition: str | None = None,
    share_bonus: bool = False,
) -> PlotTwist:
    return PlotTwist(
        id=id,
        name=name,
        icon=icon,
        description=description,
        duration_seconds=duration,
        immediate_effect=effect or MetricDelta(),
        ongoing_effect_per_second=ongoing or MetricDelta(),
        bonus_actions=frozenset(bonus),
        bonus_condition=bonus_condition,
        share_bonus=share_bonus,
    )


PERSONAL_TWISTS: tuple[PlotTwist, ...] = (
    _twist("surprise_meeting", "Surprise Meeting!", "📅", "Quick energy needed NOW!", 8,
           MetricDelta(energy=-15), bonus=(C,), bonus_condition="Rally high-energy foods for 2x points!"),
    _twist("stomach_bug", "Stomach Bug!", "🤢", "Avoid heavy foods, need hydration!", 10,
           MetricDelta(nutrition=-10, hydration=-10), MetricDelta(hydration=-2), bonus=(C, R),
           bonus_condition="Water & light foods give 2x points!"),
    _twist("heat_wave", "Heat Wave!", "🥵", "Double hydration drain!", 10,
           MetricDelta(hydration=-15), MetricDelta(hydration=-3), bonus=(C,),
           bonus_condition="Hydrating foods give 2x points!"),
    _twist("sugar_crash", "Sugar Crash!", "📉", "Stability dropping - need protein!", 8,
           MetricDelta(stability=-20, energy=-10), bonus=(C, S), bonus_condition="Protein foods give 2x points!"),
    _twist("workout_opportunity", "Workout Time!", "🏋️", "Bonus if energy is high!", 6,
           bonus=(C,), bonus_condition="If energy > 60, earn 3x points!"),
    _twist("stressful_call", "Stressful Call!", "📞", "Cortisol spiking = glucose rises without eating.", 8,
           MetricDelta(stability=-15), MetricDelta(stability=-1), bonus=(C, R),
           bonus_condition="Cortisol raises glucose without food. Share the load!", share_bonus=True),
    _twist("afternoon_slump", "Afternoon Slump!", "😴", "Energy crashing - time for a smart snack!", 8,
           MetricDelta(energy=-20), MetricDelta(energy=-2), bonus=(C, S),
           bonus_condition="Pair carbs with protein for stable energy."),
    _twist("late_night_urge", "Late Night Urge!", "🌙", "Craving sugar late - resist for better morning glucose!", 6,
           MetricDelta(stability=-10), bonus=(R,), bonus_condition="Avoid sugary foods for stable overnight glucose!"),
    _twist("sleep_debt", "Sleep Debt!", "😴", "Poor sleep = more glucose swings. Manage carefully!", 10,
           MetricDelta(energy=-10, stability=-10), MetricDelta(stability=-1), bonus=(C,),
           bonus_condition="Focus on protein and fiber to manage sleep-deprived glucose!"),
    _twist("work_stress", "Work Stress!", "💼", "High stress raising your glucose - take care!", 8,
           MetricDelta(stability=-12), MetricDelta(stability=-1), bonus=(C, R),
           bonus_condition="Stress raises glucose without eating. Focus on calming foods!"),
)

CAREGIVER_TWISTS: tuple[PlotTwist, ...] = (
    _twist("school_day_event", "School Day!", "📚", "School stress + schedule = unpredictable glucose!", 10,
           MetricDelta(stability=-15), MetricDelta(stability=-1), bonus=(C, R, S),
           bonus_condition="This is why they check blood sugar often."),
    _twist("sick_day_event", "Sick Day!", "🤒", "Illness makes glucose management harder!", 12,
           MetricDelta(nutrition=-10, hydration=-15), MetricDelta(stability=-2, hydration=-2), bonus=(C, R),
           bonus_condition="Sickness raises glucose. They need more insulin/medication!"),
    _twist("sports_day_event", "Sports Day!", "⚽", "Exercise + timing = complex glucose changes!", 8,
           MetricDelta(energy=-15, stability=-10), bonus=(C, S),
           bonus_condition="Exercise affects glucose differently. They need to plan!"),
    _twist("travel_day_event", "Travel Day!", "✈️", "Different time, food, stress = glucose complexity!", 10,
           MetricDelta(energy=-10, hydration=-15), MetricDelta(stability=-1), bonus=(C, S, SH),
           bonus_condition="This is why they need more flexibility during travel!"),
    _twist("birthday_party_event", "Birthday Party!", "🎂", "Many treats and excitement - support their choices!", 8,
           MetricDelta(stability=-20), bonus=(C, R, SH),
           bonus_condition="They may need extra insulin for the celebration!", share_bonus=True),
    _twist("medication_event", "Medication Time!", "💊", "Time for their routine - keep them consistent!", 6,
           MetricDelta(stability=-5), bonus=(C, R), bonus_condition="This is their daily management routine!"),
    _twist("bedtime_event", "Bedtime!", "🌙", "Prep for overnight glucose - important time!", 6,
           MetricDelta(energy=-5), bonus=(C, S), bonus_condition="They need to plan for stable overnight glucose!"),
    _twist("hypo_event", "Low Glucose!", "📉", "They need quick carbs - help them respond!", 6,
           MetricDelta(stability=-25), bonus=(C,),
           bonus_condition="Quick carbs needed! This is when they need glucose tablets!"),
    _twist("hyper_event", "High Glucose!", "📈", "Their glucose is elevated - insulin needed!", 10,
           MetricDelta(stability=20), MetricDelta(stability=1), bonus=(R,),
           bonus_condition="They may need insulin to bring glucose down!"),
    _twist("insulin_event", "Insulin Timing!", "💉", "Their insulin is working - timing matters!", 8,
           MetricDelta(stability=-10), MetricDelta(stability=-1), bonus=(C, S),
           bonus_condition="Their insulin works 15 mins later - that's why timing matters!"),
)

CURIOUS_TWISTS: tuple[PlotTwist, ...] = (
    _twist("learning_opportunity1", "Insulin Lesson!", "🎓", "Insulin helps cells use glucose for energy.", 8,
           MetricDelta(stability=-5), bonus=(C, R), bonus_condition="Without insulin, glucose stays in bloodstream!"),
    _twist("learning_opportunity2", "Glucose Lesson!", "🎓", "Glucose = fuel for your body's cells.", 8,
           MetricDelta(energy=-5), bonus=(C,), bonus_condition="Cells need glucose + insulin to make energy!"),
    _twist("learning_opportunity3", "Carb Timing!", "🎓", "Eating carbs with protein/fat slows glucose rise.", 8,
           MetricDelta(stability=-5), bonus=(C, S), bonus_condition="This is glycemic load in action!"),
    _twist("learning_opportunity4", "Stress Response!", "🎓", "Stress hormones raise glucose without eating.", 8,
           MetricDelta(stability=-10), MetricDelta(stability=-1), bonus=(C, R),
           bonus_condition="Cortisol and adrenaline raise blood sugar!"),
    _twist("learning_opportunity5", "Exercise Impact!", "🎓", "Exercise helps cells use glucose without insulin.", 8,
           MetricDelta(energy=-10), bonus=(C,), bonus_condition="Muscles can take up glucose during exercise!"),
    _twist("learning_opportunity6", "Sleep Connection!", "🎓", "Sleep affects insulin sensitivity.", 8,
           MetricDelta(energy=-5, stability=-5), bonus=(C, R),
           bonus_condition="Poor sleep = higher glucose! Sleep is metabolic health!"),
    _twist("learning_opportunity7", "Fiber Benefits!", "🎓", "Fiber slows glucose absorption by 50%.", 8,
           MetricDelta(stability=-5), bonus=(C,), bonus_condition="This is why whole foods beat juices!"),
    _twist("learning_opportunity8", "Hydration Impact!", "🎓", "Dehydration can raise glucose concentration.", 8,
           MetricDelta(hydration=-10), bonus=(C,), bonus_condition="Water helps maintain glucose balance!"),
    _twist("learning_opportunity9", "Hormone Changes!", "🎓", "Hormones affect glucose throughout the day.", 8,
           MetricDelta(stability=-10), MetricDelta(stability=-1), bonus=(C, R),
           bonus_condition="Cortisol, adrenaline, growth hormone all impact glucose!"),
    _twist("learning_opportunity10", "Individual Response!", "🎓", "Everyone responds differently to foods!", 8,
           bonus=(C, R, S), bonus_condition="Personal glucose responses vary widely!"),
)

TWIST_POOLS: dict[Audience, tuple[PlotTwist, ...]] = {
    Audience.personal: PERSONAL_TWISTS,
    Audience.caregiver: CAREGIVER_TWISTS,
    Audience.curious: CURIOUS_TWISTS,
}


def twist_pool(audience: Audience) -> tuple[PlotTwist, ...]:
    return TWIST_POOLS.get(audience, PERSONAL_TWISTS)
