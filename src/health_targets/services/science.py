"""Health target calculations and their educational explanations."""

import math
from datetime import date, timedelta

from pydantic import ValidationError as PydanticValidationError

from health_targets.domain.errors import ValidationError
from health_targets.domain.models import UserSettingsRecord
from health_targets.domain.science import (
    WATER_ML_PER_KG,
    ActivityLevel,
    ComputedTargets,
    Explanation,
    MetricsExplanations,
    PrimaryGoal,
    Projection,
    ScienceInputs,
    Sex,
    WhyItWorks,
)

BMR_FORMULA = (
    "BMR = (10 × weight in kg) + (6.25 × height in cm) - (5 × age) + sex offset"
)

_REQUIRED_PROFILE_FIELDS = (
    "current_weight_kg",
    "height_cm",
    "date_of_birth",
    "sex",
    "activity_level",
    "primary_goal",
)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def calculate_bmi(weight_kg: float, height_cm: float) -> float:
    """Return the body mass index rounded to two decimals."""
    height_m = height_cm / 100
    return _round_half_up(weight_kg / (height_m * height_m) * 100) / 100


def calculate_bmr(weight_kg: float, height_cm: float, age: int, sex: Sex) -> int:
    """Return the Mifflin-St Jeor basal metabolic rate in kcal."""
    return _round_half_up(
        10 * weight_kg + 6.25 * height_cm - 5 * age + sex.bmr_offset
    )


def calculate_tdee(bmr: int, activity_level: ActivityLevel) -> int:
    return _round_half_up(bmr * activity_level.multiplier)


def calculate_calorie_target(tdee: int, primary_goal: PrimaryGoal) -> int:
    return tdee + primary_goal.calorie_adjustment


def calculate_protein_target(weight_kg: float, primary_goal: PrimaryGoal) -> int:
    return _round_half_up(weight_kg * primary_goal.protein_per_kg)


def calculate_water_target(weight_kg: float) -> int:
    """Return the daily water target in ml, rounded to the nearest 100 ml."""
    return _round_half_up(weight_kg * WATER_ML_PER_KG / 100) * 100


def calculate_weekly_rate(primary_goal: PrimaryGoal) -> float:
    return primary_goal.weekly_rate


def calculate_projection(
    current_weight_kg: float,
    target_weight_kg: float | None,
    weekly_rate: float,
    today: date,
) -> Projection | None:
    """Return the weeks needed to reach the target weight and the date."""
    if target_weight_kg is None or weekly_rate == 0:
        return None
    weeks = math.ceil(abs(target_weight_kg - current_weight_kg) / abs(weekly_rate))
    return Projection(
        estimated_weeks=weeks,
        projected_date=today + timedelta(days=weeks * 7),
    )


def calculate_age(date_of_birth: date, today: date) -> int:
    """Return completed years between the birth date and today."""
    age = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


def compute_targets(inputs: ScienceInputs, today: date) -> ComputedTargets:
    """Compute every daily target for validated inputs."""
    bmr = calculate_bmr(inputs.weight_kg, inputs.height_cm, inputs.age, inputs.sex)
    tdee = calculate_tdee(bmr, inputs.activity_level)
    weekly_rate = calculate_weekly_rate(inputs.primary_goal)
    projection = calculate_projection(
        inputs.weight_kg, inputs.target_weight_kg, weekly_rate, today
    )
    return ComputedTargets(
        bmr=bmr,
        tdee=tdee,
        calorie_target=calculate_calorie_target(tdee, inputs.primary_goal),
        protein_target=calculate_protein_target(inputs.weight_kg, inputs.primary_goal),
        water_target=calculate_water_target(inputs.weight_kg),
        weekly_rate=weekly_rate,
        estimated_weeks=projection.estimated_weeks if projection else None,
        projected_date=projection.projected_date if projection else None,
    )


def build_science_inputs(
    weight_kg: object,
    height_cm: object,
    age: object,
    sex: object,
    activity_level: object,
    primary_goal: object,
    target_weight_kg: object = None,
) -> ScienceInputs:
    """Validate raw values, raising ValidationError with per-field detail."""
    try:
        return ScienceInputs.model_validate(
            {
                "weight_kg": weight_kg,
                "height_cm": height_cm,
                "age": age,
                "sex": sex,
                "activity_level": activity_level,
                "primary_goal": primary_goal,
                "target_weight_kg": target_weight_kg,
            }
        )
    except PydanticValidationError as exc:
        field_errors = {
            ".".join(str(part) for part in error["loc"]): error["msg"]
            for error in exc.errors()
        }
        raise ValidationError("Invalid health inputs", field_errors) from exc


def inputs_from_settings(settings: UserSettingsRecord, today: date) -> ScienceInputs:
    """Build calculator inputs from stored profile fields."""
    missing = {
        name: "Field is required"
        for name in _REQUIRED_PROFILE_FIELDS
        if getattr(settings, name) is None
    }
    if missing or settings.date_of_birth is None:
        raise ValidationError(
            "User settings incomplete. Please complete onboarding.", missing
        )
    return build_science_inputs(
        weight_kg=settings.current_weight_kg,
        height_cm=settings.height_cm,
        age=calculate_age(settings.date_of_birth, today),
        sex=settings.sex,
        activity_level=settings.activity_level,
        primary_goal=settings.primary_goal,
        target_weight_kg=settings.target_weight_kg,
    )


def _format_number(value: float) -> str:
    return f"{value:g}"


def _calorie_explanation(
    calorie_target: int, tdee: int, weekly_rate: float, primary_goal: PrimaryGoal
) -> str:
    gap = tdee - calorie_target
    if gap > 0:
        return (
            f"To {primary_goal.label}, you need a {gap} calorie deficit. "
            "This steady energy gap makes your body draw on stored fat. "
            f"At this pace you'll lose about {_format_number(abs(weekly_rate))} kg "
            "per week while keeping your muscle."
        )
    if gap < 0:
        return (
            f"To {primary_goal.label}, you need a {abs(gap)} calorie surplus. "
            "The extra energy fuels muscle protein synthesis and recovery. "
            f"At this pace you'll gain about {_format_number(weekly_rate)} kg "
            "per week, mostly lean mass when combined with strength training."
        )
    return (
        f"To {primary_goal.label}, you'll eat at maintenance "
        f"({calorie_target} calories). Your weight stays stable while you work "
        "on body composition, performance and overall health."
    )


def _protein_explanation(protein_target: int, primary_goal: PrimaryGoal) -> str:
    intro = (
        f"You need {protein_target}g of protein daily "
        f"({_format_number(primary_goal.protein_per_kg)}g per kg of body weight)."
    )
    if primary_goal is PrimaryGoal.LOSE_WEIGHT:
        detail = (
            "While losing weight, a high protein intake protects your muscle "
            "and keeps you full."
        )
    elif primary_goal is PrimaryGoal.GAIN_MUSCLE:
        detail = (
            "For building muscle, protein supplies the amino acids that drive "
            "recovery and new growth."
        )
    else:
        detail = (
            "Enough protein keeps your muscle, supports satiety and helps your "
            "metabolism."
        )
    return f"{intro} {detail}"


def _timeline_explanation(targets: ComputedTargets, primary_goal: PrimaryGoal) -> str:
    if targets.estimated_weeks:
        return (
            f"At {_format_number(abs(targets.weekly_rate))} kg per week, you'll reach "
            f"your goal in about {targets.estimated_weeks} weeks. This assumes you "
            "stay consistent with your calorie and protein targets, and progress "
            "will fluctuate from week to week."
        )
    return (
        f"Since you're focused on {primary_goal.label}, there's no weight "
        "timeline. Build consistent daily habits and let your body adapt."
    )


def explain_targets(
    targets: ComputedTargets,
    activity_level: ActivityLevel,
    primary_goal: PrimaryGoal,
) -> WhyItWorks:
    """Explain each computed target in user-facing language."""
    return WhyItWorks(
        bmr=Explanation(
            title="Your Basal Metabolic Rate (BMR)",
            explanation=(
                f"Your BMR is {targets.bmr} calories, the energy your body burns "
                "at complete rest to keep breathing, circulating blood and "
                "repairing cells. It is calculated with the Mifflin-St Jeor "
                "equation."
            ),
            metric=targets.bmr,
            formula=BMR_FORMULA,
        ),
        tdee=Explanation(
            title="Your Total Daily Energy Expenditure (TDEE)",
            explanation=(
                f"Your TDEE is {targets.tdee} calories, your total daily burn "
                f"including activity. Your BMR is multiplied by "
                f"{_format_number(activity_level.multiplier)} for a "
                f"{activity_level.label} lifestyle. Eating this amount keeps your "
                "weight stable."
            ),
            metric=activity_level.multiplier,
        ),
        calorie_target=Explanation(
            title="Your Daily Calorie Target",
            explanation=_calorie_explanation(
                targets.calorie_target, targets.tdee, targets.weekly_rate, primary_goal
            ),
            metric=targets.tdee - targets.calorie_target,
        ),
        protein_target=Explanation(
            title="Your Daily Protein Target",
            explanation=_protein_explanation(targets.protein_target, primary_goal),
            metric=primary_goal.protein_per_kg,
        ),
        water_target=Explanation(
            title="Your Daily Hydration Target",
            explanation=(
                f"Aim for {targets.water_target}ml of water daily "
                f"({WATER_ML_PER_KG}ml per kg). Hydration supports performance, "
                "recovery and appetite regulation."
            ),
            metric=WATER_ML_PER_KG,
        ),
        timeline=Explanation(
            title="Your Projected Timeline",
            explanation=_timeline_explanation(targets, primary_goal),
            metric=targets.weekly_rate,
        ),
    )


def bmi_category(bmi: float) -> str:
    if bmi < 18.5:
        return "underweight"
    if bmi < 25:
        return "normal weight"
    if bmi < 30:
        return "overweight"
    return "obese"


def explain_metrics(bmi: float, bmr: int, tdee: int) -> MetricsExplanations:
    """Explain BMI, BMR and TDEE for the daily metrics view."""
    return MetricsExplanations(
        bmi=(
            f"Your BMI is {_format_number(bmi)}, which is in the {bmi_category(bmi)} "
            "category. BMI is your weight in kg divided by your height in metres "
            "squared. It is a screening tool and does not measure body fat "
            "directly."
        ),
        bmr=(
            f"Your BMR is {bmr} calories per day, the energy your body uses at "
            "complete rest for vital functions."
        ),
        tdee=(
            f"Your TDEE is {tdee} calories per day including all activity. Eating "
            "at this level maintains your weight."
        ),
    )
