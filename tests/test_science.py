"""Tests for health target calculations."""

from dataclasses import replace
from datetime import date, timedelta
from uuid import uuid4

import pytest

from health_targets.domain.errors import ValidationError
from health_targets.domain.science import (
    ActivityLevel,
    PrimaryGoal,
    ScienceInputs,
    Sex,
)
from health_targets.services.science import (
    bmi_category,
    build_science_inputs,
    calculate_age,
    calculate_bmi,
    calculate_bmr,
    calculate_calorie_target,
    calculate_projection,
    calculate_protein_target,
    calculate_tdee,
    calculate_water_target,
    compute_targets,
    explain_metrics,
    explain_targets,
    inputs_from_settings,
)
from tests.conftest import make_settings


def _inputs(**overrides: object) -> ScienceInputs:
    values: dict[str, object] = {
        "weight_kg": 80,
        "height_cm": 180,
        "age": 30,
        "sex": "male",
        "activity_level": "moderately_active",
        "primary_goal": "lose_weight",
        "target_weight_kg": 70,
    }
    values.update(overrides)
    return build_science_inputs(**values)


def test_reference_profile_targets() -> None:
    today = date(2025, 3, 3)

    targets = compute_targets(_inputs(), today)

    assert targets.bmr == 1780
    assert targets.tdee == 2759
    assert targets.calorie_target == 2259
    assert targets.protein_target == 176
    assert targets.water_target == 2800
    assert targets.weekly_rate == -0.5
    assert targets.estimated_weeks == 20
    assert targets.projected_date == today + timedelta(days=140)


def test_bmr_sex_offsets() -> None:
    assert calculate_bmr(60, 165, 25, Sex.FEMALE) == 1345
    assert calculate_bmr(80, 180, 30, Sex.MALE) == 1780
    assert calculate_bmr(70, 170, 40, Sex.OTHER) == 1485


def test_bmi_is_rounded_to_two_decimals() -> None:
    assert calculate_bmi(80, 180) == 24.69
    assert calculate_bmi(70, 175) == 22.86


def test_tdee_uses_activity_multiplier() -> None:
    assert calculate_tdee(1780, ActivityLevel.SEDENTARY) == 2136
    assert calculate_tdee(1780, ActivityLevel.EXTREMELY_ACTIVE) == 3382


def test_calorie_target_equals_tdee_when_rate_is_zero() -> None:
    for goal in (PrimaryGoal.MAINTAIN, PrimaryGoal.IMPROVE_HEALTH):
        assert goal.weekly_rate == 0
        assert calculate_calorie_target(2500, goal) == 2500
    assert calculate_calorie_target(2500, PrimaryGoal.GAIN_MUSCLE) == 2900


def test_protein_and_water_targets() -> None:
    assert calculate_protein_target(80, PrimaryGoal.GAIN_MUSCLE) == 192
    assert calculate_protein_target(80, PrimaryGoal.MAINTAIN) == 144
    assert calculate_water_target(72) == 2500
    assert calculate_water_target(75) == 2600


def test_projection_absent_without_rate_or_target() -> None:
    today = date(2025, 1, 1)

    assert calculate_projection(80, 70, 0.0, today) is None
    assert calculate_projection(80, None, -0.5, today) is None

    maintain = compute_targets(_inputs(primary_goal="maintain"), today)
    assert maintain.estimated_weeks is None
    assert maintain.projected_date is None


def test_projection_rounds_weeks_up() -> None:
    today = date(2025, 1, 1)

    projection = calculate_projection(70, 75, 0.4, today)

    assert projection is not None
    assert projection.estimated_weeks == 13
    assert projection.projected_date == date(2025, 4, 2)


def test_age_counts_completed_years() -> None:
    birth = date(1990, 6, 15)

    assert calculate_age(birth, date(2025, 6, 14)) == 34
    assert calculate_age(birth, date(2025, 6, 15)) == 35


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("weight_kg", 29),
        ("weight_kg", 301),
        ("height_cm", 99),
        ("height_cm", 251),
        ("age", 12),
        ("age", 121),
        ("target_weight_kg", 25),
    ],
)
def test_out_of_range_inputs_are_rejected(field: str, value: float) -> None:
    with pytest.raises(ValidationError) as excinfo:
        _inputs(**{field: value})

    assert field in excinfo.value.field_errors


def test_unknown_enum_value_is_rejected() -> None:
    with pytest.raises(ValidationError) as excinfo:
        _inputs(activity_level="couch")

    assert "activity_level" in excinfo.value.field_errors


def test_inputs_from_settings_reports_missing_fields() -> None:
    settings = replace(make_settings(uuid4()), height_cm=None, sex=None)

    with pytest.raises(ValidationError) as excinfo:
        inputs_from_settings(settings, date(2025, 1, 1))

    assert set(excinfo.value.field_errors) == {"height_cm", "sex"}


def test_explanations_follow_goal() -> None:
    today = date(2025, 1, 1)
    loss = compute_targets(_inputs(), today)
    maintain = compute_targets(_inputs(primary_goal="maintain"), today)

    loss_text = explain_targets(
        loss, ActivityLevel.MODERATELY_ACTIVE, PrimaryGoal.LOSE_WEIGHT
    )
    maintain_text = explain_targets(
        maintain, ActivityLevel.MODERATELY_ACTIVE, PrimaryGoal.MAINTAIN
    )

    assert "500 calorie deficit" in loss_text.calorie_target.explanation
    assert loss_text.calorie_target.metric == 500
    assert "20 weeks" in loss_text.timeline.explanation
    assert loss_text.bmr.formula is not None
    assert loss_text.tdee.metric == 1.55
    assert "maintenance" in maintain_text.calorie_target.explanation
    assert "no weight timeline" in maintain_text.timeline.explanation


def test_bmi_categories() -> None:
    assert bmi_category(17.9) == "underweight"
    assert bmi_category(24.69) == "normal weight"
    assert bmi_category(25) == "overweight"
    assert bmi_category(30) == "obese"
    assert "normal weight" in explain_metrics(24.69, 1780, 2759).bmi
