"""Pydantic request and response bodies for the HTTP API."""

from datetime import UTC, date, datetime
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    field_validator,
)
from pydantic.alias_generators import to_camel

from health_targets.domain.errors import ValidationError
from health_targets.domain.models import PlanStatus, ProfileUpdate
from health_targets.domain.science import ActivityLevel, PrimaryGoal, Sex
from health_targets.domain.timestamps import parse_instant
from health_targets.services.science import calculate_age


class ApiModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class GeneratePlanRequest(ApiModel):
    force_recompute: StrictBool = False


class PlanOut(ApiModel):
    id: UUID
    name: str
    description: str
    plan_type: str
    status: PlanStatus
    start_date: datetime
    end_date: datetime
    total_tasks: int
    completed_tasks: int
    completion_percentage: float
    created_at: datetime


class TargetsOut(ApiModel):
    bmr: int
    tdee: int
    calorie_target: int
    protein_target: int
    water_target: int
    weekly_rate: float
    estimated_weeks: int | None = None
    projected_date: date | None = None


class PreviousTargetsOut(ApiModel):
    bmr: int
    tdee: int
    calorie_target: int
    protein_target: int
    water_target: int


class ExplanationOut(ApiModel):
    title: str
    explanation: str
    metric: float
    formula: str | None = None


class WhyItWorksOut(ApiModel):
    bmr: ExplanationOut
    tdee: ExplanationOut
    calorie_target: ExplanationOut
    protein_target: ExplanationOut
    water_target: ExplanationOut
    timeline: ExplanationOut


class PlanGenerationOut(ApiModel):
    """Plan generation response."""

    plan: PlanOut
    targets: TargetsOut
    why_it_works: WhyItWorksOut
    recomputed: bool
    previous_targets: PreviousTargetsOut | None = None


class MetricsExplanationsOut(ApiModel):
    bmi: str
    bmr: str
    tdee: str


class AcknowledgementOut(ApiModel):
    version: int
    metrics_computed_at: datetime
    acknowledged_at: datetime


class TodayMetricsOut(ApiModel):
    """Today's metrics with acknowledgment state."""

    bmi: float
    bmr: int
    tdee: int
    computed_at: datetime
    version: int
    explanations: MetricsExplanationsOut
    acknowledged: bool
    acknowledgement: AcknowledgementOut | None = None


class AcknowledgeMetricsRequest(ApiModel):
    """Body of a metrics acknowledgment."""

    version: StrictInt = Field(gt=0)
    metrics_computed_at: datetime

    @field_validator("metrics_computed_at", mode="before")
    @classmethod
    def _parse_computed_at(cls, value: object) -> datetime:
        if not isinstance(value, str):
            raise ValueError("Expected an ISO-8601 UTC timestamp string")
        try:
            return parse_instant(value, field="metricsComputedAt")
        except ValidationError as exc:
            raise ValueError(exc.field_errors["metricsComputedAt"]) from exc


class AcknowledgeMetricsOut(ApiModel):
    success: bool
    acknowledged_at: datetime


class ProfileOut(ApiModel):
    """Stored profile fields and last computed targets."""

    user_id: UUID
    date_of_birth: date | None = None
    sex: Sex | None = None
    height_cm: float | None = None
    current_weight_kg: float | None = None
    target_weight_kg: float | None = None
    activity_level: ActivityLevel | None = None
    primary_goal: PrimaryGoal | None = None
    target_date: date | None = None
    dietary_preferences: list[str] = Field(default_factory=list)
    allergies: list[str] = Field(default_factory=list)
    meals_per_day: int | None = None
    onboarding_completed: bool
    bmr: int | None = None
    tdee: int | None = None
    calorie_target: int | None = None
    protein_target: int | None = None
    water_target: int | None = None


class ProfileUpdateRequest(ApiModel):
    """Partial profile edit; omitted fields stay unchanged."""

    date_of_birth: date | None = None
    sex: Sex | None = None
    height_cm: float | None = Field(default=None, ge=100, le=250)
    current_weight_kg: float | None = Field(default=None, ge=30, le=300)
    target_weight_kg: float | None = Field(default=None, ge=30, le=300)
    activity_level: ActivityLevel | None = None
    primary_goal: PrimaryGoal | None = None
    target_date: date | None = None
    dietary_preferences: list[str] | None = Field(default=None, max_length=50)
    allergies: list[str] | None = Field(default=None, max_length=50)
    meals_per_day: int | None = Field(default=None, ge=1, le=10)

    @field_validator("date_of_birth")
    @classmethod
    def _check_age(cls, value: date | None) -> date | None:
        if value is None:
            return value
        age = calculate_age(value, datetime.now(tz=UTC).date())
        if not 13 <= age <= 120:  # noqa: PLR2004
            raise ValueError("Age must be between 13 and 120 years")
        return value

    def to_domain(self) -> ProfileUpdate:
        return ProfileUpdate(
            date_of_birth=self.date_of_birth,
            sex=self.sex,
            height_cm=self.height_cm,
            current_weight_kg=self.current_weight_kg,
            target_weight_kg=self.target_weight_kg,
            activity_level=self.activity_level,
            primary_goal=self.primary_goal,
            target_date=self.target_date,
            dietary_preferences=(
                tuple(self.dietary_preferences)
                if self.dietary_preferences is not None
                else None
            ),
            allergies=tuple(self.allergies) if self.allergies is not None else None,
            meals_per_day=self.meals_per_day,
        )


class ProfileChangeOut(ApiModel):
    field_name: str
    old_value: str | None = None
    new_value: str | None = None


class ProfileTargetsOut(ApiModel):
    calorie_target: int | None = None
    protein_target: int | None = None
    water_target: int | None = None
    previous_calories: int | None = None
    previous_protein: int | None = None


class ProfileUpdateOut(ApiModel):
    profile: ProfileOut
    plan_updated: bool
    targets: ProfileTargetsOut | None = None
    changes: list[ProfileChangeOut] | None = None


class ProfileChangeRecordOut(ApiModel):
    id: UUID
    field_name: str
    old_value: str | None = None
    new_value: str | None = None
    changed_at: datetime
    triggered_plan_regeneration: bool
    calories_before: int | None = None
    calories_after: int | None = None
    protein_before: int | None = None
    protein_after: int | None = None


class RecomputeUpdateOut(ApiModel):
    user_id: UUID
    previous_calories: int | None = None
    new_calories: int | None = None
    reason: str | None = None


class WeeklyRecomputeOut(ApiModel):
    total_users: int
    success_count: int
    error_count: int
    updates: list[RecomputeUpdateOut]


class DailyMetricsOut(ApiModel):
    total_users: int
    success_count: int
    error_count: int
    skipped_count: int
