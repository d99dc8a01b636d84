"""Domain records persisted by the service."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum
from uuid import UUID

from health_targets.domain.science import (
    ActivityLevel,
    ComputedTargets,
    MetricsExplanations,
    PrimaryGoal,
    Sex,
    WhyItWorks,
)


class PlanStatus(StrEnum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"
    DRAFT = "draft"


PLAN_TYPE_WEEKLY = "weekly"


@dataclass(frozen=True)
class UserSettingsRecord:
    """Profile fields and the last targets computed from them."""

    user_id: UUID
    date_of_birth: date | None = None
    sex: Sex | None = None
    height_cm: float | None = None
    current_weight_kg: float | None = None
    target_weight_kg: float | None = None
    activity_level: ActivityLevel | None = None
    primary_goal: PrimaryGoal | None = None
    target_date: date | None = None
    dietary_preferences: tuple[str, ...] = ()
    allergies: tuple[str, ...] = ()
    meals_per_day: int | None = None
    onboarding_completed: bool = False
    bmr: int | None = None
    tdee: int | None = None
    calorie_target: int | None = None
    protein_target: int | None = None
    water_target: int | None = None


@dataclass(frozen=True)
class StoredTargets:
    """Targets previously stored on the user's settings."""

    bmr: int
    tdee: int
    calorie_target: int
    protein_target: int
    water_target: int


@dataclass(frozen=True)
class MetricsSnapshot:
    """One version of a user's computed body metrics."""

    id: UUID
    user_id: UUID
    bmi: float
    bmr: int
    tdee: int
    version: int
    computed_at: datetime


@dataclass(frozen=True)
class MetricsAcknowledgment:
    user_id: UUID
    version: int
    metrics_computed_at: datetime
    acknowledged_at: datetime


@dataclass(frozen=True)
class TodayMetrics:
    """Current metrics with their acknowledgment state."""

    bmi: float
    bmr: int
    tdee: int
    computed_at: datetime
    version: int
    explanations: MetricsExplanations
    acknowledged: bool
    acknowledgement: MetricsAcknowledgment | None = None


@dataclass(frozen=True)
class PlanRecord:
    """A generated weekly plan."""

    id: UUID
    user_id: UUID
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


@dataclass(frozen=True)
class InitialPlanSnapshot:
    """Starting point and projection captured when targets are written."""

    user_id: UUID
    start_weight_kg: float
    target_weight_kg: float
    start_date: datetime
    target_date: date
    weekly_rate: float
    estimated_weeks: int | None
    projected_completion_date: date | None
    calorie_target: int
    protein_target: int
    water_target: int
    primary_goal: PrimaryGoal
    activity_level: ActivityLevel


@dataclass(frozen=True)
class NewPlan:
    """Plan row to be inserted."""

    user_id: UUID
    name: str
    description: str
    start_date: datetime
    end_date: datetime
    plan_type: str = PLAN_TYPE_WEEKLY
    status: PlanStatus = PlanStatus.ACTIVE


@dataclass(frozen=True)
class GeneratedPlanWrite:
    """Everything written atomically by a plan generation."""

    user_id: UUID
    targets: ComputedTargets
    snapshot: InitialPlanSnapshot
    plan: NewPlan


@dataclass(frozen=True)
class RecomputedTargetsWrite:
    """Everything written atomically by a significant recompute."""

    user_id: UUID
    targets: ComputedTargets


@dataclass(frozen=True)
class PlanGenerationResult:
    plan: PlanRecord
    targets: ComputedTargets
    why_it_works: WhyItWorks
    recomputed: bool
    created: bool
    previous_targets: StoredTargets | None = None


@dataclass(frozen=True)
class RecomputeResult:
    """Outcome of a targets recompute for one user."""

    success: bool
    updated: bool
    previous_calories: int | None = None
    new_calories: int | None = None
    previous_protein: int | None = None
    new_protein: int | None = None
    reason: str | None = None


@dataclass(frozen=True)
class ProfileChange:
    field_name: str
    old_value: str | None
    new_value: str | None


@dataclass(frozen=True)
class RequestContext:
    """Caller details recorded alongside profile changes."""

    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True)
class AuditMetadata:
    """Request and recompute details attached to audit rows."""

    ip_address: str | None = None
    user_agent: str | None = None
    triggered_plan_regeneration: bool = False
    calories_before: int | None = None
    calories_after: int | None = None
    protein_before: int | None = None
    protein_after: int | None = None


@dataclass(frozen=True)
class ProfileChangeRecord:
    """A stored audit row."""

    id: UUID
    user_id: UUID
    field_name: str
    old_value: str | None
    new_value: str | None
    changed_at: datetime
    triggered_plan_regeneration: bool
    calories_before: int | None = None
    calories_after: int | None = None
    protein_before: int | None = None
    protein_after: int | None = None


@dataclass(frozen=True)
class ProfileUpdate:
    """Submitted profile fields; None means the field was not submitted."""

    date_of_birth: date | None = None
    sex: Sex | None = None
    height_cm: float | None = None
    current_weight_kg: float | None = None
    target_weight_kg: float | None = None
    activity_level: ActivityLevel | None = None
    primary_goal: PrimaryGoal | None = None
    target_date: date | None = None
    dietary_preferences: tuple[str, ...] | None = None
    allergies: tuple[str, ...] | None = None
    meals_per_day: int | None = None


@dataclass(frozen=True)
class ProfileUpdateResult:
    settings: UserSettingsRecord
    plan_updated: bool
    changes: list[ProfileChange] = field(default_factory=list)
    recompute: RecomputeResult | None = None


@dataclass(frozen=True)
class UserRecomputeUpdate:
    user_id: UUID
    previous_calories: int | None
    new_calories: int | None
    reason: str | None


@dataclass(frozen=True)
class WeeklyRecomputeResult:
    """Summary of one weekly recompute run."""

    total_users: int
    success_count: int
    error_count: int
    updates: list[UserRecomputeUpdate] = field(default_factory=list)


@dataclass(frozen=True)
class DailyMetricsResult:
    """Summary of one daily metrics run."""

    total_users: int
    success_count: int
    error_count: int
    skipped_count: int
