"""Weekly plan generation and targets recompute."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol
from uuid import UUID

from health_targets.domain.errors import (
    HealthTargetsError,
    InvalidStateError,
    NotFoundError,
    UnexpectedError,
)
from health_targets.domain.models import (
    GeneratedPlanWrite,
    InitialPlanSnapshot,
    NewPlan,
    PlanGenerationResult,
    PlanRecord,
    RecomputedTargetsWrite,
    RecomputeResult,
    StoredTargets,
    UserSettingsRecord,
)
from health_targets.domain.science import (
    ActivityLevel,
    ComputedTargets,
    PrimaryGoal,
    WhyItWorks,
)
from health_targets.services.metrics import MetricsService
from health_targets.services.science import (
    compute_targets,
    explain_targets,
    inputs_from_settings,
)
from health_targets.services.timing import elapsed_ms, log_if_slow, start_timer
from health_targets.services.user_settings import UserSettingsRepository

_logger = logging.getLogger(__name__)

ONBOARDING_REQUIRED = "Please complete onboarding before generating a plan"
ACKNOWLEDGMENT_REQUIRED = (
    "Please review and acknowledge your health metrics before generating a plan"
)


class PlanRepository(Protocol):
    """Persistence interface for plans and their atomic writes."""

    def get_recent_plan(self, user_id: UUID, since: datetime) -> PlanRecord | None:
        """Return the newest plan starting at or after `since`."""

    def save_generated_plan(self, write: GeneratedPlanWrite) -> PlanRecord:
        """Update targets, upsert the snapshot and insert the plan atomically."""

    def save_recomputed_targets(self, write: RecomputedTargetsWrite) -> None:
        """Update targets and the snapshot projection atomically."""


def week_bounds(now: datetime) -> tuple[datetime, datetime]:
    """Return Monday 00:00 and Sunday 23:59:59.999999 of the week containing now."""
    current = now.astimezone(UTC)
    monday = (current - timedelta(days=current.weekday())).replace(
        hour=0, minute=0, second=0, microsecond=0
    )
    return monday, monday + timedelta(days=7) - timedelta(microseconds=1)


def plan_name(week_start: datetime) -> str:
    return f"Weekly Plan - week of {week_start:%b} {week_start.day}, {week_start.year}"


def plan_description(why_it_works: WhyItWorks, targets: ComputedTargets) -> str:
    return " ".join(
        [
            why_it_works.calorie_target.explanation,
            f"You'll consume {targets.protein_target}g of protein daily "
            "to support your goals.",
            f"Stay hydrated with {targets.water_target}ml of water "
            "throughout the day.",
        ]
    )


def is_significant_change(
    calorie_delta: int,
    protein_delta: int,
    calorie_threshold: int = 50,
    protein_threshold: int = 10,
) -> bool:
    """Return True when either delta strictly exceeds its threshold."""
    return (
        abs(calorie_delta) > calorie_threshold
        or abs(protein_delta) > protein_threshold
    )


def stored_targets(settings: UserSettingsRecord) -> StoredTargets | None:
    """Return the targets saved on the settings row, if any were computed."""
    if settings.calorie_target is None:
        return None
    return StoredTargets(
        bmr=settings.bmr or 0,
        tdee=settings.tdee or 0,
        calorie_target=settings.calorie_target,
        protein_target=settings.protein_target or 0,
        water_target=settings.water_target or 0,
    )


@dataclass
class PlanService:
    """Gates, generates and recomputes weekly plans."""

    settings_repository: UserSettingsRepository
    plan_repository: PlanRepository
    metrics_service: MetricsService
    freshness_days: int = 7
    calorie_change_threshold: int = 50
    protein_change_threshold: int = 10
    target_ms: int = 300

    def generate_plan(
        self, user_id: UUID, force_recompute: bool = False
    ) -> PlanGenerationResult:
        """Return the fresh plan or generate a new one for the current week."""
        started = start_timer()
        try:
            settings = self.settings_repository.get_settings(user_id)
            if settings is None:
                raise NotFoundError("User settings not found")
            if not settings.onboarding_completed:
                raise InvalidStateError(ONBOARDING_REQUIRED)
            if not self.metrics_service.is_acknowledged(user_id):
                raise InvalidStateError(ACKNOWLEDGMENT_REQUIRED)

            now = datetime.now(tz=UTC)
            if not force_recompute:
                recent = self.get_current_plan(user_id, now)
                if recent is not None:
                    _logger.info(
                        "Returning fresh plan: user_id=%s plan_id=%s",
                        user_id,
                        recent.id,
                    )
                    return self._existing_plan_result(recent, settings)

            inputs = inputs_from_settings(settings, now.date())
            targets = compute_targets(inputs, now.date())
            why_it_works = explain_targets(
                targets, inputs.activity_level, inputs.primary_goal
            )
            week_start, week_end = week_bounds(now)
            plan = self.plan_repository.save_generated_plan(
                GeneratedPlanWrite(
                    user_id=user_id,
                    targets=targets,
                    snapshot=InitialPlanSnapshot(
                        user_id=user_id,
                        start_weight_kg=inputs.weight_kg,
                        target_weight_kg=inputs.target_weight_kg or inputs.weight_kg,
                        start_date=now,
                        target_date=settings.target_date
                        or targets.projected_date
                        or now.date(),
                        weekly_rate=targets.weekly_rate,
                        estimated_weeks=targets.estimated_weeks,
                        projected_completion_date=targets.projected_date,
                        calorie_target=targets.calorie_target,
                        protein_target=targets.protein_target,
                        water_target=targets.water_target,
                        primary_goal=inputs.primary_goal,
                        activity_level=inputs.activity_level,
                    ),
                    plan=NewPlan(
                        user_id=user_id,
                        name=plan_name(week_start),
                        description=plan_description(why_it_works, targets),
                        start_date=week_start,
                        end_date=week_end,
                    ),
                )
            )
            _logger.info(
                "Plan generated: user_id=%s plan_id=%s recomputed=%s",
                user_id,
                plan.id,
                force_recompute,
            )
            return PlanGenerationResult(
                plan=plan,
                targets=targets,
                why_it_works=why_it_works,
                recomputed=force_recompute,
                created=True,
                previous_targets=stored_targets(settings) if force_recompute else None,
            )
        except HealthTargetsError:
            raise
        except Exception as exc:
            _logger.exception(
                "Failed to generate plan: user_id=%s duration_ms=%.1f",
                user_id,
                elapsed_ms(started),
            )
            raise UnexpectedError("Failed to generate plan. Please try again.") from exc
        finally:
            log_if_slow(
                _logger, "generate_plan", started, self.target_ms, user_id=user_id
            )

    def get_current_plan(
        self, user_id: UUID, now: datetime | None = None
    ) -> PlanRecord | None:
        """Return the newest plan inside the freshness window."""
        reference = now or datetime.now(tz=UTC)
        since = reference - timedelta(days=self.freshness_days)
        return self.plan_repository.get_recent_plan(user_id, since)

    def recompute_for_user(self, user_id: UUID) -> RecomputeResult:
        """Update stored targets when they drifted significantly."""
        try:
            settings = self.settings_repository.get_settings(user_id)
            if settings is None:
                return RecomputeResult(
                    success=True, updated=False, reason="User settings not found"
                )
            if not settings.onboarding_completed:
                return RecomputeResult(
                    success=True, updated=False, reason="Onboarding not completed"
                )
            today = datetime.now(tz=UTC).date()
            targets = compute_targets(inputs_from_settings(settings, today), today)
            previous_calories = settings.calorie_target or 0
            previous_protein = settings.protein_target or 0
            calorie_delta = targets.calorie_target - previous_calories
            protein_delta = targets.protein_target - previous_protein
            if not is_significant_change(
                calorie_delta,
                protein_delta,
                self.calorie_change_threshold,
                self.protein_change_threshold,
            ):
                return RecomputeResult(
                    success=True,
                    updated=False,
                    previous_calories=previous_calories,
                    new_calories=targets.calorie_target,
                    previous_protein=previous_protein,
                    new_protein=targets.protein_target,
                    reason="Changes below threshold",
                )
            self.plan_repository.save_recomputed_targets(
                RecomputedTargetsWrite(user_id=user_id, targets=targets)
            )
            reasons = []
            if abs(calorie_delta) > self.calorie_change_threshold:
                reasons.append(f"calories changed by {abs(calorie_delta)}kcal")
            if abs(protein_delta) > self.protein_change_threshold:
                reasons.append(f"protein changed by {abs(protein_delta)}g")
            reason = ", ".join(reasons)
            _logger.info("Targets recomputed: user_id=%s %s", user_id, reason)
            return RecomputeResult(
                success=True,
                updated=True,
                previous_calories=previous_calories,
                new_calories=targets.calorie_target,
                previous_protein=previous_protein,
                new_protein=targets.protein_target,
                reason=reason,
            )
        except Exception as exc:
            _logger.exception("Failed to recompute targets: user_id=%s", user_id)
            message = (
                exc.message
                if isinstance(exc, HealthTargetsError)
                else "Failed to recompute targets"
            )
            return RecomputeResult(success=False, updated=False, reason=message)

    def _existing_plan_result(
        self, plan: PlanRecord, settings: UserSettingsRecord
    ) -> PlanGenerationResult:
        goal = settings.primary_goal or PrimaryGoal.MAINTAIN
        activity = settings.activity_level or ActivityLevel.SEDENTARY
        targets = ComputedTargets(
            bmr=settings.bmr or 0,
            tdee=settings.tdee or 0,
            calorie_target=settings.calorie_target or 0,
            protein_target=settings.protein_target or 0,
            water_target=settings.water_target or 0,
            weekly_rate=goal.weekly_rate,
        )
        return PlanGenerationResult(
            plan=plan,
            targets=targets,
            why_it_works=explain_targets(targets, activity, goal),
            recomputed=False,
            created=False,
        )
