"""Scheduled recompute jobs across all onboarded users."""

import logging
from dataclasses import dataclass

from health_targets.domain.errors import ValidationError
from health_targets.domain.models import (
    DailyMetricsResult,
    UserRecomputeUpdate,
    WeeklyRecomputeResult,
)
from health_targets.services.metrics import MetricsService
from health_targets.services.plans import PlanService
from health_targets.services.user_settings import UserSettingsRepository

_logger = logging.getLogger(__name__)


@dataclass
class WeeklyRecomputeJob:
    """Runs the recompute evaluator for every onboarded user."""

    settings_repository: UserSettingsRepository
    plan_service: PlanService

    def run(self) -> WeeklyRecomputeResult:
        user_ids = self.settings_repository.list_onboarded_user_ids()
        _logger.info("Weekly recompute started: users=%s", len(user_ids))
        success_count = 0
        error_count = 0
        updates: list[UserRecomputeUpdate] = []
        for user_id in user_ids:
            try:
                result = self.plan_service.recompute_for_user(user_id)
            except Exception:
                _logger.exception("Weekly recompute crashed: user_id=%s", user_id)
                error_count += 1
                continue
            if not result.success:
                error_count += 1
                continue
            success_count += 1
            if result.updated:
                updates.append(
                    UserRecomputeUpdate(
                        user_id=user_id,
                        previous_calories=result.previous_calories,
                        new_calories=result.new_calories,
                        reason=result.reason,
                    )
                )
        _logger.info(
            "Weekly recompute finished: users=%s success=%s errors=%s updated=%s",
            len(user_ids),
            success_count,
            error_count,
            len(updates),
        )
        return WeeklyRecomputeResult(
            total_users=len(user_ids),
            success_count=success_count,
            error_count=error_count,
            updates=updates,
        )


@dataclass
class DailyMetricsRecomputeJob:
    """Stores today's metrics snapshot for every onboarded user."""

    settings_repository: UserSettingsRepository
    metrics_service: MetricsService

    def run(self) -> DailyMetricsResult:
        user_ids = self.settings_repository.list_onboarded_user_ids()
        _logger.info("Daily metrics recompute started: users=%s", len(user_ids))
        success_count = 0
        error_count = 0
        skipped_count = 0
        for user_id in user_ids:
            try:
                self.metrics_service.compute_and_store_metrics(user_id)
            except ValidationError:
                _logger.info(
                    "Skipping user with incomplete health data: user_id=%s", user_id
                )
                skipped_count += 1
            except Exception:
                _logger.exception(
                    "Daily metrics recompute failed: user_id=%s", user_id
                )
                error_count += 1
            else:
                success_count += 1
        _logger.info(
            "Daily metrics recompute finished: users=%s success=%s errors=%s "
            "skipped=%s",
            len(user_ids),
            success_count,
            error_count,
            skipped_count,
        )
        return DailyMetricsResult(
            total_users=len(user_ids),
            success_count=success_count,
            error_count=error_count,
            skipped_count=skipped_count,
        )
