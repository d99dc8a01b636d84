"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from health_targets.adapters.supabase_audit_repository import SupabaseAuditRepository
from health_targets.adapters.supabase_metrics_repository import (
    SupabaseMetricsRepository,
)
from health_targets.adapters.supabase_plan_repository import SupabasePlanRepository
from health_targets.adapters.supabase_user_settings_repository import (
    SupabaseUserSettingsRepository,
)
from health_targets.config import Settings
from health_targets.services.audit import ProfileAuditService
from health_targets.services.metrics import MetricsService
from health_targets.services.plans import PlanService
from health_targets.services.profile import ProfileService
from health_targets.services.recompute_job import (
    DailyMetricsRecomputeJob,
    WeeklyRecomputeJob,
)

_logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    metrics_service: MetricsService
    plan_service: PlanService
    profile_service: ProfileService
    audit_service: ProfileAuditService
    recompute_job: WeeklyRecomputeJob
    metrics_job: DailyMetricsRecomputeJob
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    settings_repository = SupabaseUserSettingsRepository(supabase_client)
    metrics_service = MetricsService(
        settings_repository=settings_repository,
        repository=SupabaseMetricsRepository(supabase_client),
        target_ms=resolved_settings.metrics_target_ms,
    )
    plan_service = PlanService(
        settings_repository=settings_repository,
        plan_repository=SupabasePlanRepository(supabase_client),
        metrics_service=metrics_service,
        freshness_days=resolved_settings.plan_freshness_days,
        calorie_change_threshold=resolved_settings.calorie_change_threshold,
        protein_change_threshold=resolved_settings.protein_change_threshold,
        target_ms=resolved_settings.plan_generation_target_ms,
    )
    audit_service = ProfileAuditService(SupabaseAuditRepository(supabase_client))
    profile_service = ProfileService(
        settings_repository=settings_repository,
        plan_service=plan_service,
        audit_service=audit_service,
    )
    recompute_job = WeeklyRecomputeJob(
        settings_repository=settings_repository,
        plan_service=plan_service,
    )
    metrics_job = DailyMetricsRecomputeJob(
        settings_repository=settings_repository,
        metrics_service=metrics_service,
    )

    async def close_resources() -> None:
        supabase_client.postgrest.aclose()
        _logger.info(
            "Container shut down: environment=%s", resolved_settings.environment
        )

    return AppContainer(
        settings=resolved_settings,
        metrics_service=metrics_service,
        plan_service=plan_service,
        profile_service=profile_service,
        audit_service=audit_service,
        recompute_job=recompute_job,
        metrics_job=metrics_job,
        close_resources=close_resources,
    )
