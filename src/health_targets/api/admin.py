"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status

from health_targets.api.schemas import (
    DailyMetricsOut,
    ProfileChangeRecordOut,
    WeeklyRecomputeOut,
)

if TYPE_CHECKING:
    from health_targets.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.post(
    "/recompute",
    dependencies=[Depends(require_admin)],
    response_model=WeeklyRecomputeOut,
)
def run_weekly_recompute(request: Request) -> WeeklyRecomputeOut:
    """Recompute targets for every onboarded user."""
    container: AppContainer = request.app.state.container
    return WeeklyRecomputeOut.model_validate(container.recompute_job.run())


@router.post(
    "/metrics/recompute",
    dependencies=[Depends(require_admin)],
    response_model=DailyMetricsOut,
)
def run_daily_metrics(request: Request) -> DailyMetricsOut:
    """Store today's metrics snapshot for every onboarded user."""
    container: AppContainer = request.app.state.container
    return DailyMetricsOut.model_validate(container.metrics_job.run())


@router.get(
    "/users/{user_id}/profile-changes",
    dependencies=[Depends(require_admin)],
    response_model=list[ProfileChangeRecordOut],
)
def profile_changes(
    user_id: UUID,
    request: Request,
    field: str | None = None,
    limit: int = Query(default=50, ge=1, le=500),
) -> list[ProfileChangeRecordOut]:
    """Return a user's profile change history, newest first."""
    container: AppContainer = request.app.state.container
    if field:
        records = container.audit_service.get_field_history(user_id, field, limit)
    else:
        records = container.audit_service.get_change_history(user_id, limit)
    return [ProfileChangeRecordOut.model_validate(record) for record in records]
