"""Daily metrics and acknowledgment endpoints."""

from __future__ import annotations

from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request

from health_targets.api.deps import get_container, get_current_user_id
from health_targets.api.schemas import (
    AcknowledgeMetricsOut,
    AcknowledgeMetricsRequest,
    TodayMetricsOut,
)

router = APIRouter(prefix="/v1/profile/metrics", tags=["metrics"])


@router.get(
    "/today", response_model=TodayMetricsOut, response_model_exclude_none=True
)
def today_metrics(
    request: Request, user_id: UUID = Depends(get_current_user_id)
) -> TodayMetricsOut:
    """Return today's metrics, computing them on demand."""
    container = get_container(request)
    return TodayMetricsOut.model_validate(
        container.metrics_service.get_today_metrics(user_id)
    )


@router.post("/acknowledge", response_model=AcknowledgeMetricsOut)
def acknowledge_metrics(
    payload: AcknowledgeMetricsRequest,
    request: Request,
    user_id: UUID = Depends(get_current_user_id),
) -> AcknowledgeMetricsOut:
    """Acknowledge a metrics snapshot version."""
    container = get_container(request)
    acknowledgment = container.metrics_service.acknowledge_metrics(
        user_id, payload.version, payload.metrics_computed_at
    )
    return AcknowledgeMetricsOut(
        success=True, acknowledged_at=acknowledgment.acknowledged_at
    )
