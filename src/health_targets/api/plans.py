"""Plan generation endpoints."""

from __future__ import annotations

from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request, Response, status

from health_targets.api.deps import get_container, get_current_user_id
from health_targets.api.schemas import GeneratePlanRequest, PlanGenerationOut

router = APIRouter(prefix="/v1/plans", tags=["plans"])


@router.post(
    "/generate",
    response_model=PlanGenerationOut,
    response_model_exclude_none=True,
    responses={201: {"model": PlanGenerationOut}},
)
def generate_plan(
    request: Request,
    response: Response,
    payload: GeneratePlanRequest | None = None,
    user_id: UUID = Depends(get_current_user_id),
) -> PlanGenerationOut:
    """Return the fresh weekly plan or generate a new one."""
    container = get_container(request)
    force_recompute = payload.force_recompute if payload else False
    result = container.plan_service.generate_plan(
        user_id, force_recompute=force_recompute
    )
    response.status_code = (
        status.HTTP_201_CREATED if result.created else status.HTTP_200_OK
    )
    return PlanGenerationOut.model_validate(result)
