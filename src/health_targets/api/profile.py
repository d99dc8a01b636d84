"""Profile read and edit endpoints."""

from __future__ import annotations

from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request

from health_targets.api.deps import get_container, get_current_user_id
from health_targets.api.schemas import (
    ProfileChangeOut,
    ProfileOut,
    ProfileTargetsOut,
    ProfileUpdateOut,
    ProfileUpdateRequest,
)
from health_targets.domain.models import RequestContext

router = APIRouter(prefix="/v1/profile", tags=["profile"])


@router.get("", response_model=ProfileOut)
def get_profile(
    request: Request, user_id: UUID = Depends(get_current_user_id)
) -> ProfileOut:
    container = get_container(request)
    return ProfileOut.model_validate(container.profile_service.get_profile(user_id))


@router.put("", response_model=ProfileUpdateOut, response_model_exclude_none=True)
def update_profile(
    payload: ProfileUpdateRequest,
    request: Request,
    user_id: UUID = Depends(get_current_user_id),
) -> ProfileUpdateOut:
    """Apply a partial profile edit and recompute targets when needed."""
    container = get_container(request)
    context = RequestContext(
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    result = container.profile_service.update_profile(
        user_id, payload.to_domain(), context
    )
    targets = None
    if result.plan_updated and result.recompute is not None:
        targets = ProfileTargetsOut(
            calorie_target=result.settings.calorie_target,
            protein_target=result.settings.protein_target,
            water_target=result.settings.water_target,
            previous_calories=result.recompute.previous_calories,
            previous_protein=result.recompute.previous_protein,
        )
    return ProfileUpdateOut(
        profile=ProfileOut.model_validate(result.settings),
        plan_updated=result.plan_updated,
        targets=targets,
        changes=[ProfileChangeOut.model_validate(change) for change in result.changes]
        or None,
    )
