"""Profile editing with targets recompute and audit trail."""

import json
import logging
from dataclasses import dataclass, fields, replace
from datetime import date
from uuid import UUID

from health_targets.domain.errors import (
    HealthTargetsError,
    NotFoundError,
    UnexpectedError,
)
from health_targets.domain.models import (
    AuditMetadata,
    ProfileChange,
    ProfileUpdate,
    ProfileUpdateResult,
    RecomputeResult,
    RequestContext,
    UserSettingsRecord,
)
from health_targets.services.audit import ProfileAuditService
from health_targets.services.plans import PlanService
from health_targets.services.user_settings import UserSettingsRepository

_logger = logging.getLogger(__name__)

IMPACTFUL_FIELDS = frozenset(
    {
        "current_weight_kg",
        "target_weight_kg",
        "height_cm",
        "primary_goal",
        "activity_level",
        "date_of_birth",
        "sex",
        "target_date",
    }
)


def stringify_value(value: object) -> str | None:
    """Render a profile value the way it is stored in the audit trail."""
    if value is None:
        return None
    if isinstance(value, tuple | list):
        return json.dumps(list(value))
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def diff_profile(
    settings: UserSettingsRecord, update: ProfileUpdate
) -> tuple[list[ProfileChange], dict[str, object]]:
    """Return the changed fields and the values to persist."""
    changes: list[ProfileChange] = []
    values: dict[str, object] = {}
    for item in fields(update):
        new_value = getattr(update, item.name)
        if new_value is None:
            continue
        old_value = getattr(settings, item.name)
        if old_value == new_value:
            continue
        values[item.name] = new_value
        changes.append(
            ProfileChange(
                field_name=item.name,
                old_value=stringify_value(old_value),
                new_value=stringify_value(new_value),
            )
        )
    return changes, values


@dataclass
class ProfileService:
    """Reads and edits a user's health profile."""

    settings_repository: UserSettingsRepository
    plan_service: PlanService
    audit_service: ProfileAuditService

    def get_profile(self, user_id: UUID) -> UserSettingsRecord:
        settings = self.settings_repository.get_settings(user_id)
        if settings is None:
            raise NotFoundError("User settings not found")
        return settings

    def update_profile(
        self,
        user_id: UUID,
        update: ProfileUpdate,
        context: RequestContext | None = None,
    ) -> ProfileUpdateResult:
        """Persist changed fields, recompute targets and audit the edit."""
        try:
            settings = self.get_profile(user_id)
            changes, values = diff_profile(settings, update)
            if not changes:
                return ProfileUpdateResult(settings=settings, plan_updated=False)
            updated = self.settings_repository.update_profile(user_id, values)

            recompute: RecomputeResult | None = None
            if IMPACTFUL_FIELDS.intersection(values):
                recompute = self.plan_service.recompute_for_user(user_id)
                if recompute.updated:
                    updated = self.settings_repository.get_settings(user_id) or updated
            plan_updated = recompute is not None and recompute.updated

            request = context or RequestContext()
            metadata = AuditMetadata(
                ip_address=request.ip_address,
                user_agent=request.user_agent,
                triggered_plan_regeneration=plan_updated,
            )
            if plan_updated and recompute is not None:
                metadata = replace(
                    metadata,
                    calories_before=recompute.previous_calories,
                    calories_after=recompute.new_calories,
                    protein_before=recompute.previous_protein,
                    protein_after=recompute.new_protein,
                )
            self.audit_service.log_changes(user_id, changes, metadata)
            _logger.info(
                "Profile updated: user_id=%s fields=%s plan_updated=%s",
                user_id,
                len(changes),
                plan_updated,
            )
            return ProfileUpdateResult(
                settings=updated,
                plan_updated=plan_updated,
                changes=changes,
                recompute=recompute,
            )
        except HealthTargetsError:
            raise
        except Exception as exc:
            _logger.exception("Failed to update profile: user_id=%s", user_id)
            raise UnexpectedError(
                "Failed to update profile. Please try again."
            ) from exc
