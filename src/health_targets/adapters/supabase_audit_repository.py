"""Supabase repository for profile change audit rows."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from health_targets.domain.models import (
    AuditMetadata,
    ProfileChange,
    ProfileChangeRecord,
)
from health_targets.domain.timestamps import parse_stored_instant
from health_targets.services.audit import AuditRepository

_AUDIT_COLUMNS = (
    "id, user_id, field_name, old_value, new_value, changed_at, "
    "triggered_plan_regeneration, calories_before, calories_after, "
    "protein_before, protein_after"
)


def _optional_int(raw: object) -> int | None:
    return int(raw) if raw is not None else None


@dataclass
class SupabaseAuditRepository(AuditRepository):
    """Supabase implementation for the profile audit trail."""

    client: Client

    def create_changes(
        self, user_id: UUID, changes: list[ProfileChange], metadata: AuditMetadata
    ) -> None:
        """Insert one row per changed field."""
        payload = [
            {
                "user_id": str(user_id),
                "field_name": change.field_name,
                "old_value": change.old_value,
                "new_value": change.new_value,
                "ip_address": metadata.ip_address,
                "user_agent": metadata.user_agent,
                "triggered_plan_regeneration": metadata.triggered_plan_regeneration,
                "calories_before": metadata.calories_before,
                "calories_after": metadata.calories_after,
                "protein_before": metadata.protein_before,
                "protein_after": metadata.protein_after,
            }
            for change in changes
        ]
        if payload:
            self.client.table("profile_change_audit").insert(payload).execute()

    def list_changes(
        self, user_id: UUID, limit: int, field_name: str | None = None
    ) -> list[ProfileChangeRecord]:
        """Return audit rows for a user, newest first."""
        query = (
            self.client.table("profile_change_audit")
            .select(_AUDIT_COLUMNS)
            .eq("user_id", str(user_id))
        )
        if field_name is not None:
            query = query.eq("field_name", field_name)
        response = query.order("changed_at", desc=True).limit(limit).execute()
        return [
            ProfileChangeRecord(
                id=UUID(str(row["id"])),
                user_id=UUID(str(row["user_id"])),
                field_name=str(row["field_name"]),
                old_value=row.get("old_value"),
                new_value=row.get("new_value"),
                changed_at=parse_stored_instant(str(row["changed_at"])),
                triggered_plan_regeneration=bool(
                    row.get("triggered_plan_regeneration")
                ),
                calories_before=_optional_int(row.get("calories_before")),
                calories_after=_optional_int(row.get("calories_after")),
                protein_before=_optional_int(row.get("protein_before")),
                protein_after=_optional_int(row.get("protein_after")),
            )
            for row in response.data or []
        ]
