"""Supabase repository for plans and transactional target writes."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from supabase import Client

from health_targets.domain.models import (
    GeneratedPlanWrite,
    PlanRecord,
    PlanStatus,
    RecomputedTargetsWrite,
)
from health_targets.domain.science import ComputedTargets
from health_targets.domain.timestamps import parse_stored_instant
from health_targets.services.plans import PlanRepository

_PLAN_COLUMNS = (
    "id, user_id, name, description, plan_type, status, start_date, end_date, "
    "total_tasks, completed_tasks, completion_percentage, created_at"
)


def plan_from_row(row: dict[str, object]) -> PlanRecord:
    """Map a plans row to a domain record."""
    return PlanRecord(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        name=str(row["name"]),
        description=str(row.get("description") or ""),
        plan_type=str(row["plan_type"]),
        status=PlanStatus(row["status"]),
        start_date=parse_stored_instant(str(row["start_date"])),
        end_date=parse_stored_instant(str(row["end_date"])),
        total_tasks=int(row.get("total_tasks") or 0),
        completed_tasks=int(row.get("completed_tasks") or 0),
        completion_percentage=float(row.get("completion_percentage") or 0),
        created_at=parse_stored_instant(str(row["created_at"])),
    )


def _iso_or_none(value: date | None) -> str | None:
    return value.isoformat() if value else None


def _targets_payload(targets: ComputedTargets) -> dict[str, object]:
    return {
        "bmr": targets.bmr,
        "tdee": targets.tdee,
        "calorie_target": targets.calorie_target,
        "protein_target": targets.protein_target,
        "water_target": targets.water_target,
        "weekly_rate": targets.weekly_rate,
        "estimated_weeks": targets.estimated_weeks,
        "projected_date": _iso_or_none(targets.projected_date),
    }


@dataclass
class SupabasePlanRepository(PlanRepository):
    """Supabase implementation for weekly plans."""

    client: Client

    def get_recent_plan(self, user_id: UUID, since: datetime) -> PlanRecord | None:
        """Return the newest plan that started inside the window."""
        response = (
            self.client.table("plans")
            .select(_PLAN_COLUMNS)
            .eq("user_id", str(user_id))
            .gte("start_date", since.isoformat())
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return plan_from_row(response.data[0])

    def save_generated_plan(self, write: GeneratedPlanWrite) -> PlanRecord:
        """Run the generate_weekly_plan database function."""
        snapshot = write.snapshot
        plan = write.plan
        response = self.client.rpc(
            "generate_weekly_plan",
            {
                "p_user_id": str(write.user_id),
                "p_targets": _targets_payload(write.targets),
                "p_snapshot": {
                    "start_weight_kg": snapshot.start_weight_kg,
                    "target_weight_kg": snapshot.target_weight_kg,
                    "start_date": snapshot.start_date.isoformat(),
                    "target_date": snapshot.target_date.isoformat(),
                    "weekly_rate": snapshot.weekly_rate,
                    "estimated_weeks": snapshot.estimated_weeks,
                    "projected_completion_date": _iso_or_none(
                        snapshot.projected_completion_date
                    ),
                    "calorie_target": snapshot.calorie_target,
                    "protein_target": snapshot.protein_target,
                    "water_target": snapshot.water_target,
                    "primary_goal": snapshot.primary_goal.value,
                    "activity_level": snapshot.activity_level.value,
                },
                "p_plan": {
                    "name": plan.name,
                    "description": plan.description,
                    "plan_type": plan.plan_type,
                    "status": plan.status.value,
                    "start_date": plan.start_date.isoformat(),
                    "end_date": plan.end_date.isoformat(),
                },
            },
        ).execute()
        if not response.data:
            raise RuntimeError("Failed to generate weekly plan")
        row = response.data[0] if isinstance(response.data, list) else response.data
        return plan_from_row(row)

    def save_recomputed_targets(self, write: RecomputedTargetsWrite) -> None:
        """Run the apply_recomputed_targets database function."""
        self.client.rpc(
            "apply_recomputed_targets",
            {
                "p_user_id": str(write.user_id),
                "p_targets": _targets_payload(write.targets),
            },
        ).execute()
