"""Supabase repository for metrics snapshots and acknowledgments."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from health_targets.domain.models import MetricsAcknowledgment, MetricsSnapshot
from health_targets.domain.timestamps import parse_stored_instant
from health_targets.services.metrics import MetricsRepository

_SNAPSHOT_COLUMNS = "id, user_id, bmi, bmr, tdee, version, computed_at"
_ACKNOWLEDGMENT_COLUMNS = "user_id, version, metrics_computed_at, acknowledged_at"


def _snapshot_from_row(row: dict[str, object]) -> MetricsSnapshot:
    return MetricsSnapshot(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        bmi=float(row["bmi"]),
        bmr=int(row["bmr"]),
        tdee=int(row["tdee"]),
        version=int(row["version"]),
        computed_at=parse_stored_instant(str(row["computed_at"])),
    )


def _acknowledgment_from_row(row: dict[str, object]) -> MetricsAcknowledgment:
    return MetricsAcknowledgment(
        user_id=UUID(str(row["user_id"])),
        version=int(row["version"]),
        metrics_computed_at=parse_stored_instant(str(row["metrics_computed_at"])),
        acknowledged_at=parse_stored_instant(str(row["acknowledged_at"])),
    )


@dataclass
class SupabaseMetricsRepository(MetricsRepository):
    """Supabase implementation for profile metrics."""

    client: Client

    def get_latest_snapshot(self, user_id: UUID) -> MetricsSnapshot | None:
        """Return the highest snapshot version for a user."""
        response = (
            self.client.table("profile_metrics")
            .select(_SNAPSHOT_COLUMNS)
            .eq("user_id", str(user_id))
            .order("version", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _snapshot_from_row(response.data[0])

    def get_snapshot(self, user_id: UUID, version: int) -> MetricsSnapshot | None:
        """Return a specific snapshot version."""
        response = (
            self.client.table("profile_metrics")
            .select(_SNAPSHOT_COLUMNS)
            .eq("user_id", str(user_id))
            .eq("version", version)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _snapshot_from_row(response.data[0])

    def create_snapshot(  # noqa: PLR0913
        self,
        user_id: UUID,
        bmi: float,
        bmr: int,
        tdee: int,
        version: int,
        computed_at: datetime,
    ) -> MetricsSnapshot:
        """Insert a snapshot row."""
        response = (
            self.client.table("profile_metrics")
            .insert(
                {
                    "user_id": str(user_id),
                    "bmi": bmi,
                    "bmr": bmr,
                    "tdee": tdee,
                    "version": version,
                    "computed_at": computed_at.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create metrics snapshot")
        return _snapshot_from_row(response.data[0])

    def get_acknowledgment(
        self, user_id: UUID, version: int
    ) -> MetricsAcknowledgment | None:
        """Return the acknowledgment of a snapshot version."""
        response = (
            self.client.table("metrics_acknowledgements")
            .select(_ACKNOWLEDGMENT_COLUMNS)
            .eq("user_id", str(user_id))
            .eq("version", version)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _acknowledgment_from_row(response.data[0])

    def create_acknowledgment(
        self,
        user_id: UUID,
        version: int,
        metrics_computed_at: datetime,
        acknowledged_at: datetime,
    ) -> MetricsAcknowledgment:
        """Insert an acknowledgment; a concurrent duplicate keeps the first row."""
        self.client.table("metrics_acknowledgements").upsert(
            {
                "user_id": str(user_id),
                "version": version,
                "metrics_computed_at": metrics_computed_at.isoformat(),
                "acknowledged_at": acknowledged_at.isoformat(),
            },
            on_conflict="user_id,version",
            ignore_duplicates=True,
        ).execute()
        stored = self.get_acknowledgment(user_id, version)
        if stored is None:
            raise RuntimeError("Failed to create metrics acknowledgment")
        return stored
