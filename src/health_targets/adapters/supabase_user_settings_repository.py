"""Supabase repository for user settings."""

from dataclasses import dataclass
from datetime import UTC, date, datetime
from enum import Enum
from uuid import UUID

from supabase import Client

from health_targets.domain.models import UserSettingsRecord
from health_targets.domain.science import ActivityLevel, PrimaryGoal, Sex
from health_targets.services.user_settings import UserSettingsRepository

SETTINGS_COLUMNS = (
    "user_id, date_of_birth, sex, height_cm, current_weight_kg, target_weight_kg, "
    "activity_level, primary_goal, target_date, dietary_preferences, allergies, "
    "meals_per_day, onboarding_completed, bmr, tdee, calorie_target, "
    "protein_target, water_target"
)


def _optional_date(raw: object) -> date | None:
    if isinstance(raw, str) and raw:
        return date.fromisoformat(raw[:10])
    return None


def _optional_float(raw: object) -> float | None:
    return float(raw) if raw is not None else None


def _optional_int(raw: object) -> int | None:
    return int(raw) if raw is not None else None


def settings_from_row(row: dict[str, object]) -> UserSettingsRecord:
    """Map a user_settings row to a domain record."""
    sex = row.get("sex")
    activity_level = row.get("activity_level")
    primary_goal = row.get("primary_goal")
    return UserSettingsRecord(
        user_id=UUID(str(row["user_id"])),
        date_of_birth=_optional_date(row.get("date_of_birth")),
        sex=Sex(sex) if sex else None,
        height_cm=_optional_float(row.get("height_cm")),
        current_weight_kg=_optional_float(row.get("current_weight_kg")),
        target_weight_kg=_optional_float(row.get("target_weight_kg")),
        activity_level=ActivityLevel(activity_level) if activity_level else None,
        primary_goal=PrimaryGoal(primary_goal) if primary_goal else None,
        target_date=_optional_date(row.get("target_date")),
        dietary_preferences=tuple(row.get("dietary_preferences") or ()),
        allergies=tuple(row.get("allergies") or ()),
        meals_per_day=_optional_int(row.get("meals_per_day")),
        onboarding_completed=bool(row.get("onboarding_completed")),
        bmr=_optional_int(row.get("bmr")),
        tdee=_optional_int(row.get("tdee")),
        calorie_target=_optional_int(row.get("calorie_target")),
        protein_target=_optional_int(row.get("protein_target")),
        water_target=_optional_int(row.get("water_target")),
    )


def serialize_value(value: object) -> object:
    """Convert a domain value to its JSON column representation."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, tuple):
        return list(value)
    return value


@dataclass
class SupabaseUserSettingsRepository(UserSettingsRepository):
    """Supabase implementation for user settings."""

    client: Client

    def get_settings(self, user_id: UUID) -> UserSettingsRecord | None:
        """Return the settings row for a user."""
        response = (
            self.client.table("user_settings")
            .select(SETTINGS_COLUMNS)
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return settings_from_row(response.data[0])

    def update_profile(
        self, user_id: UUID, values: dict[str, object]
    ) -> UserSettingsRecord:
        """Update profile columns and return the stored row."""
        payload = {key: serialize_value(value) for key, value in values.items()}
        payload["updated_at"] = datetime.now(tz=UTC).isoformat()
        response = (
            self.client.table("user_settings")
            .update(payload)
            .eq("user_id", str(user_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update user settings")
        return settings_from_row(response.data[0])

    def list_onboarded_user_ids(self) -> list[UUID]:
        """Return ids of users that completed onboarding."""
        response = (
            self.client.table("user_settings")
            .select("user_id")
            .eq("onboarding_completed", True)
            .execute()
        )
        return [UUID(row["user_id"]) for row in response.data or []]
