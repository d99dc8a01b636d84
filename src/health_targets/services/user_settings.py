"""User settings persistence port."""

from typing import Protocol
from uuid import UUID

from health_targets.domain.models import UserSettingsRecord


class UserSettingsRepository(Protocol):
    """Persistence interface for user settings."""

    def get_settings(self, user_id: UUID) -> UserSettingsRecord | None:
        """Return the user's settings row if present."""

    def update_profile(
        self, user_id: UUID, values: dict[str, object]
    ) -> UserSettingsRecord:
        """Persist changed profile fields and return the updated row."""

    def list_onboarded_user_ids(self) -> list[UUID]:
        """Return ids of every user that completed onboarding."""
