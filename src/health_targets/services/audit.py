"""Profile change audit service."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from health_targets.domain.models import (
    AuditMetadata,
    ProfileChange,
    ProfileChangeRecord,
)

_logger = logging.getLogger(__name__)


class AuditRepository(Protocol):
    """Persistence interface for profile change audit rows."""

    def create_changes(
        self, user_id: UUID, changes: list[ProfileChange], metadata: AuditMetadata
    ) -> None:
        """Insert one audit row per changed field."""

    def list_changes(
        self, user_id: UUID, limit: int, field_name: str | None = None
    ) -> list[ProfileChangeRecord]:
        """Return audit rows, newest first."""


@dataclass
class ProfileAuditService:
    """Best-effort recording of profile edits."""

    repository: AuditRepository

    def log_changes(
        self,
        user_id: UUID,
        changes: list[ProfileChange],
        metadata: AuditMetadata | None = None,
    ) -> None:
        """Persist audit rows; failures are logged and never raised."""
        if not changes:
            return
        resolved = metadata or AuditMetadata()
        try:
            self.repository.create_changes(user_id, changes, resolved)
            _logger.info(
                "Profile changes audited: user_id=%s fields=%s regenerated=%s",
                user_id,
                len(changes),
                resolved.triggered_plan_regeneration,
            )
        except Exception:
            _logger.exception("Failed to write profile audit: user_id=%s", user_id)

    def get_change_history(
        self, user_id: UUID, limit: int = 50
    ) -> list[ProfileChangeRecord]:
        """Return the most recent changes across all fields."""
        try:
            return self.repository.list_changes(user_id, limit)
        except Exception:
            _logger.exception("Failed to read profile audit: user_id=%s", user_id)
            return []

    def get_field_history(
        self, user_id: UUID, field_name: str, limit: int = 50
    ) -> list[ProfileChangeRecord]:
        """Return the most recent changes of a single field."""
        try:
            return self.repository.list_changes(user_id, limit, field_name=field_name)
        except Exception:
            _logger.exception(
                "Failed to read profile audit: user_id=%s field=%s", user_id, field_name
            )
            return []
