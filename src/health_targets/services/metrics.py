"""Versioned metrics snapshots and the acknowledgment gate."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from health_targets.domain.errors import (
    DomainError,
    HealthTargetsError,
    NotFoundError,
    UnexpectedError,
)
from health_targets.domain.models import (
    MetricsAcknowledgment,
    MetricsSnapshot,
    TodayMetrics,
)
from health_targets.domain.timestamps import same_instant_to_second, to_utc
from health_targets.services.science import (
    calculate_bmi,
    calculate_bmr,
    calculate_tdee,
    explain_metrics,
    inputs_from_settings,
)
from health_targets.services.timing import log_if_slow, start_timer
from health_targets.services.user_settings import UserSettingsRepository

_logger = logging.getLogger(__name__)


class MetricsRepository(Protocol):
    """Persistence interface for metrics snapshots and acknowledgments."""

    def get_latest_snapshot(self, user_id: UUID) -> MetricsSnapshot | None:
        """Return the snapshot with the highest version."""

    def get_snapshot(self, user_id: UUID, version: int) -> MetricsSnapshot | None:
        """Return the snapshot with the given version."""

    def create_snapshot(  # noqa: PLR0913
        self,
        user_id: UUID,
        bmi: float,
        bmr: int,
        tdee: int,
        version: int,
        computed_at: datetime,
    ) -> MetricsSnapshot:
        """Insert a new snapshot version."""

    def get_acknowledgment(
        self, user_id: UUID, version: int
    ) -> MetricsAcknowledgment | None:
        """Return the acknowledgment for a snapshot version."""

    def create_acknowledgment(
        self,
        user_id: UUID,
        version: int,
        metrics_computed_at: datetime,
        acknowledged_at: datetime,
    ) -> MetricsAcknowledgment:
        """Insert an acknowledgment, keeping an existing row on conflict."""


@dataclass
class MetricsService:
    """Computes metrics snapshots and tracks their acknowledgment."""

    settings_repository: UserSettingsRepository
    repository: MetricsRepository
    target_ms: int = 200

    def compute_and_store_metrics(
        self, user_id: UUID, force_recompute: bool = False
    ) -> MetricsSnapshot:
        """Store a new snapshot unless today's snapshot already exists."""
        started = start_timer()
        try:
            now = datetime.now(tz=UTC)
            latest = self.repository.get_latest_snapshot(user_id)
            if (
                latest is not None
                and not force_recompute
                and to_utc(latest.computed_at).date() == now.date()
            ):
                return latest
            settings = self.settings_repository.get_settings(user_id)
            if settings is None:
                raise NotFoundError("User settings not found")
            inputs = inputs_from_settings(settings, now.date())
            bmr = calculate_bmr(
                inputs.weight_kg, inputs.height_cm, inputs.age, inputs.sex
            )
            snapshot = self.repository.create_snapshot(
                user_id=user_id,
                bmi=calculate_bmi(inputs.weight_kg, inputs.height_cm),
                bmr=bmr,
                tdee=calculate_tdee(bmr, inputs.activity_level),
                version=latest.version + 1 if latest else 1,
                computed_at=now,
            )
            _logger.info(
                "Metrics snapshot stored: user_id=%s version=%s",
                user_id,
                snapshot.version,
            )
            return snapshot
        except HealthTargetsError:
            raise
        except Exception as exc:
            _logger.exception("Failed to compute metrics: user_id=%s", user_id)
            raise UnexpectedError(
                "Failed to compute health metrics. Please try again."
            ) from exc
        finally:
            log_if_slow(
                _logger, "compute_metrics", started, self.target_ms, user_id=user_id
            )

    def get_today_metrics(self, user_id: UUID) -> TodayMetrics:
        """Return today's snapshot, computing it on demand."""
        started = start_timer()
        try:
            snapshot = self.repository.get_latest_snapshot(user_id)
            today = datetime.now(tz=UTC).date()
            if snapshot is None or to_utc(snapshot.computed_at).date() != today:
                try:
                    snapshot = self.compute_and_store_metrics(user_id)
                except DomainError as exc:
                    _logger.info(
                        "Metrics unavailable: user_id=%s reason=%s",
                        user_id,
                        exc.message,
                    )
                    raise NotFoundError(
                        "No metrics available. Please complete your profile "
                        "to generate metrics."
                    ) from exc
            acknowledgment = self._matching_acknowledgment(snapshot)
            return TodayMetrics(
                bmi=snapshot.bmi,
                bmr=snapshot.bmr,
                tdee=snapshot.tdee,
                computed_at=snapshot.computed_at,
                version=snapshot.version,
                explanations=explain_metrics(snapshot.bmi, snapshot.bmr, snapshot.tdee),
                acknowledged=acknowledgment is not None,
                acknowledgement=acknowledgment,
            )
        except HealthTargetsError:
            raise
        except Exception as exc:
            _logger.exception("Failed to load today's metrics: user_id=%s", user_id)
            raise UnexpectedError("Failed to load metrics. Please try again.") from exc
        finally:
            log_if_slow(
                _logger, "get_today_metrics", started, self.target_ms, user_id=user_id
            )

    def acknowledge_metrics(
        self, user_id: UUID, version: int, metrics_computed_at: datetime
    ) -> MetricsAcknowledgment:
        """Record that the user reviewed a specific snapshot."""
        started = start_timer()
        try:
            snapshot = self.repository.get_snapshot(user_id, version)
            if snapshot is None or not same_instant_to_second(
                snapshot.computed_at, metrics_computed_at
            ):
                _logger.info(
                    "Acknowledgment did not match a snapshot: user_id=%s version=%s",
                    user_id,
                    version,
                )
                raise NotFoundError("Metrics not found for the specified version")
            existing = self.repository.get_acknowledgment(user_id, version)
            if existing is not None:
                return existing
            acknowledgment = self.repository.create_acknowledgment(
                user_id=user_id,
                version=version,
                metrics_computed_at=snapshot.computed_at,
                acknowledged_at=datetime.now(tz=UTC),
            )
            _logger.info(
                "Metrics acknowledged: user_id=%s version=%s", user_id, version
            )
            return acknowledgment
        except HealthTargetsError:
            raise
        except Exception as exc:
            _logger.exception("Failed to acknowledge metrics: user_id=%s", user_id)
            raise UnexpectedError(
                "Failed to acknowledge metrics. Please try again."
            ) from exc
        finally:
            log_if_slow(
                _logger, "acknowledge_metrics", started, self.target_ms, user_id=user_id
            )

    def is_acknowledged(self, user_id: UUID) -> bool:
        """Return True when the current snapshot is acknowledged or none exists."""
        snapshot = self.repository.get_latest_snapshot(user_id)
        if snapshot is None:
            return True
        return self._matching_acknowledgment(snapshot) is not None

    def _matching_acknowledgment(
        self, snapshot: MetricsSnapshot
    ) -> MetricsAcknowledgment | None:
        acknowledgment = self.repository.get_acknowledgment(
            snapshot.user_id, snapshot.version
        )
        if acknowledgment is None:
            return None
        if not same_instant_to_second(
            acknowledgment.metrics_computed_at, snapshot.computed_at
        ):
            return None
        return acknowledgment
