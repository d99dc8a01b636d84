"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from uuid import UUID, uuid4

import pytest
from jose import jwt

from health_targets.config import Settings
from health_targets.containers import AppContainer
from health_targets.domain.models import (
    AuditMetadata,
    GeneratedPlanWrite,
    InitialPlanSnapshot,
    MetricsAcknowledgment,
    MetricsSnapshot,
    PlanRecord,
    PlanStatus,
    ProfileChange,
    ProfileChangeRecord,
    RecomputedTargetsWrite,
    UserSettingsRecord,
)
from health_targets.domain.science import (
    ActivityLevel,
    ComputedTargets,
    PrimaryGoal,
    Sex,
)
from health_targets.services.audit import AuditRepository, ProfileAuditService
from health_targets.services.metrics import MetricsRepository, MetricsService
from health_targets.services.plans import PlanRepository, PlanService
from health_targets.services.profile import ProfileService
from health_targets.services.recompute_job import (
    DailyMetricsRecomputeJob,
    WeeklyRecomputeJob,
)
from health_targets.services.user_settings import UserSettingsRepository

JWT_SECRET = "test-jwt-secret"


def make_settings(user_id: UUID, **overrides: object) -> UserSettingsRecord:
    """Return an onboarded profile: 80 kg, 180 cm, 30 years, male."""
    today = datetime.now(tz=UTC).date()
    values: dict[str, object] = {
        "user_id": user_id,
        "date_of_birth": date(today.year - 30, 1, 1),
        "sex": Sex.MALE,
        "height_cm": 180.0,
        "current_weight_kg": 80.0,
        "target_weight_kg": 70.0,
        "activity_level": ActivityLevel.MODERATELY_ACTIVE,
        "primary_goal": PrimaryGoal.LOSE_WEIGHT,
        "dietary_preferences": ("vegetarian",),
        "meals_per_day": 3,
        "onboarding_completed": True,
    }
    values.update(overrides)
    return UserSettingsRecord(**values)


@dataclass
class InMemoryUserSettingsRepository(UserSettingsRepository):
    """In-memory user settings repository for tests."""

    rows: dict[UUID, UserSettingsRecord] = field(default_factory=dict)
    updates: list[dict[str, object]] = field(default_factory=list)
    fail_on_update: bool = False

    def add(self, record: UserSettingsRecord) -> UserSettingsRecord:
        self.rows[record.user_id] = record
        return record

    def get_settings(self, user_id: UUID) -> UserSettingsRecord | None:
        return self.rows.get(user_id)

    def update_profile(
        self, user_id: UUID, values: dict[str, object]
    ) -> UserSettingsRecord:
        if self.fail_on_update:
            raise RuntimeError("settings update failed")
        self.updates.append(values)
        updated = replace(self.rows[user_id], **values)
        self.rows[user_id] = updated
        return updated

    def list_onboarded_user_ids(self) -> list[UUID]:
        return [
            user_id
            for user_id, record in self.rows.items()
            if record.onboarding_completed
        ]


@dataclass
class InMemoryMetricsRepository(MetricsRepository):
    """In-memory metrics repository for tests."""

    snapshots: list[MetricsSnapshot] = field(default_factory=list)
    acknowledgments: dict[tuple[UUID, int], MetricsAcknowledgment] = field(
        default_factory=dict
    )

    def add_snapshot(
        self,
        user_id: UUID,
        version: int = 1,
        computed_at: datetime | None = None,
    ) -> MetricsSnapshot:
        snapshot = MetricsSnapshot(
            id=uuid4(),
            user_id=user_id,
            bmi=24.69,
            bmr=1780,
            tdee=2759,
            version=version,
            computed_at=computed_at or datetime.now(tz=UTC),
        )
        self.snapshots.append(snapshot)
        return snapshot

    def get_latest_snapshot(self, user_id: UUID) -> MetricsSnapshot | None:
        owned = [item for item in self.snapshots if item.user_id == user_id]
        if not owned:
            return None
        return max(owned, key=lambda item: item.version)

    def get_snapshot(self, user_id: UUID, version: int) -> MetricsSnapshot | None:
        for item in self.snapshots:
            if item.user_id == user_id and item.version == version:
                return item
        return None

    def create_snapshot(  # noqa: PLR0913
        self,
        user_id: UUID,
        bmi: float,
        bmr: int,
        tdee: int,
        version: int,
        computed_at: datetime,
    ) -> MetricsSnapshot:
        snapshot = MetricsSnapshot(
            id=uuid4(),
            user_id=user_id,
            bmi=bmi,
            bmr=bmr,
            tdee=tdee,
            version=version,
            computed_at=computed_at,
        )
        self.snapshots.append(snapshot)
        return snapshot

    def get_acknowledgment(
        self, user_id: UUID, version: int
    ) -> MetricsAcknowledgment | None:
        return self.acknowledgments.get((user_id, version))

    def create_acknowledgment(
        self,
        user_id: UUID,
        version: int,
        metrics_computed_at: datetime,
        acknowledged_at: datetime,
    ) -> MetricsAcknowledgment:
        key = (user_id, version)
        if key not in self.acknowledgments:
            self.acknowledgments[key] = MetricsAcknowledgment(
                user_id=user_id,
                version=version,
                metrics_computed_at=metrics_computed_at,
                acknowledged_at=acknowledged_at,
            )
        return self.acknowledgments[key]


@dataclass
class InMemoryPlanRepository(PlanRepository):
    """In-memory plan repository sharing state with the settings repository."""

    settings_repository: InMemoryUserSettingsRepository
    plans: list[PlanRecord] = field(default_factory=list)
    snapshots: dict[UUID, InitialPlanSnapshot] = field(default_factory=dict)
    recompute_writes: list[RecomputedTargetsWrite] = field(default_factory=list)
    fail_on_write: bool = False

    def add_plan(
        self,
        user_id: UUID,
        start_date: datetime,
        created_at: datetime | None = None,
        name: str = "Weekly Plan",
    ) -> PlanRecord:
        plan = PlanRecord(
            id=uuid4(),
            user_id=user_id,
            name=name,
            description="Existing plan",
            plan_type="weekly",
            status=PlanStatus.ACTIVE,
            start_date=start_date,
            end_date=start_date,
            total_tasks=0,
            completed_tasks=0,
            completion_percentage=0.0,
            created_at=created_at or start_date,
        )
        self.plans.append(plan)
        return plan

    def get_recent_plan(self, user_id: UUID, since: datetime) -> PlanRecord | None:
        candidates = [
            plan
            for plan in self.plans
            if plan.user_id == user_id and plan.start_date >= since
        ]
        if not candidates:
            return None
        return max(candidates, key=lambda plan: plan.created_at)

    def save_generated_plan(self, write: GeneratedPlanWrite) -> PlanRecord:
        if self.fail_on_write:
            raise RuntimeError("database unavailable")
        self._apply_targets(write.user_id, write.targets)
        self.snapshots[write.user_id] = write.snapshot
        plan = PlanRecord(
            id=uuid4(),
            user_id=write.user_id,
            name=write.plan.name,
            description=write.plan.description,
            plan_type=write.plan.plan_type,
            status=write.plan.status,
            start_date=write.plan.start_date,
            end_date=write.plan.end_date,
            total_tasks=0,
            completed_tasks=0,
            completion_percentage=0.0,
            created_at=datetime.now(tz=UTC),
        )
        self.plans.append(plan)
        return plan

    def save_recomputed_targets(self, write: RecomputedTargetsWrite) -> None:
        if self.fail_on_write:
            raise RuntimeError("database unavailable")
        self.recompute_writes.append(write)
        self._apply_targets(write.user_id, write.targets)
        snapshot = self.snapshots.get(write.user_id)
        if snapshot is not None:
            self.snapshots[write.user_id] = replace(
                snapshot,
                calorie_target=write.targets.calorie_target,
                protein_target=write.targets.protein_target,
                water_target=write.targets.water_target,
                weekly_rate=write.targets.weekly_rate,
                estimated_weeks=write.targets.estimated_weeks,
                projected_completion_date=write.targets.projected_date,
            )

    def _apply_targets(self, user_id: UUID, targets: ComputedTargets) -> None:
        rows = self.settings_repository.rows
        rows[user_id] = replace(
            rows[user_id],
            bmr=targets.bmr,
            tdee=targets.tdee,
            calorie_target=targets.calorie_target,
            protein_target=targets.protein_target,
            water_target=targets.water_target,
        )


@dataclass
class InMemoryAuditRepository(AuditRepository):
    """In-memory audit repository for tests."""

    rows: list[ProfileChangeRecord] = field(default_factory=list)
    metadata: list[AuditMetadata] = field(default_factory=list)
    fail: bool = False

    def create_changes(
        self, user_id: UUID, changes: list[ProfileChange], metadata: AuditMetadata
    ) -> None:
        if self.fail:
            raise RuntimeError("audit table unavailable")
        self.metadata.append(metadata)
        for change in changes:
            self.rows.append(
                ProfileChangeRecord(
                    id=uuid4(),
                    user_id=user_id,
                    field_name=change.field_name,
                    old_value=change.old_value,
                    new_value=change.new_value,
                    changed_at=datetime.now(tz=UTC),
                    triggered_plan_regeneration=metadata.triggered_plan_regeneration,
                    calories_before=metadata.calories_before,
                    calories_after=metadata.calories_after,
                    protein_before=metadata.protein_before,
                    protein_after=metadata.protein_after,
                )
            )

    def list_changes(
        self, user_id: UUID, limit: int, field_name: str | None = None
    ) -> list[ProfileChangeRecord]:
        if self.fail:
            raise RuntimeError("audit table unavailable")
        matching = [
            row
            for row in self.rows
            if row.user_id == user_id
            and (field_name is None or row.field_name == field_name)
        ]
        return list(reversed(matching))[:limit]


def auth_headers(user_id: UUID, secret: str = JWT_SECRET) -> dict[str, str]:
    token = jwt.encode({"sub": str(user_id)}, secret, algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        jwt_secret=JWT_SECRET,
        admin_token="admin-token",
    )


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def settings_repository() -> InMemoryUserSettingsRepository:
    return InMemoryUserSettingsRepository()


@pytest.fixture
def metrics_repository() -> InMemoryMetricsRepository:
    return InMemoryMetricsRepository()


@pytest.fixture
def plan_repository(
    settings_repository: InMemoryUserSettingsRepository,
) -> InMemoryPlanRepository:
    return InMemoryPlanRepository(settings_repository)


@pytest.fixture
def audit_repository() -> InMemoryAuditRepository:
    return InMemoryAuditRepository()


@pytest.fixture
def metrics_service(
    settings_repository: InMemoryUserSettingsRepository,
    metrics_repository: InMemoryMetricsRepository,
) -> MetricsService:
    return MetricsService(
        settings_repository=settings_repository, repository=metrics_repository
    )


@pytest.fixture
def plan_service(
    settings_repository: InMemoryUserSettingsRepository,
    plan_repository: InMemoryPlanRepository,
    metrics_service: MetricsService,
) -> PlanService:
    return PlanService(
        settings_repository=settings_repository,
        plan_repository=plan_repository,
        metrics_service=metrics_service,
    )


@pytest.fixture
def audit_service(audit_repository: InMemoryAuditRepository) -> ProfileAuditService:
    return ProfileAuditService(audit_repository)


@pytest.fixture
def profile_service(
    settings_repository: InMemoryUserSettingsRepository,
    plan_service: PlanService,
    audit_service: ProfileAuditService,
) -> ProfileService:
    return ProfileService(
        settings_repository=settings_repository,
        plan_service=plan_service,
        audit_service=audit_service,
    )


@pytest.fixture
def container(  # noqa: PLR0913
    settings: Settings,
    settings_repository: InMemoryUserSettingsRepository,
    metrics_service: MetricsService,
    plan_service: PlanService,
    profile_service: ProfileService,
    audit_service: ProfileAuditService,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        metrics_service=metrics_service,
        plan_service=plan_service,
        profile_service=profile_service,
        audit_service=audit_service,
        recompute_job=WeeklyRecomputeJob(
            settings_repository=settings_repository, plan_service=plan_service
        ),
        metrics_job=DailyMetricsRecomputeJob(
            settings_repository=settings_repository,
            metrics_service=metrics_service,
        ),
        close_resources=close_resources,
    )
