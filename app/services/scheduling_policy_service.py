"""충돌 정책 서비스 — 사업장별 초과근무/수용 인원 임계값.

Scheduling Policy Service — Per-business conflict thresholds with fallback
to application settings when the business has not stored a policy.
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.domain.conflicts import ConflictPolicy
from app.models.schedule import SchedulingPolicy
from app.repositories.scheduling_policy_repository import scheduling_policy_repository
from app.schemas.schedule import SchedulingPolicyResponse, SchedulingPolicyUpdate


class SchedulingPolicyService:

    @staticmethod
    def default_policy() -> ConflictPolicy:
        """환경 설정 기본값 (Application-wide defaults from settings)."""
        return ConflictPolicy(
            daily_overtime_hours=settings.SCHEDULE_DAILY_OVERTIME_HOURS,
            weekly_overtime_hours=settings.SCHEDULE_WEEKLY_OVERTIME_HOURS,
            location_capacity=settings.SCHEDULE_LOCATION_CAPACITY,
        )

    async def resolve_policy(self, db: AsyncSession, business_id: UUID) -> ConflictPolicy:
        """충돌 검사에 쓸 임계값을 결정합니다.

        Resolve the thresholds used by the conflict checker: the stored row
        when present, otherwise the settings defaults.
        """
        row: SchedulingPolicy | None = await scheduling_policy_repository.get_by_business(db, business_id)
        if row is None:
            return self.default_policy()
        return ConflictPolicy(
            daily_overtime_hours=row.daily_overtime_hours,
            weekly_overtime_hours=row.weekly_overtime_hours,
            location_capacity=row.location_capacity,
        )

    async def get_policy(self, db: AsyncSession, business_id: UUID) -> SchedulingPolicyResponse:
        row: SchedulingPolicy | None = await scheduling_policy_repository.get_by_business(db, business_id)
        policy: ConflictPolicy = await self.resolve_policy(db, business_id)
        return SchedulingPolicyResponse(
            business_id=str(business_id),
            daily_overtime_hours=policy.daily_overtime_hours,
            weekly_overtime_hours=policy.weekly_overtime_hours,
            location_capacity=policy.location_capacity,
            is_default=row is None,
        )

    async def upsert_policy(
        self,
        db: AsyncSession,
        business_id: UUID,
        data: SchedulingPolicyUpdate,
    ) -> SchedulingPolicyResponse:
        """정책을 생성하거나 전체 교체합니다 (Create or fully replace the policy)."""
        row: SchedulingPolicy | None = await scheduling_policy_repository.get_by_business(db, business_id)
        values: dict = data.model_dump()
        if row is None:
            await scheduling_policy_repository.create(db, {"business_id": business_id, **values})
        else:
            for field, value in values.items():
                setattr(row, field, value)
            await db.flush()
        return await self.get_policy(db, business_id)


# 싱글턴 인스턴스 — Singleton instance
scheduling_policy_service: SchedulingPolicyService = SchedulingPolicyService()
