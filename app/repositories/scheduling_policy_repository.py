"""충돌 정책 레포지토리 (Scheduling Policy Repository)."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.schedule import SchedulingPolicy
from app.repositories.base import BaseRepository


class SchedulingPolicyRepository(BaseRepository[SchedulingPolicy]):

    def __init__(self) -> None:
        super().__init__(SchedulingPolicy)

    async def get_by_business(self, db: AsyncSession, business_id: UUID) -> SchedulingPolicy | None:
        result = await db.execute(
            select(SchedulingPolicy).where(SchedulingPolicy.business_id == business_id)
        )
        return result.scalar_one_or_none()


scheduling_policy_repository: SchedulingPolicyRepository = SchedulingPolicyRepository()
