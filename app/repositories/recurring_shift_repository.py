"""반복 근무 패턴 레포지토리.

Recurring Shift Pattern Repository — Pattern listing and the range query
used before expansion.
"""

from datetime import date
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.schedule import RecurringShiftPattern
from app.repositories.base import BaseRepository


class RecurringShiftRepository(BaseRepository[RecurringShiftPattern]):
    """반복 근무 패턴 레포지토리 (Extends BaseRepository[RecurringShiftPattern])."""

    def __init__(self) -> None:
        super().__init__(RecurringShiftPattern)

    async def get_filtered(
        self,
        db: AsyncSession,
        business_id: UUID,
        staff_member_id: UUID | None = None,
        location_id: UUID | None = None,
        active_only: bool = False,
    ) -> Sequence[RecurringShiftPattern]:
        query: Select = self._with_active_staff(select(RecurringShiftPattern)).where(
            RecurringShiftPattern.business_id == business_id
        )
        if staff_member_id is not None:
            query = query.where(RecurringShiftPattern.staff_member_id == staff_member_id)
        if location_id is not None:
            query = query.where(RecurringShiftPattern.location_id == location_id)
        if active_only:
            query = query.where(RecurringShiftPattern.is_active.is_(True))
        query = query.order_by(RecurringShiftPattern.pattern_start, RecurringShiftPattern.start_time)
        result = await db.execute(query)
        return result.scalars().all()

    async def get_active_in_range(
        self,
        db: AsyncSession,
        business_id: UUID,
        start_date: date,
        end_date: date,
        staff_member_id: UUID | None = None,
        location_id: UUID | None = None,
    ) -> Sequence[RecurringShiftPattern]:
        """기간과 겹치는 활성 패턴을 조회합니다.

        Active patterns whose [pattern_start, pattern_end] intersects the range.
        """
        query: Select = self._with_active_staff(select(RecurringShiftPattern)).where(
            RecurringShiftPattern.business_id == business_id,
            RecurringShiftPattern.is_active.is_(True),
            RecurringShiftPattern.pattern_start <= end_date,
            or_(
                RecurringShiftPattern.pattern_end.is_(None),
                RecurringShiftPattern.pattern_end >= start_date,
            ),
        )
        if staff_member_id is not None:
            query = query.where(RecurringShiftPattern.staff_member_id == staff_member_id)
        if location_id is not None:
            query = query.where(RecurringShiftPattern.location_id == location_id)
        result = await db.execute(query)
        return result.scalars().all()


# 싱글턴 인스턴스 — Singleton instance
recurring_shift_repository: RecurringShiftRepository = RecurringShiftRepository()
