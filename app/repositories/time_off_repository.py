"""휴가 레포지토리 — 휴가 유형 및 요청 DB 쿼리.

Time-off Repository — Queries for time-off types and requests.
"""

from datetime import date
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.time_off import TimeOffRequest, TimeOffType
from app.repositories.base import BaseRepository


class TimeOffTypeRepository(BaseRepository[TimeOffType]):
    """휴가 유형 레포지토리 (Extends BaseRepository[TimeOffType])."""

    def __init__(self) -> None:
        super().__init__(TimeOffType)

    async def get_by_business(
        self,
        db: AsyncSession,
        business_id: UUID,
        active_only: bool = False,
    ) -> list[TimeOffType]:
        query: Select = select(TimeOffType).where(TimeOffType.business_id == business_id)
        if active_only:
            query = query.where(TimeOffType.is_active.is_(True))
        query = query.order_by(TimeOffType.is_default.desc(), TimeOffType.name)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def name_exists(
        self,
        db: AsyncSession,
        business_id: UUID,
        name: str,
        exclude_id: UUID | None = None,
    ) -> bool:
        """사업장 내 유형 이름 중복 여부, 대소문자 무시 (Case-insensitive)."""
        query: Select = (
            select(func.count())
            .select_from(TimeOffType)
            .where(TimeOffType.business_id == business_id, func.lower(TimeOffType.name) == name.lower())
        )
        if exclude_id is not None:
            query = query.where(TimeOffType.id != exclude_id)
        return ((await db.execute(query)).scalar() or 0) > 0


class TimeOffRequestRepository(BaseRepository[TimeOffRequest]):
    """휴가 요청 레포지토리 (Extends BaseRepository[TimeOffRequest])."""

    def __init__(self) -> None:
        super().__init__(TimeOffRequest)

    async def get_filtered(
        self,
        db: AsyncSession,
        business_id: UUID,
        staff_member_id: UUID | None = None,
        status: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[TimeOffRequest], int]:
        """필터 조건에 맞는 휴가 요청을 페이지네이션하여 조회합니다.

        Paginated requests; date filters select requests overlapping the range.
        Newest start date first.
        """
        query: Select = self._with_active_staff(select(TimeOffRequest)).where(
            TimeOffRequest.business_id == business_id
        )
        if staff_member_id is not None:
            query = query.where(TimeOffRequest.staff_member_id == staff_member_id)
        if status is not None:
            query = query.where(TimeOffRequest.status == status)
        if start_date is not None:
            query = query.where(TimeOffRequest.end_date >= start_date)
        if end_date is not None:
            query = query.where(TimeOffRequest.start_date <= end_date)

        query = query.order_by(TimeOffRequest.start_date.desc(), TimeOffRequest.created_at.desc())
        return await self.get_paginated(db, query, page, per_page)

    async def get_approved_overlapping(
        self,
        db: AsyncSession,
        business_id: UUID,
        staff_member_id: UUID,
        start_date: date,
        end_date: date,
    ) -> Sequence[TimeOffRequest]:
        """기간과 겹치는 승인된 요청 (Approved requests overlapping the range)."""
        result = await db.execute(
            self._with_active_staff(select(TimeOffRequest)).where(
                TimeOffRequest.business_id == business_id,
                TimeOffRequest.staff_member_id == staff_member_id,
                TimeOffRequest.status == "Approved",
                TimeOffRequest.start_date <= end_date,
                TimeOffRequest.end_date >= start_date,
            )
        )
        return result.scalars().all()

    async def count_pending(
        self,
        db: AsyncSession,
        business_id: UUID,
    ) -> int:
        """승인 대기 중인 요청 수 (Pending request count for approver badges)."""
        query: Select = self._with_active_staff(select(func.count()).select_from(TimeOffRequest))
        result = await db.execute(
            query.where(TimeOffRequest.business_id == business_id, TimeOffRequest.status == "Pending")
        )
        return result.scalar() or 0

    async def type_in_use(self, db: AsyncSession, time_off_type_id: UUID) -> bool:
        """승인된 요청이 유형을 사용 중인지 (Any approved request uses the type)."""
        result = await db.execute(
            select(func.count())
            .select_from(TimeOffRequest)
            .where(TimeOffRequest.time_off_type_id == time_off_type_id, TimeOffRequest.status == "Approved")
        )
        return (result.scalar() or 0) > 0

    async def any_for_type(self, db: AsyncSession, time_off_type_id: UUID) -> bool:
        result = await db.execute(
            select(func.count())
            .select_from(TimeOffRequest)
            .where(TimeOffRequest.time_off_type_id == time_off_type_id)
        )
        return (result.scalar() or 0) > 0


# 싱글턴 인스턴스 — Singleton instances
time_off_type_repository: TimeOffTypeRepository = TimeOffTypeRepository()
time_off_request_repository: TimeOffRequestRepository = TimeOffRequestRepository()
