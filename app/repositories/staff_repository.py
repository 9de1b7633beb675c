"""직원 레포지토리 — 직원, 매장 배정, 서비스 배정 DB 쿼리 담당.

Staff Repository — Database queries for staff members and their location
and service assignments. Soft-deleted staff are filtered out by the session
hook unless ``include_deleted`` is requested.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.role import Role
from app.models.staff import StaffLocation, StaffMember, StaffServiceAssignment
from app.repositories.base import BaseRepository


class StaffRepository(BaseRepository[StaffMember]):
    """직원 레포지토리.

    Staff member repository with filtering, identity lookup and assignment
    helpers.

    Extends:
        BaseRepository[StaffMember]
    """

    def __init__(self) -> None:
        super().__init__(StaffMember)

    async def get_filtered(
        self,
        db: AsyncSession,
        business_id: UUID,
        status: str | None = None,
        location_id: UUID | None = None,
        search: str | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[StaffMember], int]:
        """필터 조건에 맞는 직원을 페이지네이션하여 조회합니다.

        Retrieve paginated staff members of a business.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            business_id: 사업장 UUID (Business UUID)
            status: 상태 필터 (Optional status filter)
            location_id: 매장 배정 필터 (Only staff assigned to this location)
            search: 이름/이메일 부분 검색 (Case-insensitive name/email search)
            page: 페이지 번호 (Page number, 1-based)
            per_page: 페이지당 항목 수 (Items per page)

        Returns:
            tuple[Sequence[StaffMember], int]: (직원 목록, 전체 개수)
        """
        # 소프트 삭제 제외, 카운트 서브쿼리 포함 (Deleted rows excluded from items and count)
        query: Select = select(StaffMember).where(
            StaffMember.business_id == business_id,
            StaffMember.is_deleted.is_(False),
        )

        if status is not None:
            query = query.where(StaffMember.status == status)
        if location_id is not None:
            query = query.where(
                StaffMember.id.in_(
                    select(StaffLocation.staff_member_id).where(StaffLocation.location_id == location_id)
                )
            )
        if search:
            pattern = f"%{search.lower()}%"
            query = query.where(or_(
                func.lower(StaffMember.first_name).like(pattern),
                func.lower(StaffMember.last_name).like(pattern),
                func.lower(StaffMember.email).like(pattern),
            ))

        query = query.order_by(StaffMember.last_name, StaffMember.first_name)
        return await self.get_paginated(db, query, page, per_page)

    async def get_by_user_id(
        self,
        db: AsyncSession,
        user_id: UUID,
        business_id: UUID,
    ) -> StaffMember | None:
        """인증 사용자 ID로 직원을 조회합니다 (Resolve the caller's staff record)."""
        result = await db.execute(
            select(StaffMember).where(
                StaffMember.user_id == user_id,
                StaffMember.business_id == business_id,
            )
        )
        return result.scalars().first()

    async def email_exists(
        self,
        db: AsyncSession,
        business_id: UUID,
        email: str,
        exclude_id: UUID | None = None,
    ) -> bool:
        """사업장 내 이메일 중복 여부 — 소프트 삭제 직원 포함.

        Whether the email is taken in the business, soft-deleted rows included
        because the unique constraint still covers them.
        """
        query: Select = (
            select(func.count())
            .select_from(StaffMember)
            .where(
                StaffMember.business_id == business_id,
                func.lower(StaffMember.email) == email.lower(),
            )
            .execution_options(include_deleted=True)
        )
        if exclude_id is not None:
            query = query.where(StaffMember.id != exclude_id)
        count: int = (await db.execute(query)).scalar() or 0
        return count > 0

    async def get_location(
        self,
        db: AsyncSession,
        staff_member_id: UUID,
        location_id: UUID,
    ) -> StaffLocation | None:
        """직원의 특정 매장 배정을 조회합니다 (Single assignment row)."""
        result = await db.execute(
            select(StaffLocation).where(
                StaffLocation.staff_member_id == staff_member_id,
                StaffLocation.location_id == location_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_primary_location(
        self,
        db: AsyncSession,
        staff_member_id: UUID,
    ) -> StaffLocation | None:
        """주 매장 배정을 조회합니다 (Primary location assignment, if any)."""
        result = await db.execute(
            select(StaffLocation).where(
                StaffLocation.staff_member_id == staff_member_id,
                StaffLocation.is_primary.is_(True),
            )
        )
        return result.scalars().first()

    async def get_locations(
        self,
        db: AsyncSession,
        staff_member_id: UUID,
    ) -> Sequence[StaffLocation]:
        result = await db.execute(
            select(StaffLocation)
            .where(StaffLocation.staff_member_id == staff_member_id)
            .order_by(StaffLocation.is_primary.desc(), StaffLocation.assigned_at)
        )
        return result.scalars().all()

    async def get_locations_with_roles(
        self,
        db: AsyncSession,
        staff_member_id: UUID,
    ) -> list[tuple[StaffLocation, str | None]]:
        """매장 배정과 역할 이름을 함께 조회합니다 (Assignments with their role name)."""
        result = await db.execute(
            select(StaffLocation, Role.name)
            .outerjoin(Role, Role.id == StaffLocation.role_id)
            .where(StaffLocation.staff_member_id == staff_member_id)
            .order_by(StaffLocation.is_primary.desc(), StaffLocation.assigned_at)
        )
        return [(row[0], row[1]) for row in result.all()]

    async def get_services(
        self,
        db: AsyncSession,
        staff_member_id: UUID,
    ) -> Sequence[StaffServiceAssignment]:
        result = await db.execute(
            select(StaffServiceAssignment)
            .where(StaffServiceAssignment.staff_member_id == staff_member_id)
            .order_by(StaffServiceAssignment.assigned_at)
        )
        return result.scalars().all()

    async def role_in_use(self, db: AsyncSession, role_id: UUID) -> bool:
        """역할이 매장 배정에 사용 중인지 확인합니다 (Any StaffLocation uses the role)."""
        count: int = (
            await db.execute(
                select(func.count()).select_from(StaffLocation).where(StaffLocation.role_id == role_id)
            )
        ).scalar() or 0
        return count > 0

    async def get_service(
        self,
        db: AsyncSession,
        staff_member_id: UUID,
        service_id: UUID,
    ) -> StaffServiceAssignment | None:
        result = await db.execute(
            select(StaffServiceAssignment).where(
                StaffServiceAssignment.staff_member_id == staff_member_id,
                StaffServiceAssignment.service_id == service_id,
            )
        )
        return result.scalar_one_or_none()


# 싱글턴 인스턴스 — Singleton instance
staff_repository: StaffRepository = StaffRepository()
