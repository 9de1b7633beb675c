"""직원 서비스 — 직원 CRUD 및 매장/서비스 배정 비즈니스 로직.

Staff Service — Business logic for staff members.
Handles creation with location/service assignment, email uniqueness within a
business, soft delete, status changes, and response building.
"""

import logging
from datetime import datetime, timezone
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.staff import StaffLocation, StaffMember, StaffServiceAssignment
from app.repositories.role_repository import role_repository
from app.repositories.staff_repository import staff_repository
from app.schemas.common import PaginatedResponse
from app.schemas.staff import (
    StaffLocationAssign,
    StaffLocationResponse,
    StaffMemberCreate,
    StaffMemberResponse,
    StaffMemberUpdate,
    StaffServiceResponse,
)
from app.utils.exceptions import BadRequestError, DuplicateError, NotFoundError

logger = logging.getLogger(__name__)


class StaffService:
    """직원 서비스.

    Staff service handling CRUD, soft delete, and location/service
    assignments. Methods flush only; the router commits.
    """

    @staticmethod
    def location_response(assignment: StaffLocation, role_name: str | None) -> StaffLocationResponse:
        return StaffLocationResponse(
            id=str(assignment.id),
            location_id=str(assignment.location_id),
            role_id=str(assignment.role_id) if assignment.role_id else None,
            role_name=role_name,
            is_primary=assignment.is_primary,
            assigned_at=assignment.assigned_at,
        )

    @staticmethod
    def service_response(assignment: StaffServiceAssignment) -> StaffServiceResponse:
        return StaffServiceResponse(
            id=str(assignment.id),
            service_id=str(assignment.service_id),
            assigned_at=assignment.assigned_at,
        )

    async def build_response(self, db: AsyncSession, staff: StaffMember) -> StaffMemberResponse:
        """직원 응답을 구성합니다 — 매장 배정과 역할 이름을 조회.

        Build the response, loading location assignments (with role names)
        and service ids with explicit queries.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            staff: 직원 ORM 인스턴스 (Staff member)

        Returns:
            StaffMemberResponse: 직원 응답 (Staff member response)
        """
        locations = await staff_repository.get_locations_with_roles(db, staff.id)
        services: Sequence[StaffServiceAssignment] = await staff_repository.get_services(db, staff.id)

        return StaffMemberResponse(
            id=str(staff.id),
            business_id=str(staff.business_id),
            user_id=str(staff.user_id) if staff.user_id else None,
            first_name=staff.first_name,
            last_name=staff.last_name,
            full_name=staff.full_name,
            email=staff.email,
            phone=staff.phone,
            job_title=staff.job_title,
            photo_url=staff.photo_url,
            permission_level=staff.permission_level,
            status=staff.status,
            is_bookable=staff.is_bookable,
            locations=[self.location_response(a, role_name) for a, role_name in locations],
            service_ids=[str(s.service_id) for s in services],
            created_at=staff.created_at,
            updated_at=staff.updated_at,
        )

    async def list_staff(
        self,
        db: AsyncSession,
        business_id: UUID,
        status: str | None = None,
        location_id: UUID | None = None,
        search: str | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> PaginatedResponse:
        items, total = await staff_repository.get_filtered(
            db, business_id, status=status, location_id=location_id,
            search=search, page=page, per_page=per_page,
        )
        return PaginatedResponse(
            items=[await self.build_response(db, s) for s in items],
            total=total,
            page=page,
            per_page=per_page,
        )

    async def get_staff(self, db: AsyncSession, staff_member_id: UUID, business_id: UUID) -> StaffMember:
        """직원을 조회합니다. 없거나 삭제되었으면 404.

        Raises:
            NotFoundError: 직원 없음 또는 소프트 삭제됨 (Missing or soft-deleted)
        """
        staff: StaffMember | None = await staff_repository.get_by_id(db, staff_member_id, business_id)
        if staff is None:
            raise NotFoundError("Staff member not found")
        return staff

    async def create_staff(self, db: AsyncSession, business_id: UUID, data: StaffMemberCreate) -> StaffMember:
        """직원을 생성합니다 — 첫 번째 매장이 주 매장.

        Create a staff member and its assignments. The first of
        ``location_ids`` becomes the primary location.

        Raises:
            DuplicateError: 사업장 내 이메일 중복 (Email already used in this business)
        """
        if await staff_repository.email_exists(db, business_id, data.email):
            raise DuplicateError("A staff member with this email already exists")

        staff: StaffMember = await staff_repository.create(db, {
            "business_id": business_id,
            "user_id": data.user_id,
            "first_name": data.first_name,
            "last_name": data.last_name,
            "email": data.email,
            "phone": data.phone,
            "job_title": data.job_title,
            "photo_url": data.photo_url,
            "permission_level": data.permission_level,
            "is_bookable": data.is_bookable,
        })

        # 중복 제거, 순서 유지 — Deduplicate while keeping order
        for index, location_id in enumerate(dict.fromkeys(data.location_ids)):
            db.add(StaffLocation(staff_member_id=staff.id, location_id=location_id, is_primary=index == 0))
        for service_id in dict.fromkeys(data.service_ids):
            db.add(StaffServiceAssignment(staff_member_id=staff.id, service_id=service_id))
        await db.flush()

        logger.info("Staff member created: %s (business %s)", staff.id, business_id)
        return staff

    async def update_staff(
        self,
        db: AsyncSession,
        staff_member_id: UUID,
        business_id: UUID,
        data: StaffMemberUpdate,
    ) -> StaffMember:
        staff: StaffMember = await self.get_staff(db, staff_member_id, business_id)
        update_data: dict = data.model_dump(exclude_unset=True)

        email: str | None = update_data.get("email")
        if email is not None and email.lower() != staff.email.lower():
            if await staff_repository.email_exists(db, business_id, email, exclude_id=staff.id):
                raise DuplicateError("A staff member with this email already exists")

        for field, value in update_data.items():
            if field in ("first_name", "last_name", "email", "permission_level", "is_bookable") and value is None:
                continue
            setattr(staff, field, value)

        await db.flush()
        await db.refresh(staff)
        return staff

    async def delete_staff(self, db: AsyncSession, staff_member_id: UUID, business_id: UUID) -> None:
        """직원을 소프트 삭제합니다.

        Soft delete: the row stays with is_deleted=True and deleted_at set,
        and disappears from every subsequent query.
        """
        staff: StaffMember = await self.get_staff(db, staff_member_id, business_id)
        staff.is_deleted = True
        staff.deleted_at = datetime.now(timezone.utc)
        await db.flush()
        logger.info("Staff member soft-deleted: %s", staff.id)

    async def change_status(
        self,
        db: AsyncSession,
        staff_member_id: UUID,
        business_id: UUID,
        status: str,
    ) -> StaffMember:
        staff: StaffMember = await self.get_staff(db, staff_member_id, business_id)
        if staff.status != status:
            logger.info("Staff member %s status %s -> %s", staff.id, staff.status, status)
            staff.status = status
            await db.flush()
            await db.refresh(staff)
        return staff

    # --- 매장 배정 — Location assignments ---

    async def list_locations(
        self,
        db: AsyncSession,
        staff_member_id: UUID,
        business_id: UUID,
    ) -> list[StaffLocationResponse]:
        staff: StaffMember = await self.get_staff(db, staff_member_id, business_id)
        rows = await staff_repository.get_locations_with_roles(db, staff.id)
        return [self.location_response(a, role_name) for a, role_name in rows]

    async def location_detail(self, db: AsyncSession, assignment: StaffLocation) -> StaffLocationResponse:
        """단일 배정 응답 — 역할 이름 조회 포함 (Single assignment with its role name)."""
        role_name: str | None = None
        if assignment.role_id is not None:
            role = await role_repository.get_by_id(db, assignment.role_id)
            role_name = role.name if role is not None else None
        return self.location_response(assignment, role_name)

    async def _clear_primary(self, db: AsyncSession, staff_member_id: UUID) -> None:
        for existing in await staff_repository.get_locations(db, staff_member_id):
            existing.is_primary = False

    async def assign_location(
        self,
        db: AsyncSession,
        staff_member_id: UUID,
        business_id: UUID,
        data: StaffLocationAssign,
    ) -> StaffLocationResponse:
        """직원을 매장에 배정합니다.

        Assign the staff member to a location, optionally with a role. The
        first assignment, or one flagged ``is_primary``, becomes primary.

        Raises:
            DuplicateError: 이미 배정된 매장 (Already assigned to this location)
            NotFoundError: 역할 없음 (Role not found in this business)
        """
        staff: StaffMember = await self.get_staff(db, staff_member_id, business_id)
        if await staff_repository.get_location(db, staff.id, data.location_id) is not None:
            raise DuplicateError("Staff member is already assigned to this location")
        if data.role_id is not None and await role_repository.get_by_id(db, data.role_id, business_id) is None:
            raise NotFoundError("Role not found")

        is_first: bool = not await staff_repository.get_locations(db, staff.id)
        is_primary: bool = is_first or data.is_primary
        if is_primary and not is_first:
            await self._clear_primary(db, staff.id)

        assignment = StaffLocation(
            staff_member_id=staff.id,
            location_id=data.location_id,
            role_id=data.role_id,
            is_primary=is_primary,
        )
        db.add(assignment)
        await db.flush()
        await db.refresh(assignment)
        return await self.location_detail(db, assignment)

    async def remove_location(
        self,
        db: AsyncSession,
        staff_member_id: UUID,
        business_id: UUID,
        location_id: UUID,
    ) -> None:
        """매장 배정을 해제합니다 — 주 매장이었다면 가장 오래된 배정이 승계.

        Remove a location assignment. When the primary location is removed,
        the oldest remaining assignment becomes primary.
        """
        staff: StaffMember = await self.get_staff(db, staff_member_id, business_id)
        assignment: StaffLocation | None = await staff_repository.get_location(db, staff.id, location_id)
        if assignment is None:
            raise NotFoundError("Staff member is not assigned to this location")

        was_primary: bool = assignment.is_primary
        await db.delete(assignment)
        await db.flush()

        if was_primary:
            remaining: Sequence[StaffLocation] = await staff_repository.get_locations(db, staff.id)
            if remaining:
                oldest: StaffLocation = min(remaining, key=lambda a: a.assigned_at)
                oldest.is_primary = True
                await db.flush()

    async def set_primary_location(
        self,
        db: AsyncSession,
        staff_member_id: UUID,
        business_id: UUID,
        location_id: UUID,
    ) -> StaffLocationResponse:
        staff: StaffMember = await self.get_staff(db, staff_member_id, business_id)
        assignment: StaffLocation | None = await staff_repository.get_location(db, staff.id, location_id)
        if assignment is None:
            raise NotFoundError("Staff member is not assigned to this location")

        await self._clear_primary(db, staff.id)
        assignment.is_primary = True
        await db.flush()
        await db.refresh(assignment)
        return await self.location_detail(db, assignment)

    # --- 서비스 배정 — Service assignments ---

    async def list_services(
        self,
        db: AsyncSession,
        staff_member_id: UUID,
        business_id: UUID,
    ) -> list[StaffServiceResponse]:
        staff: StaffMember = await self.get_staff(db, staff_member_id, business_id)
        return [self.service_response(s) for s in await staff_repository.get_services(db, staff.id)]

    async def assign_service(
        self,
        db: AsyncSession,
        staff_member_id: UUID,
        business_id: UUID,
        service_id: UUID,
    ) -> StaffServiceResponse:
        staff: StaffMember = await self.get_staff(db, staff_member_id, business_id)
        if await staff_repository.get_service(db, staff.id, service_id) is not None:
            raise DuplicateError("Service is already assigned to this staff member")

        assignment = StaffServiceAssignment(staff_member_id=staff.id, service_id=service_id)
        db.add(assignment)
        await db.flush()
        await db.refresh(assignment)
        return self.service_response(assignment)

    async def remove_service(
        self,
        db: AsyncSession,
        staff_member_id: UUID,
        business_id: UUID,
        service_id: UUID,
    ) -> None:
        staff: StaffMember = await self.get_staff(db, staff_member_id, business_id)
        assignment: StaffServiceAssignment | None = await staff_repository.get_service(db, staff.id, service_id)
        if assignment is None:
            raise NotFoundError("Service is not assigned to this staff member")
        await db.delete(assignment)
        await db.flush()

    async def ensure_in_business(self, db: AsyncSession, staff_member_id: UUID, business_id: UUID) -> StaffMember:
        """다른 서비스에서 쓰는 소속 검증 (Membership check used by scheduling/time-off).

        Raises:
            BadRequestError: 사업장 소속이 아닌 직원 (Staff member not in this business)
        """
        staff: StaffMember | None = await staff_repository.get_by_id(db, staff_member_id, business_id)
        if staff is None:
            raise BadRequestError("Staff member does not belong to this business")
        return staff


# 싱글턴 인스턴스 — Singleton instance
staff_service: StaffService = StaffService()
