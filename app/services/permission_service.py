"""Permission 서비스 — 권한 평가기의 DB 연동.

Permission Service — Loads the evaluation input for a staff member at a
location and runs the permission evaluator. No caching: every call reads
the current assignment so role changes apply immediately.
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.permissions import AccessContext, PermissionEvaluator, permission_evaluator
from app.models.role import Role
from app.models.staff import StaffLocation, StaffMember
from app.repositories.role_repository import role_repository
from app.repositories.staff_repository import staff_repository


class PermissionService:

    def __init__(self, evaluator: PermissionEvaluator = permission_evaluator) -> None:
        self.evaluator: PermissionEvaluator = evaluator

    async def build_context(
        self,
        db: AsyncSession,
        staff: StaffMember,
        location_id: UUID | None,
    ) -> AccessContext:
        """직원과 매장으로 평가 입력을 구성합니다.

        Build the evaluation input. Without a location the staff member's
        primary location is used.
        """
        assignment: StaffLocation | None
        if location_id is None:
            assignment = await staff_repository.get_primary_location(db, staff.id)
        else:
            assignment = await staff_repository.get_location(db, staff.id, location_id)

        role: Role | None = None
        if assignment is not None and assignment.role_id is not None:
            role = await role_repository.get_by_id(db, assignment.role_id)

        return AccessContext(
            permission_level=staff.permission_level,
            location_assigned=assignment is not None,
            role_permissions=role.flags if role is not None else None,
        )

    async def check(
        self,
        db: AsyncSession,
        staff: StaffMember,
        permission: str,
        location_id: UUID | None = None,
    ) -> bool:
        """로드된 직원에 대한 권한 확인 (Permission check for a loaded staff member)."""
        context: AccessContext = await self.build_context(db, staff, location_id)
        return self.evaluator.evaluate(context, permission)

    async def has_permission(
        self,
        db: AsyncSession,
        staff_member_id: UUID,
        location_id: UUID | None,
        permission: str,
        business_id: UUID | None = None,
    ) -> bool:
        """직원 ID 기준 권한 확인 — 없거나 삭제된 직원은 거부.

        Check a permission by staff member id. Missing or soft-deleted staff
        members are denied.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            staff_member_id: 직원 UUID (Staff member UUID)
            location_id: 매장 UUID, None이면 주 매장 (Location; None means primary)
            permission: "Area.Action" 키 (Permission key)
            business_id: 사업장 범위 (Tenant scope)

        Returns:
            bool: 허용 여부 (Whether access is granted)
        """
        staff: StaffMember | None = await staff_repository.get_by_id(db, staff_member_id, business_id)
        if staff is None:
            return False
        return await self.check(db, staff, permission, location_id)


# 싱글턴 인스턴스 — Singleton instance
permission_service: PermissionService = PermissionService()
