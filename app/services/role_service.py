"""역할 서비스 — 역할 CRUD 및 매장별 역할 배정 비즈니스 로직.

Role Service — Business logic for role management.
Default roles (Owner, Manager, Employee) are created lazily the first time a
business lists or assigns roles; their names are reserved and locked.
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.permissions import PERMISSION_AREAS, RolePermissions
from app.models.role import Role
from app.models.staff import StaffLocation, StaffMember
from app.repositories.role_repository import role_repository
from app.repositories.staff_repository import staff_repository
from app.schemas.role import RoleAssignRequest, RoleCreate, RoleResponse, RoleUpdate
from app.utils.exceptions import BadRequestError, DuplicateError, NotFoundError

OWNER_ROLE = "Owner"

# 기본 역할 정의 (이름, 설명, 권한) — Default role definitions
DEFAULT_ROLES: tuple[tuple[str, str, RolePermissions], ...] = (
    (OWNER_ROLE, "Full access to all features and settings", RolePermissions.owner()),
    ("Manager", "Can manage schedules, time-off, and bookings", RolePermissions.manager()),
    ("Employee", "Can view own schedule and bookings", RolePermissions.employee()),
)

# 사용자 정의 역할에 쓸 수 없는 이름 (소문자) — Reserved names, lower-cased
RESERVED_ROLE_NAMES: frozenset[str] = frozenset(name.lower() for name, _, _ in DEFAULT_ROLES)


class RoleService:
    """역할 관련 비즈니스 로직을 처리하는 서비스.

    Service handling role business logic: CRUD with reserved-name and
    default-role protection, permission cloning, and role assignment on
    staff locations.
    """

    def to_response(self, role: Role) -> RoleResponse:
        return RoleResponse(
            id=str(role.id),
            business_id=str(role.business_id),
            name=role.name,
            description=role.description,
            is_default=role.is_default,
            is_immutable=role.is_immutable,
            permissions=role.flags,
            created_at=role.created_at,
            updated_at=role.updated_at,
        )

    async def ensure_default_roles(self, db: AsyncSession, business_id: UUID) -> None:
        """누락된 기본 역할을 생성합니다 (Create any missing default roles)."""
        existing: set[str] = await role_repository.get_default_names(db, business_id)
        for name, description, permissions in DEFAULT_ROLES:
            if name.lower() in existing:
                continue
            await role_repository.create(db, {
                "business_id": business_id,
                "name": name,
                "description": description,
                "is_default": True,
                "is_immutable": True,
                "permissions": permissions.model_dump(),
            })

    async def list_roles(self, db: AsyncSession, business_id: UUID) -> list[RoleResponse]:
        await self.ensure_default_roles(db, business_id)
        roles: list[Role] = await role_repository.get_by_business(db, business_id)
        return [self.to_response(r) for r in roles]

    async def get_role(self, db: AsyncSession, role_id: UUID, business_id: UUID) -> Role:
        role: Role | None = await role_repository.get_by_id(db, role_id, business_id)
        if role is None:
            raise NotFoundError("Role not found")
        return role

    async def create_role(self, db: AsyncSession, business_id: UUID, data: RoleCreate) -> RoleResponse:
        """새 역할을 생성합니다.

        Create a custom role.

        Raises:
            BadRequestError: 예약된 이름 (Reserved default name)
            DuplicateError: 사업장 내 이름 중복 (Name already used)
            NotFoundError: 복제 원본 역할 없음 (Clone source not found)
        """
        name: str = data.name.strip()
        if name.lower() in RESERVED_ROLE_NAMES:
            raise BadRequestError(f"Role name '{name}' is reserved for default roles")
        if await role_repository.name_exists(db, business_id, name):
            raise DuplicateError("A role with this name already exists in this business")

        if data.clone_from_role_id is not None:
            source: Role | None = await role_repository.get_by_id(db, data.clone_from_role_id, business_id)
            if source is None:
                raise NotFoundError("Source role not found")
            permissions: RolePermissions = source.flags
        else:
            permissions = data.permissions or RolePermissions()

        role: Role = await role_repository.create(db, {
            "business_id": business_id,
            "name": name,
            "description": data.description,
            "is_default": False,
            "is_immutable": False,
            "permissions": permissions.model_dump(),
        })
        return self.to_response(role)

    async def update_role(
        self, db: AsyncSession, role_id: UUID, business_id: UUID, data: RoleUpdate
    ) -> RoleResponse:
        """역할을 수정합니다.

        Update a role. Locked roles keep their name; Owner permissions never
        change.
        """
        role: Role = await self.get_role(db, role_id, business_id)

        if data.name is not None and data.name.strip().lower() != role.name.lower():
            new_name: str = data.name.strip()
            if role.is_immutable:
                raise BadRequestError("Cannot change the name of a default role")
            if new_name.lower() in RESERVED_ROLE_NAMES:
                raise BadRequestError(f"Role name '{new_name}' is reserved for default roles")
            if await role_repository.name_exists(db, business_id, new_name, exclude_id=role.id):
                raise DuplicateError("A role with this name already exists in this business")
            role.name = new_name

        if data.description is not None:
            role.description = data.description

        if data.permissions is not None:
            if role.name.lower() == OWNER_ROLE.lower():
                raise BadRequestError("Cannot modify Owner role permissions")
            role.permissions = data.permissions.model_dump()

        await db.flush()
        await db.refresh(role)
        return self.to_response(role)

    async def delete_role(self, db: AsyncSession, role_id: UUID, business_id: UUID) -> None:
        role: Role = await self.get_role(db, role_id, business_id)
        if role.is_default:
            raise BadRequestError("Cannot delete default roles (Owner, Manager, Employee)")
        if await staff_repository.role_in_use(db, role.id):
            raise BadRequestError("Cannot delete a role that is assigned to staff members")
        await db.delete(role)
        await db.flush()

    def permission_areas(self) -> list[dict]:
        return PERMISSION_AREAS

    async def assign_role(self, db: AsyncSession, business_id: UUID, data: RoleAssignRequest) -> StaffLocation:
        """직원의 매장 배정에 역할을 지정합니다.

        Set the role on an existing staff-location assignment. Replaces any
        previous role, so a staff member holds one role per location.

        Raises:
            NotFoundError: 역할, 직원 또는 매장 배정 없음
                           (Role, staff member or location assignment missing)
        """
        await self.ensure_default_roles(db, business_id)
        await self.get_role(db, data.role_id, business_id)

        staff: StaffMember | None = await staff_repository.get_by_id(db, data.staff_member_id, business_id)
        if staff is None:
            raise NotFoundError("Staff member not found")

        assignment: StaffLocation | None = await staff_repository.get_location(db, staff.id, data.location_id)
        if assignment is None:
            raise NotFoundError("Staff member is not assigned to this location")

        assignment.role_id = data.role_id
        await db.flush()
        await db.refresh(assignment)
        return assignment


# 싱글턴 인스턴스 — Singleton instance
role_service: RoleService = RoleService()
