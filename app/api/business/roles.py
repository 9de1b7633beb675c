"""역할 라우터 — 역할 CRUD, 권한 영역 목록, 역할 배정 및 권한 확인.

Role Router — Role CRUD, the permission-area catalogue, role assignment on
staff locations and permission checks. Reads need Staff.View, writes
Settings.ManageBusiness.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_permission
from app.database import get_db
from app.domain.permissions import PERMISSION_KEYS
from app.models.staff import StaffLocation, StaffMember
from app.schemas.role import (
    PermissionAreaResponse,
    PermissionCheckResponse,
    RoleAssignRequest,
    RoleCreate,
    RoleResponse,
    RoleUpdate,
)
from app.schemas.staff import StaffLocationResponse
from app.services.permission_service import permission_service
from app.services.role_service import role_service
from app.services.staff_service import staff_service
from app.utils.exceptions import BadRequestError

router: APIRouter = APIRouter()


@router.get("", response_model=list[RoleResponse])
async def list_roles(
    business_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Staff.View"))],
) -> list[RoleResponse]:
    """역할 목록을 조회합니다 — 기본 역할이 없으면 생성.

    List roles of the business; default roles are seeded on first access.
    """
    result: list[RoleResponse] = await role_service.list_roles(db, business_id)
    await db.commit()
    return result


@router.get("/permission-areas", response_model=list[PermissionAreaResponse])
async def list_permission_areas(
    current_staff: Annotated[StaffMember, Depends(require_permission("Staff.View"))],
) -> list[dict]:
    """권한 영역 및 액션 목록 (Permission areas and their actions)."""
    return role_service.permission_areas()


@router.get("/check", response_model=PermissionCheckResponse)
async def check_permission(
    business_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Staff.View"))],
    staff_member_id: Annotated[UUID, Query()],
    permission: Annotated[str, Query()],
    location_id: Annotated[UUID | None, Query()] = None,
) -> PermissionCheckResponse:
    """직원의 매장별 권한을 확인합니다.

    Evaluate one permission for a staff member at a location (primary
    location when omitted). Unknown keys are rejected with 400.
    """
    if permission not in PERMISSION_KEYS:
        raise BadRequestError(f"Unknown permission key: {permission}")
    granted: bool = await permission_service.has_permission(
        db, staff_member_id, location_id, permission, business_id=business_id
    )
    return PermissionCheckResponse(
        staff_member_id=str(staff_member_id),
        location_id=str(location_id) if location_id else None,
        permission=permission,
        granted=granted,
    )


@router.post("/assign", response_model=StaffLocationResponse)
async def assign_role(
    business_id: UUID,
    data: RoleAssignRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Settings.ManageBusiness"))],
) -> StaffLocationResponse:
    """직원의 매장 배정에 역할을 지정합니다 (One role per staff member per location)."""
    assignment: StaffLocation = await role_service.assign_role(db, business_id, data)
    result: StaffLocationResponse = await staff_service.location_detail(db, assignment)
    await db.commit()
    return result


@router.post("", response_model=RoleResponse, status_code=201)
async def create_role(
    business_id: UUID,
    data: RoleCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Settings.ManageBusiness"))],
) -> RoleResponse:
    """새 역할을 생성합니다.

    Create a custom role, optionally cloning another role's permissions.
    """
    result: RoleResponse = await role_service.create_role(db, business_id, data)
    await db.commit()
    return result


@router.get("/{role_id}", response_model=RoleResponse)
async def get_role(
    business_id: UUID,
    role_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Staff.View"))],
) -> RoleResponse:
    return role_service.to_response(await role_service.get_role(db, role_id, business_id))


@router.put("/{role_id}", response_model=RoleResponse)
async def update_role(
    business_id: UUID,
    role_id: UUID,
    data: RoleUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Settings.ManageBusiness"))],
) -> RoleResponse:
    """역할 정보를 수정합니다.

    Update a role. Default role names and Owner permissions are locked.
    """
    result: RoleResponse = await role_service.update_role(db, role_id, business_id, data)
    await db.commit()
    return result


@router.delete("/{role_id}", status_code=204)
async def delete_role(
    business_id: UUID,
    role_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Settings.ManageBusiness"))],
) -> None:
    """역할을 삭제합니다. 기본 역할과 사용 중인 역할은 삭제 불가."""
    await role_service.delete_role(db, role_id, business_id)
    await db.commit()
