"""직원 라우터 — 직원 CRUD, 상태 변경, 매장/서비스 배정 엔드포인트.

Staff Router — Staff member CRUD, status changes, and location and
service assignment endpoints. Reads need Staff.View, writes Staff.Manage.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_permission
from app.database import get_db
from app.models.staff import StaffMember
from app.schemas.common import PaginatedResponse
from app.schemas.staff import (
    StaffLocationAssign,
    StaffLocationResponse,
    StaffMemberCreate,
    StaffMemberResponse,
    StaffMemberUpdate,
    StaffServiceAssign,
    StaffServiceResponse,
    StaffStatusUpdate,
)
from app.services.staff_service import staff_service

router: APIRouter = APIRouter()


@router.get("", response_model=PaginatedResponse)
async def list_staff(
    business_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Staff.View"))],
    status: Annotated[str | None, Query()] = None,
    location_id: Annotated[UUID | None, Query()] = None,
    search: Annotated[str | None, Query(max_length=100)] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
) -> PaginatedResponse:
    """직원 목록을 조회합니다.

    List staff members with optional status, location and name/email search.
    """
    return await staff_service.list_staff(
        db, business_id, status=status, location_id=location_id,
        search=search, page=page, per_page=per_page,
    )


@router.post("", response_model=StaffMemberResponse, status_code=201)
async def create_staff(
    business_id: UUID,
    data: StaffMemberCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Staff.Manage"))],
) -> StaffMemberResponse:
    """새 직원을 생성합니다 (Create a staff member)."""
    staff: StaffMember = await staff_service.create_staff(db, business_id, data)
    result: StaffMemberResponse = await staff_service.build_response(db, staff)
    await db.commit()
    return result


@router.get("/{staff_member_id}", response_model=StaffMemberResponse)
async def get_staff(
    business_id: UUID,
    staff_member_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Staff.View"))],
) -> StaffMemberResponse:
    staff: StaffMember = await staff_service.get_staff(db, staff_member_id, business_id)
    return await staff_service.build_response(db, staff)


@router.put("/{staff_member_id}", response_model=StaffMemberResponse)
async def update_staff(
    business_id: UUID,
    staff_member_id: UUID,
    data: StaffMemberUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Staff.Manage"))],
) -> StaffMemberResponse:
    """직원 정보를 수정합니다 (Partial update)."""
    staff: StaffMember = await staff_service.update_staff(db, staff_member_id, business_id, data)
    result: StaffMemberResponse = await staff_service.build_response(db, staff)
    await db.commit()
    return result


@router.delete("/{staff_member_id}", status_code=204)
async def delete_staff(
    business_id: UUID,
    staff_member_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Staff.Manage"))],
) -> None:
    """직원을 소프트 삭제합니다.

    Soft-delete a staff member; the record disappears from every listing.
    """
    await staff_service.delete_staff(db, staff_member_id, business_id)
    await db.commit()


@router.patch("/{staff_member_id}/status", response_model=StaffMemberResponse)
async def change_status(
    business_id: UUID,
    staff_member_id: UUID,
    data: StaffStatusUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Staff.Manage"))],
) -> StaffMemberResponse:
    staff: StaffMember = await staff_service.change_status(db, staff_member_id, business_id, data.status)
    result: StaffMemberResponse = await staff_service.build_response(db, staff)
    await db.commit()
    return result


# --- 매장 배정 — Location assignments ---

@router.get("/{staff_member_id}/locations", response_model=list[StaffLocationResponse])
async def list_locations(
    business_id: UUID,
    staff_member_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Staff.View"))],
) -> list[StaffLocationResponse]:
    return await staff_service.list_locations(db, staff_member_id, business_id)


@router.post("/{staff_member_id}/locations", response_model=StaffLocationResponse, status_code=201)
async def assign_location(
    business_id: UUID,
    staff_member_id: UUID,
    data: StaffLocationAssign,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Staff.Manage"))],
) -> StaffLocationResponse:
    """직원을 매장에 배정합니다 — 첫 배정은 주 매장.

    Assign the staff member to a location; the first one becomes primary.
    """
    result: StaffLocationResponse = await staff_service.assign_location(db, staff_member_id, business_id, data)
    await db.commit()
    return result


@router.delete("/{staff_member_id}/locations/{assigned_location_id}", status_code=204)
async def remove_location(
    business_id: UUID,
    staff_member_id: UUID,
    assigned_location_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Staff.Manage"))],
) -> None:
    await staff_service.remove_location(db, staff_member_id, business_id, assigned_location_id)
    await db.commit()


@router.put("/{staff_member_id}/locations/{assigned_location_id}/primary", response_model=StaffLocationResponse)
async def set_primary_location(
    business_id: UUID,
    staff_member_id: UUID,
    assigned_location_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Staff.Manage"))],
) -> StaffLocationResponse:
    result: StaffLocationResponse = await staff_service.set_primary_location(
        db, staff_member_id, business_id, assigned_location_id
    )
    await db.commit()
    return result


# --- 서비스 배정 — Service assignments ---

@router.get("/{staff_member_id}/services", response_model=list[StaffServiceResponse])
async def list_services(
    business_id: UUID,
    staff_member_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Staff.View"))],
) -> list[StaffServiceResponse]:
    return await staff_service.list_services(db, staff_member_id, business_id)


@router.post("/{staff_member_id}/services", response_model=StaffServiceResponse, status_code=201)
async def assign_service(
    business_id: UUID,
    staff_member_id: UUID,
    data: StaffServiceAssign,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Staff.Manage"))],
) -> StaffServiceResponse:
    result: StaffServiceResponse = await staff_service.assign_service(
        db, staff_member_id, business_id, data.service_id
    )
    await db.commit()
    return result


@router.delete("/{staff_member_id}/services/{service_id}", status_code=204)
async def remove_service(
    business_id: UUID,
    staff_member_id: UUID,
    service_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Staff.Manage"))],
) -> None:
    await staff_service.remove_service(db, staff_member_id, business_id, service_id)
    await db.commit()
