"""휴가 라우터 — 휴가 유형 및 요청 승인 워크플로우 엔드포인트.

Time-off Router — Time-off types and the request workflow.
Viewing needs TimeOff.View, type management TimeOff.Manage and decisions
TimeOff.Approve. Staff members file and cancel their own requests.
"""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_staff, require_permission
from app.database import get_db
from app.models.staff import StaffMember
from app.models.time_off import TimeOffRequest
from app.schemas.common import CountResponse, PaginatedResponse
from app.schemas.time_off import (
    TimeOffDecision,
    TimeOffRequestCreate,
    TimeOffRequestResponse,
    TimeOffTypeCreate,
    TimeOffTypeResponse,
    TimeOffTypeUpdate,
)
from app.services.time_off_service import time_off_service

router: APIRouter = APIRouter()


# --- 휴가 유형 — Types ---

@router.get("/types", response_model=list[TimeOffTypeResponse])
async def list_types(
    business_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(get_current_staff)],
    active_only: Annotated[bool, Query()] = False,
) -> list[TimeOffTypeResponse]:
    """휴가 유형 목록 — 기본 유형이 없으면 생성.

    List time-off types; Vacation, Sick and Personal are seeded on first access.
    """
    result: list[TimeOffTypeResponse] = await time_off_service.list_types(db, business_id, active_only)
    await db.commit()
    return result


@router.post("/types", response_model=TimeOffTypeResponse, status_code=201)
async def create_type(
    business_id: UUID,
    data: TimeOffTypeCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("TimeOff.Manage"))],
) -> TimeOffTypeResponse:
    result: TimeOffTypeResponse = await time_off_service.create_type(db, business_id, data)
    await db.commit()
    return result


@router.put("/types/{type_id}", response_model=TimeOffTypeResponse)
async def update_type(
    business_id: UUID,
    type_id: UUID,
    data: TimeOffTypeUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("TimeOff.Manage"))],
) -> TimeOffTypeResponse:
    result: TimeOffTypeResponse = await time_off_service.update_type(db, type_id, business_id, data)
    await db.commit()
    return result


@router.delete("/types/{type_id}", status_code=204)
async def delete_type(
    business_id: UUID,
    type_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("TimeOff.Manage"))],
) -> None:
    """휴가 유형을 삭제합니다. 승인된 요청이 사용 중이면 400."""
    await time_off_service.delete_type(db, type_id, business_id)
    await db.commit()


# --- 휴가 요청 — Requests ---

@router.get("/requests", response_model=PaginatedResponse)
async def list_requests(
    business_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("TimeOff.View"))],
    staff_member_id: Annotated[UUID | None, Query()] = None,
    status: Annotated[str | None, Query()] = None,
    start_date: Annotated[date | None, Query()] = None,
    end_date: Annotated[date | None, Query()] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
) -> PaginatedResponse:
    return await time_off_service.list_requests(
        db, business_id, staff_member_id=staff_member_id, status=status,
        start_date=start_date, end_date=end_date, page=page, per_page=per_page,
    )


@router.get("/requests/pending-count", response_model=CountResponse)
async def pending_count(
    business_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("TimeOff.Approve"))],
) -> CountResponse:
    """승인 대기 요청 수 (Pending request count)."""
    return CountResponse(count=await time_off_service.pending_count(db, business_id))


@router.post("/requests", response_model=TimeOffRequestResponse, status_code=201)
async def create_request(
    business_id: UUID,
    data: TimeOffRequestCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(get_current_staff)],
) -> TimeOffRequestResponse:
    """휴가를 요청합니다.

    File a request for the caller, or for another staff member with
    TimeOff.Manage. Overlapping an approved request is rejected.
    """
    request: TimeOffRequest = await time_off_service.create_request(db, business_id, current_staff, data)
    result: TimeOffRequestResponse = await time_off_service.build_response(db, request)
    await db.commit()
    return result


@router.get("/requests/{request_id}", response_model=TimeOffRequestResponse)
async def get_request(
    business_id: UUID,
    request_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("TimeOff.View"))],
) -> TimeOffRequestResponse:
    request: TimeOffRequest = await time_off_service.get_request(db, request_id, business_id)
    return await time_off_service.build_response(db, request)


@router.post("/requests/{request_id}/approve", response_model=TimeOffRequestResponse)
async def approve_request(
    business_id: UUID,
    request_id: UUID,
    data: TimeOffDecision,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("TimeOff.Approve"))],
) -> TimeOffRequestResponse:
    """휴가 요청을 승인합니다 — Pending에서만 가능.

    Approve a Pending request; the caller is recorded as approver.
    """
    request: TimeOffRequest = await time_off_service.approve_request(
        db, request_id, business_id, current_staff, data.notes
    )
    result: TimeOffRequestResponse = await time_off_service.build_response(db, request)
    await db.commit()
    return result


@router.post("/requests/{request_id}/deny", response_model=TimeOffRequestResponse)
async def deny_request(
    business_id: UUID,
    request_id: UUID,
    data: TimeOffDecision,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("TimeOff.Approve"))],
) -> TimeOffRequestResponse:
    request: TimeOffRequest = await time_off_service.deny_request(
        db, request_id, business_id, current_staff, data.notes
    )
    result: TimeOffRequestResponse = await time_off_service.build_response(db, request)
    await db.commit()
    return result


@router.post("/requests/{request_id}/cancel", response_model=TimeOffRequestResponse)
async def cancel_request(
    business_id: UUID,
    request_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(get_current_staff)],
) -> TimeOffRequestResponse:
    """휴가 요청을 취소합니다 — 본인 또는 TimeOff.Manage."""
    request: TimeOffRequest = await time_off_service.cancel_request(db, request_id, business_id, current_staff)
    result: TimeOffRequestResponse = await time_off_service.build_response(db, request)
    await db.commit()
    return result
