"""스케줄 라우터 — 근무 CRUD, 일괄 생성, 충돌 검사, 발생 목록, 가용성.

Schedule Router — Shift CRUD, bulk creation, dry-run conflict checks,
occurrence listing and availability. Writes honour the force and
override headers of the conflict gate.
"""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Header, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import header_flag, require_permission
from app.config import settings
from app.database import get_db
from app.models.schedule import Shift
from app.models.staff import StaffMember
from app.schemas.schedule import (
    AvailabilitySlotResponse,
    ConflictCheckRequest,
    ShiftBulkCreate,
    ShiftConflictResponse,
    ShiftCreate,
    ShiftOccurrenceResponse,
    ShiftResponse,
    ShiftUpdate,
)
from app.services.schedule_service import schedule_service
from app.services.shift_service import shift_service

router: APIRouter = APIRouter()


async def conflict_flags(
    force_create: Annotated[str | None, Header(alias=settings.FORCE_CREATE_HEADER)] = None,
    override_conflicts: Annotated[str | None, Header(alias=settings.OVERRIDE_CONFLICTS_HEADER)] = None,
) -> tuple[bool, bool]:
    """충돌 우회 헤더 (force, override) — Conflict bypass headers."""
    return header_flag(force_create), header_flag(override_conflicts)


@router.get("", response_model=list[ShiftResponse])
async def list_shifts(
    business_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Scheduling.View"))],
    start_date: Annotated[date, Query()],
    end_date: Annotated[date, Query()],
    staff_member_id: Annotated[UUID | None, Query()] = None,
    location_id: Annotated[UUID | None, Query()] = None,
    status: Annotated[str | None, Query()] = None,
) -> list[ShiftResponse]:
    """기간 내 근무 목록을 조회합니다 (Stored shifts in the date range)."""
    return await shift_service.list_shifts(
        db, business_id, start_date, end_date,
        staff_member_id=staff_member_id, location_id=location_id, status=status,
    )


@router.post("", response_model=ShiftResponse, status_code=201)
async def create_shift(
    business_id: UUID,
    data: ShiftCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Scheduling.Manage"))],
    flags: Annotated[tuple[bool, bool], Depends(conflict_flags)],
) -> ShiftResponse:
    """근무를 생성합니다.

    Create a shift. Error conflicts need X-Override-Conflicts: true and
    warnings need X-Force-Create: true, otherwise 409 with the conflict list.
    """
    force, override = flags
    shift: Shift = await shift_service.create_shift(db, business_id, data, force=force, override=override)
    result: ShiftResponse = await shift_service.build_response(db, shift)
    await db.commit()
    return result


@router.post("/bulk", response_model=list[ShiftResponse], status_code=201)
async def bulk_create_shifts(
    business_id: UUID,
    data: ShiftBulkCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Scheduling.Manage"))],
    flags: Annotated[tuple[bool, bool], Depends(conflict_flags)],
) -> list[ShiftResponse]:
    """근무를 일괄 생성합니다 — 충돌은 합쳐서 한 번에 판정 (All or nothing)."""
    force, override = flags
    shifts: list[Shift] = await shift_service.bulk_create(db, business_id, data.shifts, force=force, override=override)
    result: list[ShiftResponse] = await shift_service.build_responses(db, shifts)
    await db.commit()
    return result


@router.post("/conflicts", response_model=list[ShiftConflictResponse])
async def check_conflicts(
    business_id: UUID,
    data: ConflictCheckRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Scheduling.View"))],
) -> list[ShiftConflictResponse]:
    """충돌만 검사합니다 — 저장하지 않음 (Dry-run conflict check)."""
    return await shift_service.check_conflicts(db, business_id, data)


@router.get("/occurrences", response_model=list[ShiftOccurrenceResponse])
async def list_occurrences(
    business_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Scheduling.View"))],
    start_date: Annotated[date, Query()],
    end_date: Annotated[date, Query()],
    staff_member_id: Annotated[UUID | None, Query()] = None,
    location_id: Annotated[UUID | None, Query()] = None,
) -> list[ShiftOccurrenceResponse]:
    """근무와 반복 패턴 발생을 합친 일정 (Shifts plus expanded pattern occurrences)."""
    return await schedule_service.list_occurrences(
        db, business_id, start_date, end_date,
        staff_member_id=staff_member_id, location_id=location_id,
    )


@router.get("/availability/{staff_member_id}", response_model=list[AvailabilitySlotResponse])
async def get_availability(
    business_id: UUID,
    staff_member_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Scheduling.View"))],
    start_date: Annotated[date, Query()],
    end_date: Annotated[date, Query()],
) -> list[AvailabilitySlotResponse]:
    """직원의 점유 슬롯 — 근무, 패턴 발생, 승인된 휴가.

    Busy slots of a staff member, ordered by date then start time.
    """
    return await schedule_service.availability(db, business_id, staff_member_id, start_date, end_date)


@router.get("/{shift_id}", response_model=ShiftResponse)
async def get_shift(
    business_id: UUID,
    shift_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Scheduling.View"))],
) -> ShiftResponse:
    shift: Shift = await shift_service.get_shift(db, shift_id, business_id)
    return await shift_service.build_response(db, shift)


@router.put("/{shift_id}", response_model=ShiftResponse)
async def update_shift(
    business_id: UUID,
    shift_id: UUID,
    data: ShiftUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Scheduling.Manage"))],
    flags: Annotated[tuple[bool, bool], Depends(conflict_flags)],
) -> ShiftResponse:
    """근무를 수정합니다 — 배치가 바뀌면 충돌 재검사 (Re-checked when placement changes)."""
    force, override = flags
    shift: Shift = await shift_service.update_shift(
        db, shift_id, business_id, data, force=force, override=override
    )
    result: ShiftResponse = await shift_service.build_response(db, shift)
    await db.commit()
    return result


@router.delete("/{shift_id}", status_code=204)
async def delete_shift(
    business_id: UUID,
    shift_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Scheduling.Manage"))],
) -> None:
    """근무를 삭제합니다. 완료된 근무는 삭제 불가."""
    await shift_service.delete_shift(db, shift_id, business_id)
    await db.commit()
