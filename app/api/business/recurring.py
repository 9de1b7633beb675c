"""반복 근무 패턴 라우터.

Recurring Shift Pattern Router — CRUD for recurring patterns. A malformed
rule is rejected with 400 before anything is stored.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_permission
from app.database import get_db
from app.models.staff import StaffMember
from app.schemas.schedule import (
    RecurringShiftPatternCreate,
    RecurringShiftPatternResponse,
    RecurringShiftPatternUpdate,
)
from app.services.recurring_shift_service import recurring_shift_service

router: APIRouter = APIRouter()


@router.get("", response_model=list[RecurringShiftPatternResponse])
async def list_patterns(
    business_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Scheduling.View"))],
    staff_member_id: Annotated[UUID | None, Query()] = None,
    location_id: Annotated[UUID | None, Query()] = None,
    active_only: Annotated[bool, Query()] = False,
) -> list[RecurringShiftPatternResponse]:
    return await recurring_shift_service.list_patterns(
        db, business_id, staff_member_id=staff_member_id, location_id=location_id, active_only=active_only,
    )


@router.post("", response_model=RecurringShiftPatternResponse, status_code=201)
async def create_pattern(
    business_id: UUID,
    data: RecurringShiftPatternCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Scheduling.Manage"))],
) -> RecurringShiftPatternResponse:
    """반복 패턴을 생성합니다 (e.g. rrule "FREQ=WEEKLY;BYDAY=MO,WE,FR")."""
    result: RecurringShiftPatternResponse = await recurring_shift_service.create_pattern(db, business_id, data)
    await db.commit()
    return result


@router.get("/{pattern_id}", response_model=RecurringShiftPatternResponse)
async def get_pattern(
    business_id: UUID,
    pattern_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Scheduling.View"))],
) -> RecurringShiftPatternResponse:
    return recurring_shift_service.to_response(
        await recurring_shift_service.get_pattern(db, pattern_id, business_id)
    )


@router.put("/{pattern_id}", response_model=RecurringShiftPatternResponse)
async def update_pattern(
    business_id: UUID,
    pattern_id: UUID,
    data: RecurringShiftPatternUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Scheduling.Manage"))],
) -> RecurringShiftPatternResponse:
    result: RecurringShiftPatternResponse = await recurring_shift_service.update_pattern(
        db, pattern_id, business_id, data
    )
    await db.commit()
    return result


@router.delete("/{pattern_id}", status_code=204)
async def delete_pattern(
    business_id: UUID,
    pattern_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Scheduling.Manage"))],
) -> None:
    """패턴을 삭제합니다. 연결된 근무는 유지되고 연결만 해제."""
    await recurring_shift_service.delete_pattern(db, pattern_id, business_id)
    await db.commit()
