"""충돌 정책 라우터 (Scheduling Policy Router).

Per-business conflict thresholds: daily/weekly overtime hours and
location capacity. Without a stored policy the application defaults apply.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_permission
from app.database import get_db
from app.models.staff import StaffMember
from app.schemas.schedule import SchedulingPolicyResponse, SchedulingPolicyUpdate
from app.services.scheduling_policy_service import scheduling_policy_service

router: APIRouter = APIRouter()


@router.get("", response_model=SchedulingPolicyResponse)
async def get_policy(
    business_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Scheduling.View"))],
) -> SchedulingPolicyResponse:
    return await scheduling_policy_service.get_policy(db, business_id)


@router.put("", response_model=SchedulingPolicyResponse)
async def update_policy(
    business_id: UUID,
    data: SchedulingPolicyUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_staff: Annotated[StaffMember, Depends(require_permission("Settings.ManageBusiness"))],
) -> SchedulingPolicyResponse:
    """충돌 정책을 저장합니다 — None 값은 해당 검사 비활성."""
    result: SchedulingPolicyResponse = await scheduling_policy_service.upsert_policy(db, business_id, data)
    await db.commit()
    return result
