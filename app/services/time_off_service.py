"""휴가 서비스 — 휴가 유형 및 요청 승인 워크플로우.

Time-off Service — Business logic for time-off types and requests.
Requests start Pending and leave it exactly once (approve, deny or cancel).
Approving over scheduled shifts is allowed and logged; reassigning those
shifts is left to the business.
"""

import logging
from datetime import date
from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain import time_off as time_off_states
from app.models.schedule import Shift
from app.models.staff import StaffMember
from app.models.time_off import DEFAULT_TIME_OFF_TYPES, DEFAULT_TYPE_COLOR, TimeOffRequest, TimeOffType
from app.repositories.shift_repository import shift_repository
from app.repositories.time_off_repository import time_off_request_repository, time_off_type_repository
from app.schemas.common import PaginatedResponse
from app.schemas.time_off import (
    TimeOffRequestCreate,
    TimeOffRequestResponse,
    TimeOffTypeCreate,
    TimeOffTypeResponse,
    TimeOffTypeUpdate,
)
from app.services.permission_service import permission_service
from app.services.staff_service import staff_service
from app.utils.exceptions import BadRequestError, DuplicateError, ForbiddenError, NotFoundError
from app.utils.time_format import format_hhmm, parse_hhmm

logger = logging.getLogger(__name__)

# 승인 시 경고 대상 근무 상태 — Shift statuses that collide with approved time-off
BUSY_SHIFT_STATUSES: frozenset[str] = frozenset({"Scheduled", "Confirmed"})


class TimeOffService:
    """휴가 서비스.

    Time-off service: types with lazily seeded defaults, request creation
    with overlap checks, and the approval workflow.
    """

    # --- 휴가 유형 — Types ---

    @staticmethod
    def type_response(time_off_type: TimeOffType) -> TimeOffTypeResponse:
        return TimeOffTypeResponse(
            id=str(time_off_type.id),
            business_id=str(time_off_type.business_id),
            name=time_off_type.name,
            color=time_off_type.color,
            is_default=time_off_type.is_default,
            is_active=time_off_type.is_active,
        )

    async def ensure_default_types(self, db: AsyncSession, business_id: UUID) -> None:
        """기본 유형(Vacation, Sick, Personal)이 없으면 생성합니다."""
        existing: list[TimeOffType] = await time_off_type_repository.get_by_business(db, business_id)
        if existing:
            return
        for name, color in DEFAULT_TIME_OFF_TYPES:
            await time_off_type_repository.create(db, {
                "business_id": business_id,
                "name": name,
                "color": color,
                "is_default": True,
                "is_active": True,
            })

    async def list_types(
        self,
        db: AsyncSession,
        business_id: UUID,
        active_only: bool = False,
    ) -> list[TimeOffTypeResponse]:
        await self.ensure_default_types(db, business_id)
        types: list[TimeOffType] = await time_off_type_repository.get_by_business(db, business_id, active_only)
        return [self.type_response(t) for t in types]

    async def get_type(self, db: AsyncSession, type_id: UUID, business_id: UUID) -> TimeOffType:
        time_off_type: TimeOffType | None = await time_off_type_repository.get_by_id(db, type_id, business_id)
        if time_off_type is None:
            raise NotFoundError("Time-off type not found")
        return time_off_type

    async def create_type(self, db: AsyncSession, business_id: UUID, data: TimeOffTypeCreate) -> TimeOffTypeResponse:
        await self.ensure_default_types(db, business_id)
        name: str = data.name.strip()
        if await time_off_type_repository.name_exists(db, business_id, name):
            raise DuplicateError(f"A time-off type named '{name}' already exists")
        time_off_type: TimeOffType = await time_off_type_repository.create(db, {
            "business_id": business_id,
            "name": name,
            "color": data.color or DEFAULT_TYPE_COLOR,
            "is_default": False,
            "is_active": True,
        })
        return self.type_response(time_off_type)

    async def update_type(
        self,
        db: AsyncSession,
        type_id: UUID,
        business_id: UUID,
        data: TimeOffTypeUpdate,
    ) -> TimeOffTypeResponse:
        time_off_type: TimeOffType = await self.get_type(db, type_id, business_id)

        if data.name is not None:
            name: str = data.name.strip()
            if await time_off_type_repository.name_exists(db, business_id, name, exclude_id=time_off_type.id):
                raise DuplicateError(f"A time-off type named '{name}' already exists")
            time_off_type.name = name
        if data.color is not None:
            time_off_type.color = data.color
        if data.is_active is not None:
            time_off_type.is_active = data.is_active

        await db.flush()
        await db.refresh(time_off_type)
        return self.type_response(time_off_type)

    async def delete_type(self, db: AsyncSession, type_id: UUID, business_id: UUID) -> None:
        """휴가 유형을 삭제합니다.

        Delete a time-off type. Types used by approved requests cannot be
        deleted; types referenced only by other requests are deactivated
        instead so those requests keep their type.

        Raises:
            BadRequestError: 승인된 요청이 사용 중 (Used by approved requests)
        """
        time_off_type: TimeOffType = await self.get_type(db, type_id, business_id)
        if await time_off_request_repository.type_in_use(db, time_off_type.id):
            raise BadRequestError("Cannot delete time-off type that has active approved requests")

        if await time_off_request_repository.any_for_type(db, time_off_type.id):
            time_off_type.is_active = False
            logger.info("Time-off type %s referenced by requests; deactivated instead of deleted", time_off_type.id)
        else:
            await db.delete(time_off_type)
        await db.flush()

    # --- 휴가 요청 — Requests ---

    async def build_responses(
        self,
        db: AsyncSession,
        requests: Sequence[TimeOffRequest],
    ) -> list[TimeOffRequestResponse]:
        """요청 응답 목록 — 직원/승인자 이름과 유형 이름을 한 번에 조회.

        Build responses, resolving staff, approver and type names in two
        queries.
        """
        staff_ids: set[UUID] = {r.staff_member_id for r in requests}
        staff_ids.update(r.approved_by_staff_id for r in requests if r.approved_by_staff_id)
        type_ids: set[UUID] = {r.time_off_type_id for r in requests}

        names: dict[UUID, str] = {}
        if staff_ids:
            rows = await db.execute(
                select(StaffMember.id, StaffMember.first_name, StaffMember.last_name)
                .where(StaffMember.id.in_(staff_ids))
                .execution_options(include_deleted=True)
            )
            names = {row.id: f"{row.first_name} {row.last_name}" for row in rows.all()}

        type_names: dict[UUID, str] = {}
        if type_ids:
            rows = await db.execute(select(TimeOffType.id, TimeOffType.name).where(TimeOffType.id.in_(type_ids)))
            type_names = {row.id: row.name for row in rows.all()}

        return [
            TimeOffRequestResponse(
                id=str(r.id),
                business_id=str(r.business_id),
                staff_member_id=str(r.staff_member_id),
                staff_member_name=names.get(r.staff_member_id),
                time_off_type_id=str(r.time_off_type_id),
                time_off_type_name=type_names.get(r.time_off_type_id),
                start_date=r.start_date,
                end_date=r.end_date,
                is_all_day=r.is_all_day,
                start_time=format_hhmm(r.start_time) if r.start_time else None,
                end_time=format_hhmm(r.end_time) if r.end_time else None,
                status=r.status,
                notes=r.notes,
                approval_notes=r.approval_notes,
                approved_by_staff_id=str(r.approved_by_staff_id) if r.approved_by_staff_id else None,
                approved_by_name=names.get(r.approved_by_staff_id) if r.approved_by_staff_id else None,
                approved_at=r.approved_at,
                created_at=r.created_at,
                updated_at=r.updated_at,
            )
            for r in requests
        ]

    async def build_response(self, db: AsyncSession, request: TimeOffRequest) -> TimeOffRequestResponse:
        return (await self.build_responses(db, [request]))[0]

    async def list_requests(
        self,
        db: AsyncSession,
        business_id: UUID,
        staff_member_id: UUID | None = None,
        status: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> PaginatedResponse:
        items, total = await time_off_request_repository.get_filtered(
            db, business_id, staff_member_id=staff_member_id, status=status,
            start_date=start_date, end_date=end_date, page=page, per_page=per_page,
        )
        return PaginatedResponse(
            items=await self.build_responses(db, items),
            total=total,
            page=page,
            per_page=per_page,
        )

    async def get_request(self, db: AsyncSession, request_id: UUID, business_id: UUID) -> TimeOffRequest:
        request: TimeOffRequest | None = await time_off_request_repository.get_by_id(db, request_id, business_id)
        if request is None:
            raise NotFoundError("Time-off request not found")
        return request

    async def create_request(
        self,
        db: AsyncSession,
        business_id: UUID,
        caller: StaffMember,
        data: TimeOffRequestCreate,
    ) -> TimeOffRequest:
        """휴가 요청을 생성합니다.

        Create a Pending request. Staff members file for themselves; filing
        for someone else needs TimeOff.Manage.

        Raises:
            ForbiddenError: 다른 직원 대리 요청 권한 없음 (No TimeOff.Manage for another staff member)
            BadRequestError: 직원/유형 없음, 비활성 유형, 승인된 요청과 겹침
                             (Unknown staff/type, inactive type, overlaps an approved request)
        """
        staff_member_id: UUID = data.staff_member_id or caller.id
        if staff_member_id != caller.id and not await permission_service.check(db, caller, "TimeOff.Manage"):
            raise ForbiddenError("Insufficient permissions to request time off for another staff member")
        await staff_service.ensure_in_business(db, staff_member_id, business_id)

        time_off_type: TimeOffType | None = await time_off_type_repository.get_by_id(
            db, data.time_off_type_id, business_id,
        )
        if time_off_type is None:
            raise BadRequestError("Time-off type not found")
        if not time_off_type.is_active:
            raise BadRequestError("Time-off type is inactive")

        overlapping: Sequence[TimeOffRequest] = await time_off_request_repository.get_approved_overlapping(
            db, business_id, staff_member_id, data.start_date, data.end_date,
        )
        if overlapping:
            raise BadRequestError("This time-off request overlaps with an existing approved request")

        return await time_off_request_repository.create(db, {
            "business_id": business_id,
            "staff_member_id": staff_member_id,
            "time_off_type_id": time_off_type.id,
            "start_date": data.start_date,
            "end_date": data.end_date,
            "is_all_day": data.is_all_day,
            "start_time": None if data.is_all_day else parse_hhmm(data.start_time),
            "end_time": None if data.is_all_day else parse_hhmm(data.end_time),
            "status": time_off_states.PENDING,
            "notes": data.notes,
        })

    async def approve_request(
        self,
        db: AsyncSession,
        request_id: UUID,
        business_id: UUID,
        approver: StaffMember,
        notes: str | None = None,
    ) -> TimeOffRequest:
        """휴가 요청을 승인합니다 — 겹치는 근무가 있어도 승인, 경고 로그.

        Approve a Pending request. Scheduled or confirmed shifts inside the
        period do not block approval; they are logged for follow-up.
        """
        request: TimeOffRequest = await self.get_request(db, request_id, business_id)
        time_off_states.transition(request, time_off_states.APPROVED, approver_id=approver.id, notes=notes)

        shifts: Sequence[Shift] = await shift_repository.get_in_range(
            db, business_id, request.start_date, request.end_date, staff_member_id=request.staff_member_id,
        )
        busy: list[Shift] = [s for s in shifts if s.status in BUSY_SHIFT_STATUSES]
        if busy:
            logger.warning(
                "Time-off %s approved over %d scheduled shift(s) for staff member %s: %s",
                request.id, len(busy), request.staff_member_id,
                ", ".join(s.date.isoformat() for s in busy),
            )

        await db.flush()
        await db.refresh(request)
        return request

    async def deny_request(
        self,
        db: AsyncSession,
        request_id: UUID,
        business_id: UUID,
        approver: StaffMember,
        notes: str | None = None,
    ) -> TimeOffRequest:
        request: TimeOffRequest = await self.get_request(db, request_id, business_id)
        time_off_states.transition(request, time_off_states.DENIED, approver_id=approver.id, notes=notes)
        await db.flush()
        await db.refresh(request)
        return request

    async def cancel_request(
        self,
        db: AsyncSession,
        request_id: UUID,
        business_id: UUID,
        caller: StaffMember,
    ) -> TimeOffRequest:
        """휴가 요청을 취소합니다 — 본인 요청 또는 TimeOff.Manage 권한.

        Cancel a Pending request. Only the requester or someone with
        TimeOff.Manage may cancel.
        """
        request: TimeOffRequest = await self.get_request(db, request_id, business_id)
        if request.staff_member_id != caller.id and not await permission_service.check(db, caller, "TimeOff.Manage"):
            raise ForbiddenError("Only the requester or a time-off manager can cancel this request")
        time_off_states.transition(request, time_off_states.CANCELLED)
        await db.flush()
        await db.refresh(request)
        return request

    async def pending_count(self, db: AsyncSession, business_id: UUID) -> int:
        return await time_off_request_repository.count_pending(db, business_id)


# 싱글턴 인스턴스 — Singleton instance
time_off_service: TimeOffService = TimeOffService()
