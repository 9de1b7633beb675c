"""반복 근무 패턴 서비스.

Recurring Shift Pattern Service — CRUD for recurring patterns. The rule
is parsed on every write so a stored pattern always expands cleanly.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.recurrence import parse_rule
from app.models.schedule import RecurringShiftPattern
from app.models.staff import StaffMember
from app.repositories.recurring_shift_repository import recurring_shift_repository
from app.repositories.shift_repository import shift_repository
from app.schemas.schedule import (
    RecurringShiftPatternCreate,
    RecurringShiftPatternResponse,
    RecurringShiftPatternUpdate,
)
from app.services.staff_service import staff_service
from app.utils.exceptions import BadRequestError, NotFoundError
from app.utils.time_format import format_hhmm, parse_hhmm


class RecurringShiftService:

    @staticmethod
    def to_response(pattern: RecurringShiftPattern, staff_name: str | None = None) -> RecurringShiftPatternResponse:
        return RecurringShiftPatternResponse(
            id=str(pattern.id),
            business_id=str(pattern.business_id),
            staff_member_id=str(pattern.staff_member_id),
            staff_member_name=staff_name,
            location_id=str(pattern.location_id) if pattern.location_id else None,
            rrule=pattern.rrule,
            start_time=format_hhmm(pattern.start_time),
            end_time=format_hhmm(pattern.end_time),
            pattern_start=pattern.pattern_start,
            pattern_end=pattern.pattern_end,
            shift_type=pattern.shift_type,
            notes=pattern.notes,
            is_active=pattern.is_active,
            created_at=pattern.created_at,
            updated_at=pattern.updated_at,
        )

    async def list_patterns(
        self,
        db: AsyncSession,
        business_id: UUID,
        staff_member_id: UUID | None = None,
        location_id: UUID | None = None,
        active_only: bool = False,
    ) -> list[RecurringShiftPatternResponse]:
        patterns: Sequence[RecurringShiftPattern] = await recurring_shift_repository.get_filtered(
            db, business_id, staff_member_id=staff_member_id, location_id=location_id, active_only=active_only,
        )
        return [self.to_response(p) for p in patterns]

    async def get_pattern(self, db: AsyncSession, pattern_id: UUID, business_id: UUID) -> RecurringShiftPattern:
        pattern: RecurringShiftPattern | None = await recurring_shift_repository.get_by_id(db, pattern_id, business_id)
        if pattern is None:
            raise NotFoundError("Recurring shift pattern not found")
        return pattern

    async def create_pattern(
        self,
        db: AsyncSession,
        business_id: UUID,
        data: RecurringShiftPatternCreate,
    ) -> RecurringShiftPatternResponse:
        """반복 패턴을 생성합니다.

        Create a recurring pattern after validating its rule.

        Raises:
            InvalidPatternError: 잘못된 규칙 (Malformed rule, 400)
            BadRequestError: 사업장 소속이 아닌 직원 (Staff member not in this business)
        """
        staff: StaffMember = await staff_service.ensure_in_business(db, data.staff_member_id, business_id)
        parse_rule(data.rrule)

        pattern: RecurringShiftPattern = await recurring_shift_repository.create(db, {
            "business_id": business_id,
            "staff_member_id": staff.id,
            "location_id": data.location_id,
            "rrule": data.rrule.strip(),
            "start_time": parse_hhmm(data.start_time),
            "end_time": parse_hhmm(data.end_time),
            "pattern_start": data.pattern_start,
            "pattern_end": data.pattern_end,
            "shift_type": data.shift_type,
            "notes": data.notes,
            "is_active": True,
        })
        return self.to_response(pattern, staff.full_name)

    async def update_pattern(
        self,
        db: AsyncSession,
        pattern_id: UUID,
        business_id: UUID,
        data: RecurringShiftPatternUpdate,
    ) -> RecurringShiftPatternResponse:
        pattern: RecurringShiftPattern = await self.get_pattern(db, pattern_id, business_id)
        update_data: dict = data.model_dump(exclude_unset=True)

        if update_data.get("rrule") is not None:
            parse_rule(update_data["rrule"])
            pattern.rrule = update_data["rrule"].strip()
        if update_data.get("start_time") is not None:
            pattern.start_time = parse_hhmm(update_data["start_time"])
        if update_data.get("end_time") is not None:
            pattern.end_time = parse_hhmm(update_data["end_time"])
        if pattern.start_time >= pattern.end_time:
            raise BadRequestError("start_time must be before end_time")

        if update_data.get("pattern_start") is not None:
            pattern.pattern_start = update_data["pattern_start"]
        if "pattern_end" in update_data:
            pattern.pattern_end = update_data["pattern_end"]
        if pattern.pattern_end is not None and pattern.pattern_end < pattern.pattern_start:
            raise BadRequestError("pattern_end must not be before pattern_start")

        for field in ("location_id", "notes"):
            if field in update_data:
                setattr(pattern, field, update_data[field])
        for field in ("shift_type", "is_active"):
            if update_data.get(field) is not None:
                setattr(pattern, field, update_data[field])

        await db.flush()
        await db.refresh(pattern)
        return self.to_response(pattern)

    async def delete_pattern(self, db: AsyncSession, pattern_id: UUID, business_id: UUID) -> None:
        """패턴을 삭제합니다 — 연결된 근무는 남고 pattern_id만 해제.

        Delete a pattern. Shifts materialized from it stay, unlinked.
        """
        pattern: RecurringShiftPattern = await self.get_pattern(db, pattern_id, business_id)
        await shift_repository.unlink_pattern(db, pattern.id)
        await db.delete(pattern)
        await db.flush()


# 싱글턴 인스턴스 — Singleton instance
recurring_shift_service: RecurringShiftService = RecurringShiftService()
