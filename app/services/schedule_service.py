"""스케줄 서비스 — 근무 발생 목록 및 가용성 조회.

Schedule Service — Read-side scheduling views.
Combines stored shifts with expanded recurring patterns (override-aware)
and builds a staff member's busy slots including approved time-off.
"""

from datetime import date
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.availability import AvailabilitySlot, ScheduledItem, aggregate_availability, merge_occurrences
from app.models.schedule import RecurringShiftPattern, Shift
from app.models.time_off import TimeOffRequest
from app.repositories.recurring_shift_repository import recurring_shift_repository
from app.repositories.shift_repository import shift_repository
from app.repositories.time_off_repository import time_off_request_repository
from app.schemas.schedule import AvailabilitySlotResponse, ShiftOccurrenceResponse
from app.services.staff_service import staff_service
from app.utils.exceptions import BadRequestError
from app.utils.time_format import format_hhmm

# 조회 구간 최대 일수 — Longest range a single request may expand
MAX_RANGE_DAYS: int = 366


def _validate_range(start_date: date, end_date: date) -> None:
    if end_date < start_date:
        raise BadRequestError("end_date must not be before start_date")
    if (end_date - start_date).days >= MAX_RANGE_DAYS:
        raise BadRequestError(f"Date range must not exceed {MAX_RANGE_DAYS} days")


class ScheduleService:
    """스케줄 조회 서비스.

    Schedule read service: occurrence listing and availability slots.
    """

    async def _patterns_and_shifts(
        self,
        db: AsyncSession,
        business_id: UUID,
        start_date: date,
        end_date: date,
        staff_member_id: UUID | None,
        location_id: UUID | None,
    ) -> tuple[list[Shift], Sequence[RecurringShiftPattern], list[Shift]]:
        """구간의 근무와 활성 패턴을 조회합니다.

        Load stored shifts and active patterns for the range. Shifts linked
        to the loaded patterns are added even when the filters exclude them,
        so their occurrences stay suppressed.
        """
        shifts: list[Shift] = list(await shift_repository.get_in_range(
            db, business_id, start_date, end_date,
            staff_member_id=staff_member_id, location_id=location_id,
        ))
        patterns: Sequence[RecurringShiftPattern] = await recurring_shift_repository.get_active_in_range(
            db, business_id, start_date, end_date,
            staff_member_id=staff_member_id, location_id=location_id,
        )

        linked: Sequence[Shift] = await shift_repository.get_for_patterns(
            db, [p.id for p in patterns], start_date, end_date,
        )
        loaded: set[UUID] = {s.id for s in shifts}
        suppressors: list[Shift] = [s for s in linked if s.id not in loaded]
        return shifts, patterns, suppressors

    async def list_occurrences(
        self,
        db: AsyncSession,
        business_id: UUID,
        start_date: date,
        end_date: date,
        staff_member_id: UUID | None = None,
        location_id: UUID | None = None,
    ) -> list[ShiftOccurrenceResponse]:
        """근무와 패턴 발생을 합친 일정 목록.

        Stored shifts plus pattern occurrences in [start_date, end_date],
        ordered by date then start time. An occurrence replaced by a stored
        shift is not listed.
        """
        _validate_range(start_date, end_date)
        shifts, patterns, suppressors = await self._patterns_and_shifts(
            db, business_id, start_date, end_date, staff_member_id, location_id,
        )

        items: list[ScheduledItem] = merge_occurrences(shifts, patterns, start_date, end_date)
        if suppressors:
            hidden: set[tuple[UUID, date]] = {(s.pattern_id, s.date) for s in suppressors}
            items = [i for i in items if i.shift_id is not None or (i.pattern_id, i.date) not in hidden]

        return [
            ShiftOccurrenceResponse(
                date=item.date,
                start_time=format_hhmm(item.start_time),
                end_time=format_hhmm(item.end_time),
                staff_member_id=str(item.staff_member_id),
                location_id=str(item.location_id) if item.location_id else None,
                shift_type=item.shift_type,
                status=item.status,
                is_from_pattern=item.is_from_pattern,
                pattern_id=str(item.pattern_id) if item.pattern_id else None,
                shift_id=str(item.shift_id) if item.shift_id else None,
                notes=item.notes,
            )
            for item in items
        ]

    async def availability(
        self,
        db: AsyncSession,
        business_id: UUID,
        staff_member_id: UUID,
        start_date: date,
        end_date: date,
    ) -> list[AvailabilitySlotResponse]:
        """직원의 점유 슬롯 — 근무, 패턴 발생, 승인된 휴가.

        Busy slots of one staff member: shifts, pattern occurrences and
        approved time-off, sorted by date then start time.
        """
        _validate_range(start_date, end_date)
        await staff_service.ensure_in_business(db, staff_member_id, business_id)

        shifts: Sequence[Shift] = await shift_repository.get_in_range(
            db, business_id, start_date, end_date, staff_member_id=staff_member_id,
        )
        patterns: Sequence[RecurringShiftPattern] = await recurring_shift_repository.get_active_in_range(
            db, business_id, start_date, end_date, staff_member_id=staff_member_id,
        )
        time_off: Sequence[TimeOffRequest] = await time_off_request_repository.get_approved_overlapping(
            db, business_id, staff_member_id, start_date, end_date,
        )

        slots: list[AvailabilitySlot] = aggregate_availability(shifts, patterns, time_off, start_date, end_date)
        return [
            AvailabilitySlotResponse(
                date=slot.date,
                start_time=format_hhmm(slot.start_time),
                end_time=format_hhmm(slot.end_time),
                type=slot.type,
                source=slot.source,
                source_id=str(slot.source_id) if slot.source_id else None,
            )
            for slot in slots
        ]


# 싱글턴 인스턴스 — Singleton instance
schedule_service: ScheduleService = ScheduleService()
