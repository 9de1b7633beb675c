"""근무 서비스 — 근무 CRUD 및 충돌 검사 게이트.

Shift Service — Business logic for one-off shifts.
Every create and update runs the conflict checker under a per-staff-member
lock; error conflicts need the override flag and warnings need the force
flag, otherwise the write is rejected with 409 and the conflict list.
"""

import logging
from collections.abc import Iterable
from datetime import date
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.conflicts import CandidateShift, ConflictPolicy, ShiftConflict, detect_conflicts, is_blocked, week_bounds
from app.models.schedule import RecurringShiftPattern, Shift
from app.models.staff import StaffMember
from app.repositories.recurring_shift_repository import recurring_shift_repository
from app.repositories.shift_repository import shift_repository
from app.schemas.schedule import ConflictCheckRequest, ShiftConflictResponse, ShiftCreate, ShiftResponse, ShiftUpdate
from app.services.scheduling_policy_service import scheduling_policy_service
from app.services.staff_service import staff_service
from app.utils.exceptions import BadRequestError, DuplicateError, NotFoundError, ScheduleConflictError
from app.utils.time_format import format_hhmm, parse_hhmm

logger = logging.getLogger(__name__)


def conflicts_to_dicts(conflicts: Iterable[ShiftConflict]) -> list[dict[str, str]]:
    return [{"type": c.type, "message": c.message, "severity": c.severity} for c in conflicts]


class ShiftService:
    """근무 서비스.

    Shift service handling CRUD, bulk creation and the conflict gate.
    """

    async def _staff_names(self, db: AsyncSession, staff_ids: set[UUID]) -> dict[UUID, str]:
        """직원 ID → 이름 매핑 (Batch-resolve staff names for responses)."""
        if not staff_ids:
            return {}
        result = await db.execute(
            select(StaffMember.id, StaffMember.first_name, StaffMember.last_name)
            .where(StaffMember.id.in_(staff_ids))
        )
        return {row.id: f"{row.first_name} {row.last_name}" for row in result.all()}

    @staticmethod
    def to_response(shift: Shift, staff_name: str | None = None) -> ShiftResponse:
        return ShiftResponse(
            id=str(shift.id),
            business_id=str(shift.business_id),
            staff_member_id=str(shift.staff_member_id),
            staff_member_name=staff_name,
            date=shift.date,
            start_time=format_hhmm(shift.start_time),
            end_time=format_hhmm(shift.end_time),
            shift_type=shift.shift_type,
            status=shift.status,
            location_id=str(shift.location_id) if shift.location_id else None,
            notes=shift.notes,
            pattern_id=str(shift.pattern_id) if shift.pattern_id else None,
            is_override=shift.is_override,
            created_at=shift.created_at,
            updated_at=shift.updated_at,
        )

    async def build_responses(self, db: AsyncSession, shifts: Sequence[Shift]) -> list[ShiftResponse]:
        names: dict[UUID, str] = await self._staff_names(db, {s.staff_member_id for s in shifts})
        return [self.to_response(s, names.get(s.staff_member_id)) for s in shifts]

    async def build_response(self, db: AsyncSession, shift: Shift) -> ShiftResponse:
        return (await self.build_responses(db, [shift]))[0]

    async def list_shifts(
        self,
        db: AsyncSession,
        business_id: UUID,
        start_date: date,
        end_date: date,
        staff_member_id: UUID | None = None,
        location_id: UUID | None = None,
        status: str | None = None,
    ) -> list[ShiftResponse]:
        if end_date < start_date:
            raise BadRequestError("end_date must not be before start_date")
        shifts: Sequence[Shift] = await shift_repository.get_in_range(
            db, business_id, start_date, end_date,
            staff_member_id=staff_member_id, location_id=location_id, status=status,
        )
        return await self.build_responses(db, shifts)

    async def get_shift(self, db: AsyncSession, shift_id: UUID, business_id: UUID) -> Shift:
        shift: Shift | None = await shift_repository.get_by_id(db, shift_id, business_id)
        if shift is None:
            raise NotFoundError("Shift not found")
        return shift

    async def detect(
        self,
        db: AsyncSession,
        business_id: UUID,
        candidate: CandidateShift,
        policy: ConflictPolicy,
        exclude_shift_id: UUID | None = None,
        pending: Sequence[Any] = (),
    ) -> list[ShiftConflict]:
        """저장된 근무(및 같은 요청의 대기 근무)에 대해 충돌을 검사합니다.

        Run the conflict checker against stored shifts plus ``pending`` ones
        (earlier entries of the same bulk request).

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            business_id: 사업장 UUID (Business UUID)
            candidate: 검사 대상 (Candidate shift)
            policy: 임계값 (Thresholds)
            exclude_shift_id: 수정 중인 근무 (Shift being updated)
            pending: 아직 저장되지 않은 근무 (Unsaved shifts to include)

        Returns:
            list[ShiftConflict]: 충돌 목록 (Ordered conflicts)
        """
        week_start, week_end = week_bounds(candidate.date)
        staff_shifts: list[Any] = list(await shift_repository.get_in_range(
            db, business_id, week_start, week_end, staff_member_id=candidate.staff_member_id,
        ))
        location_shifts: list[Any] = []
        if candidate.location_id is not None and policy.location_capacity is not None:
            location_shifts = list(await shift_repository.get_at_location(
                db, business_id, candidate.location_id, candidate.date,
            ))

        staff_shifts.extend(pending)
        location_shifts.extend(pending)
        return detect_conflicts(
            candidate,
            staff_shifts,
            location_shifts,
            policy=policy,
            exclude_shift_id=exclude_shift_id,
        )

    async def check_conflicts(
        self,
        db: AsyncSession,
        business_id: UUID,
        data: ConflictCheckRequest,
    ) -> list[ShiftConflictResponse]:
        """쓰기 없이 충돌만 검사합니다 (Dry-run conflict check, no write)."""
        candidate = CandidateShift(
            staff_member_id=data.staff_member_id,
            date=data.date,
            start_time=parse_hhmm(data.start_time),
            end_time=parse_hhmm(data.end_time),
            location_id=data.location_id,
        )
        policy: ConflictPolicy = await scheduling_policy_service.resolve_policy(db, business_id)
        conflicts: list[ShiftConflict] = await self.detect(
            db, business_id, candidate, policy, exclude_shift_id=data.exclude_shift_id,
        )
        return [ShiftConflictResponse(**c) for c in conflicts_to_dicts(conflicts)]

    async def _validate_pattern_link(
        self,
        db: AsyncSession,
        business_id: UUID,
        pattern_id: UUID | None,
        staff_member_id: UUID,
        work_date: date,
        exclude_shift_id: UUID | None = None,
    ) -> None:
        """패턴 대체 근무 검증 — 같은 직원의 패턴이며 날짜당 1건.

        A shift linked to a pattern must belong to the same staff member's
        pattern, and at most one stored shift replaces an occurrence.
        """
        if pattern_id is None:
            return
        pattern: RecurringShiftPattern | None = await recurring_shift_repository.get_by_id(
            db, pattern_id, business_id,
        )
        if pattern is None:
            raise NotFoundError("Recurring shift pattern not found")
        if pattern.staff_member_id != staff_member_id:
            raise BadRequestError("Pattern belongs to a different staff member")
        if await shift_repository.count_for_pattern_on(db, pattern.id, work_date, exclude_id=exclude_shift_id) > 0:
            raise DuplicateError("This pattern occurrence already has a shift")

    def _new_shift(self, business_id: UUID, data: ShiftCreate) -> Shift:
        return Shift(
            business_id=business_id,
            staff_member_id=data.staff_member_id,
            date=data.date,
            start_time=parse_hhmm(data.start_time),
            end_time=parse_hhmm(data.end_time),
            shift_type=data.shift_type,
            status=data.status,
            location_id=data.location_id,
            notes=data.notes,
            pattern_id=data.pattern_id,
            is_override=data.is_override or data.pattern_id is not None,
        )

    def _gate(self, conflicts: list[ShiftConflict], force: bool, override: bool, context: str) -> None:
        if is_blocked(conflicts, force=force, override=override):
            logger.info("Shift %s blocked by %d conflict(s): %s", context, len(conflicts),
                        "; ".join(c.message for c in conflicts))
            raise ScheduleConflictError(conflicts_to_dicts(conflicts))
        if conflicts:
            logger.warning("Shift %s accepted with %d conflict(s) (force=%s, override=%s)",
                           context, len(conflicts), force, override)

    async def create_shift(
        self,
        db: AsyncSession,
        business_id: UUID,
        data: ShiftCreate,
        force: bool = False,
        override: bool = False,
    ) -> Shift:
        """근무를 생성합니다 — 충돌 검사 후 삽입.

        Create a shift. The staff member lock is held from the check until
        the transaction ends, so concurrent creates cannot both pass.

        Raises:
            BadRequestError: 사업장 소속이 아닌 직원 (Staff member not in this business)
            ScheduleConflictError: 차단된 충돌 (Blocking conflicts, 409)
        """
        await staff_service.ensure_in_business(db, data.staff_member_id, business_id)
        await self._validate_pattern_link(db, business_id, data.pattern_id, data.staff_member_id, data.date)
        await shift_repository.lock_staff_member(db, data.staff_member_id)

        shift: Shift = self._new_shift(business_id, data)
        policy: ConflictPolicy = await scheduling_policy_service.resolve_policy(db, business_id)
        conflicts: list[ShiftConflict] = await self.detect(
            db, business_id,
            CandidateShift(shift.staff_member_id, shift.date, shift.start_time, shift.end_time, shift.location_id),
            policy,
        )
        self._gate(conflicts, force, override, "create")

        db.add(shift)
        await db.flush()
        await db.refresh(shift)
        return shift

    async def bulk_create(
        self,
        db: AsyncSession,
        business_id: UUID,
        items: list[ShiftCreate],
        force: bool = False,
        override: bool = False,
    ) -> list[Shift]:
        """근무를 일괄 생성합니다 — 전부 성공 또는 전부 실패.

        Create several shifts at once. Each entry is checked against stored
        shifts and the earlier entries; conflicts are combined without
        duplicates and gate the whole batch.
        """
        staff_ids: list[UUID] = sorted({item.staff_member_id for item in items})
        for staff_member_id in staff_ids:
            await staff_service.ensure_in_business(db, staff_member_id, business_id)
        linked: set[tuple[UUID, date]] = set()
        for item in items:
            await self._validate_pattern_link(db, business_id, item.pattern_id, item.staff_member_id, item.date)
            if item.pattern_id is not None:
                # 같은 요청 안에서도 (패턴, 날짜)당 1건 — One shift per (pattern, date) within the batch too
                if (item.pattern_id, item.date) in linked:
                    raise DuplicateError("This pattern occurrence already has a shift")
                linked.add((item.pattern_id, item.date))
        # 고정 순서로 잠금 — Lock in a fixed order
        for staff_member_id in staff_ids:
            await shift_repository.lock_staff_member(db, staff_member_id)

        policy: ConflictPolicy = await scheduling_policy_service.resolve_policy(db, business_id)
        pending: list[Shift] = []
        combined: list[ShiftConflict] = []
        seen: set[tuple[str, str]] = set()
        for item in items:
            shift: Shift = self._new_shift(business_id, item)
            conflicts: list[ShiftConflict] = await self.detect(
                db, business_id,
                CandidateShift(shift.staff_member_id, shift.date, shift.start_time, shift.end_time, shift.location_id),
                policy,
                pending=pending,
            )
            for conflict in conflicts:
                if (conflict.type, conflict.message) not in seen:
                    seen.add((conflict.type, conflict.message))
                    combined.append(conflict)
            pending.append(shift)

        self._gate(combined, force, override, "bulk create")

        db.add_all(pending)
        await db.flush()
        for shift in pending:
            await db.refresh(shift)
        return pending

    async def update_shift(
        self,
        db: AsyncSession,
        shift_id: UUID,
        business_id: UUID,
        data: ShiftUpdate,
        force: bool = False,
        override: bool = False,
    ) -> Shift:
        """근무를 수정합니다 — 시간/날짜/직원/매장 변경 시 충돌 재검사.

        Update a shift. Changes to the staff member, date, times or location
        re-run the conflict gate, excluding the shift itself. A pattern-linked
        shift keeps its staff member and may only move to a date that pattern
        has no other stored shift on.
        """
        shift: Shift = await self.get_shift(db, shift_id, business_id)
        update_data: dict = data.model_dump(exclude_unset=True)

        staff_member_id: UUID = update_data.get("staff_member_id") or shift.staff_member_id
        work_date: date = update_data.get("date") or shift.date
        start = parse_hhmm(update_data["start_time"]) if update_data.get("start_time") else shift.start_time
        end = parse_hhmm(update_data["end_time"]) if update_data.get("end_time") else shift.end_time
        location_id: UUID | None = update_data["location_id"] if "location_id" in update_data else shift.location_id
        if start >= end:
            raise BadRequestError("start_time must be before end_time")

        placement_changed: bool = (
            staff_member_id != shift.staff_member_id
            or work_date != shift.date
            or start != shift.start_time
            or end != shift.end_time
            or location_id != shift.location_id
        )
        if staff_member_id != shift.staff_member_id:
            await staff_service.ensure_in_business(db, staff_member_id, business_id)
            if shift.pattern_id is not None:
                raise BadRequestError("Pattern-linked shift cannot move to a different staff member")
        if shift.pattern_id is not None and work_date != shift.date:
            await self._validate_pattern_link(
                db, business_id, shift.pattern_id, staff_member_id, work_date, exclude_shift_id=shift.id,
            )

        if placement_changed:
            await shift_repository.lock_staff_member(db, staff_member_id)
            policy: ConflictPolicy = await scheduling_policy_service.resolve_policy(db, business_id)
            conflicts: list[ShiftConflict] = await self.detect(
                db, business_id,
                CandidateShift(staff_member_id, work_date, start, end, location_id),
                policy,
                exclude_shift_id=shift.id,
            )
            self._gate(conflicts, force, override, "update")

        shift.staff_member_id = staff_member_id
        shift.date = work_date
        shift.start_time = start
        shift.end_time = end
        shift.location_id = location_id
        for field in ("shift_type", "status", "notes"):
            if field in update_data and (update_data[field] is not None or field == "notes"):
                setattr(shift, field, update_data[field])

        await db.flush()
        await db.refresh(shift)
        return shift

    async def delete_shift(self, db: AsyncSession, shift_id: UUID, business_id: UUID) -> None:
        """근무를 삭제합니다. 완료된 근무는 삭제 불가 (Completed shifts cannot be deleted)."""
        shift: Shift = await self.get_shift(db, shift_id, business_id)
        if shift.status == "Completed":
            raise BadRequestError("Cannot delete a completed shift")
        await db.delete(shift)
        await db.flush()


# 싱글턴 인스턴스 — Singleton instance
shift_service: ShiftService = ShiftService()
