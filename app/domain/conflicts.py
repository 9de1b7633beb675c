"""근무 충돌 검사기 — 중복/초과근무/매장 수용 인원 검사.

Shift conflict checker — overlap, overtime and location-capacity checks.
Works on plain shift-like objects (id, staff_member_id, date, start_time,
end_time, status, location_id) so it can be fed from the ORM or from tests.

Severity:
    - error: 같은 직원의 시간 중복 — 명시적 override 없이는 생성 불가
             (Same-staff overlap; blocks unless explicitly overridden)
    - warning: 초과근무, 매장 수용 인원 초과 — 강제 생성 가능
               (Overtime or location capacity; bypassable with force)
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any
from uuid import UUID

from app.utils.time_format import format_hhmm

# 충돌 판정에서 제외되는 상태 (Statuses that never occupy time)
INACTIVE_SHIFT_STATUSES: frozenset[str] = frozenset({"Cancelled", "Rejected"})

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"


@dataclass(frozen=True)
class ShiftConflict:
    """충돌 항목 — type, message, severity."""

    type: str
    message: str
    severity: str


@dataclass(frozen=True)
class ConflictPolicy:
    """충돌 검사 임계값. None이면 해당 검사 비활성.

    Conflict thresholds. A value of None disables that check.

    Attributes:
        daily_overtime_hours: 일일 초과근무 기준 시간 (Daily overtime threshold in hours)
        weekly_overtime_hours: 주간 초과근무 기준 시간, 일요일 시작 주 (Weekly threshold, Sunday-start week)
        location_capacity: 동시간대 매장 최대 인원 (Max other staff overlapping at a location)
    """

    daily_overtime_hours: float | None = None
    weekly_overtime_hours: float | None = 40.0
    location_capacity: int | None = None


@dataclass(frozen=True)
class CandidateShift:
    """검사 대상 근무 (Shift being created or updated)."""

    staff_member_id: UUID
    date: date
    start_time: time
    end_time: time
    location_id: UUID | None = None


def overlaps(start_a: time, end_a: time, start_b: time, end_b: time) -> bool:
    """반개구간 중복 여부 — 경계가 맞닿으면 중복 아님.

    Half-open interval overlap test; touching boundaries do not overlap.
    """
    return start_a < end_b and end_a > start_b


def shift_hours(start: time, end: time) -> float:
    """근무 시간(시간 단위) (Duration in hours)."""
    delta = datetime.combine(date.min, end) - datetime.combine(date.min, start)
    return delta.total_seconds() / 3600


def week_bounds(day: date) -> tuple[date, date]:
    """일요일 시작 주의 (시작일, 종료일) (Sunday-start week bounds, inclusive)."""
    start = day - timedelta(days=(day.weekday() + 1) % 7)
    return start, start + timedelta(days=6)


def _active(shifts: Iterable[Any], exclude_shift_id: UUID | None) -> list[Any]:
    return [
        s for s in shifts
        if s.status not in INACTIVE_SHIFT_STATUSES
        and (exclude_shift_id is None or s.id != exclude_shift_id)
    ]


def detect_conflicts(
    candidate: CandidateShift,
    staff_shifts: Iterable[Any],
    location_shifts: Iterable[Any] = (),
    policy: ConflictPolicy = ConflictPolicy(),
    exclude_shift_id: UUID | None = None,
) -> list[ShiftConflict]:
    """후보 근무에 대한 충돌 목록을 반환합니다.

    Return the ordered conflict list for a candidate shift.
    Order is always overlap → overtime → location_conflict, and within a
    type follows the order of the input shifts sorted by start time.

    Args:
        candidate: 검사 대상 근무 (Candidate shift)
        staff_shifts: 같은 직원의 해당 주(일~토) 근무 목록
                      (Same staff member's shifts in the candidate's Sunday-start week)
        location_shifts: 같은 매장, 같은 날짜의 근무 목록
                         (Shifts at the candidate's location on its date, any staff)
        policy: 임계값 설정 (Threshold configuration)
        exclude_shift_id: 수정 중인 자기 자신 근무 ID (Shift being updated in place)

    Returns:
        list[ShiftConflict]: 충돌 목록, 없으면 빈 리스트 (Conflicts, empty if none)
    """
    conflicts: list[ShiftConflict] = []
    mine: list[Any] = _active(
        (s for s in staff_shifts if s.staff_member_id == candidate.staff_member_id),
        exclude_shift_id,
    )
    same_day: list[Any] = sorted(
        (s for s in mine if s.date == candidate.date),
        key=lambda s: s.start_time,
    )

    for existing in same_day:
        if overlaps(existing.start_time, existing.end_time, candidate.start_time, candidate.end_time):
            conflicts.append(ShiftConflict(
                type="overlap",
                message=(
                    f"Overlaps existing shift {format_hhmm(existing.start_time)}-"
                    f"{format_hhmm(existing.end_time)} on {candidate.date.isoformat()}"
                ),
                severity=SEVERITY_ERROR,
            ))

    new_hours: float = shift_hours(candidate.start_time, candidate.end_time)

    if policy.daily_overtime_hours is not None:
        daily_total = new_hours + sum(shift_hours(s.start_time, s.end_time) for s in same_day)
        if daily_total > policy.daily_overtime_hours:
            conflicts.append(ShiftConflict(
                type="overtime",
                message=(
                    f"Daily hours ({daily_total:.1f}h) would exceed "
                    f"{policy.daily_overtime_hours:g}h threshold"
                ),
                severity=SEVERITY_WARNING,
            ))

    if policy.weekly_overtime_hours is not None:
        week_start, week_end = week_bounds(candidate.date)
        weekly_total = new_hours + sum(
            shift_hours(s.start_time, s.end_time)
            for s in mine
            if week_start <= s.date <= week_end
        )
        if weekly_total > policy.weekly_overtime_hours:
            conflicts.append(ShiftConflict(
                type="overtime",
                message=(
                    f"Weekly hours ({weekly_total:.1f}h) would exceed "
                    f"{policy.weekly_overtime_hours:g}h threshold"
                ),
                severity=SEVERITY_WARNING,
            ))

    if candidate.location_id is not None and policy.location_capacity is not None:
        others: set[UUID] = {
            s.staff_member_id
            for s in _active(location_shifts, exclude_shift_id)
            if s.location_id == candidate.location_id
            and s.date == candidate.date
            and s.staff_member_id != candidate.staff_member_id
            and overlaps(s.start_time, s.end_time, candidate.start_time, candidate.end_time)
        }
        if len(others) >= policy.location_capacity:
            conflicts.append(ShiftConflict(
                type="location_conflict",
                message=(
                    f"Location already has {len(others)} staff member(s) scheduled "
                    f"during this time (capacity {policy.location_capacity})"
                ),
                severity=SEVERITY_WARNING,
            ))

    return conflicts


def is_blocked(conflicts: Iterable[ShiftConflict], force: bool = False, override: bool = False) -> bool:
    """충돌 목록이 생성/수정을 막는지 판정합니다.

    Decide whether a conflict list blocks the write. Warnings are bypassed
    with ``force``; errors only with an explicit ``override``.
    """
    for conflict in conflicts:
        if conflict.severity == SEVERITY_ERROR and not override:
            return True
        if conflict.severity == SEVERITY_WARNING and not force:
            return True
    return False
