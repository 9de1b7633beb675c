"""근무 발생 병합 및 가용성 슬롯 집계.

Occurrence merging and availability aggregation.
Combines concrete shifts, recurring-pattern occurrences and approved time-off
into one ordered list. A concrete shift linked to a pattern (pattern_id)
replaces that pattern's occurrence on the shift's date.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date, time, timedelta
from typing import Any
from uuid import UUID

from app.domain.conflicts import INACTIVE_SHIFT_STATUSES
from app.domain.recurrence import RecurrenceRule, expand, parse_rule

SLOT_TYPE_SHIFT = "shift"
SLOT_TYPE_TIME_OFF = "time-off"

SOURCE_SHIFT = "shift"
SOURCE_PATTERN = "pattern"
SOURCE_TIME_OFF = "time-off"

# 종일 휴가의 표시 구간 (Display window for all-day time-off)
ALL_DAY_START: time = time(0, 0)
ALL_DAY_END: time = time(23, 59)


@dataclass(frozen=True)
class ScheduledItem:
    """병합된 일정 항목 — 실제 근무 또는 패턴 발생.

    Merged schedule entry: either a stored shift (shift_id set) or a
    pattern occurrence (shift_id None).
    """

    date: date
    start_time: time
    end_time: time
    staff_member_id: UUID
    location_id: UUID | None
    shift_type: str
    pattern_id: UUID | None
    shift_id: UUID | None
    status: str | None
    notes: str | None = None

    @property
    def is_from_pattern(self) -> bool:
        return self.pattern_id is not None


@dataclass(frozen=True)
class AvailabilitySlot:
    """점유 구간 (Busy slot) with its origin."""

    date: date
    start_time: time
    end_time: time
    type: str
    source: str
    source_id: UUID | None


def _sort_key(item: Any) -> tuple[date, time]:
    return item.date, item.start_time


def merge_occurrences(
    shifts: Iterable[Any],
    patterns: Iterable[Any],
    range_start: date,
    range_end: date,
    parser: Callable[[str], RecurrenceRule] = parse_rule,
) -> list[ScheduledItem]:
    """실제 근무와 패턴 발생을 병합합니다.

    Merge stored shifts in range with occurrences of the given patterns.
    Every stored shift with a pattern_id suppresses that pattern's occurrence
    on the same date, whatever its status. Result is ordered by date then
    start time; ties keep stored shifts ahead of pattern occurrences.
    """
    items: list[ScheduledItem] = []
    overridden: set[tuple[UUID, date]] = set()

    for shift in shifts:
        if shift.pattern_id is not None:
            overridden.add((shift.pattern_id, shift.date))
        if not range_start <= shift.date <= range_end:
            continue
        items.append(ScheduledItem(
            date=shift.date,
            start_time=shift.start_time,
            end_time=shift.end_time,
            staff_member_id=shift.staff_member_id,
            location_id=shift.location_id,
            shift_type=shift.shift_type,
            pattern_id=shift.pattern_id,
            shift_id=shift.id,
            status=shift.status,
            notes=shift.notes,
        ))

    for pattern in patterns:
        for occurrence in expand(pattern, range_start, range_end, parser=parser):
            if (pattern.id, occurrence.date) in overridden:
                continue
            items.append(ScheduledItem(
                date=occurrence.date,
                start_time=occurrence.start_time,
                end_time=occurrence.end_time,
                staff_member_id=occurrence.staff_member_id,
                location_id=occurrence.location_id,
                shift_type=occurrence.shift_type,
                pattern_id=occurrence.pattern_id,
                shift_id=None,
                status=None,
                notes=occurrence.notes,
            ))

    items.sort(key=_sort_key)
    return items


def time_off_slots(request: Any, range_start: date, range_end: date) -> list[AvailabilitySlot]:
    """휴가 요청을 조회 구간에 맞춰 일 단위 슬롯으로 분할합니다.

    Split a time-off request into one slot per day, clipped to the range.
    All-day requests (or partial ones missing a time) use 00:00-23:59.
    """
    first: date = max(request.start_date, range_start)
    last: date = min(request.end_date, range_end)

    start: time = ALL_DAY_START
    end: time = ALL_DAY_END
    if not request.is_all_day:
        start = request.start_time or ALL_DAY_START
        end = request.end_time or ALL_DAY_END

    slots: list[AvailabilitySlot] = []
    day: date = first
    while day <= last:
        slots.append(AvailabilitySlot(
            date=day,
            start_time=start,
            end_time=end,
            type=SLOT_TYPE_TIME_OFF,
            source=SOURCE_TIME_OFF,
            source_id=request.id,
        ))
        day += timedelta(days=1)
    return slots


def aggregate_availability(
    shifts: Iterable[Any],
    patterns: Iterable[Any],
    time_off_requests: Iterable[Any],
    range_start: date,
    range_end: date,
    parser: Callable[[str], RecurrenceRule] = parse_rule,
) -> list[AvailabilitySlot]:
    """한 직원의 점유 슬롯을 집계합니다.

    Aggregate busy slots for one staff member over [range_start, range_end].

    Args:
        shifts: 직원의 근무 목록, 상태 무관 (Staff member's stored shifts, any status)
        patterns: 직원의 반복 패턴 목록 (Staff member's recurring patterns)
        time_off_requests: 직원의 휴가 요청 목록 (Staff member's time-off requests)
        range_start: 조회 시작일 (Range start, inclusive)
        range_end: 조회 종료일 (Range end, inclusive)
        parser: 규칙 파서 (Rule parser)

    Returns:
        list[AvailabilitySlot]: 날짜, 시작 시각 순 정렬 (Sorted by date then start time)
    """
    if range_start > range_end:
        return []

    slots: list[AvailabilitySlot] = []
    for item in merge_occurrences(shifts, patterns, range_start, range_end, parser=parser):
        # 취소/반려 근무는 점유가 아님 — 패턴 억제 효과만 유지
        # Cancelled/rejected shifts are not busy; they still suppressed their occurrence above
        if item.status in INACTIVE_SHIFT_STATUSES:
            continue
        slots.append(AvailabilitySlot(
            date=item.date,
            start_time=item.start_time,
            end_time=item.end_time,
            type=SLOT_TYPE_SHIFT,
            source=SOURCE_PATTERN if item.shift_id is None else SOURCE_SHIFT,
            source_id=item.shift_id if item.shift_id is not None else item.pattern_id,
        ))

    for request in time_off_requests:
        if request.status != "Approved":
            continue
        if request.end_date < range_start or request.start_date > range_end:
            continue
        slots.extend(time_off_slots(request, range_start, range_end))

    slots.sort(key=_sort_key)
    return slots
