"""발생 병합 및 가용성 집계 테스트.

Occurrence merging and availability aggregation tests — Override
suppression, inactive shifts and time-off day slots.
"""

import uuid
from datetime import date, time
from types import SimpleNamespace

from app.domain.availability import aggregate_availability, merge_occurrences, time_off_slots

STAFF = uuid.uuid4()


def pattern(rrule="FREQ=WEEKLY;BYDAY=MO,WE,FR", start=date(2024, 6, 1)):
    return SimpleNamespace(
        id=uuid.uuid4(),
        staff_member_id=STAFF,
        location_id=None,
        rrule=rrule,
        start_time=time(9, 0),
        end_time=time(17, 0),
        pattern_start=start,
        pattern_end=None,
        shift_type="Opening",
        notes=None,
        is_active=True,
    )


def shift(day: date, start=(12, 0), end=(18, 0), pattern_id=None, status="Scheduled"):
    return SimpleNamespace(
        id=uuid.uuid4(),
        staff_member_id=STAFF,
        date=day,
        start_time=time(*start),
        end_time=time(*end),
        shift_type="Custom",
        status=status,
        location_id=None,
        notes=None,
        pattern_id=pattern_id,
    )


def time_off(start: date, end: date, status="Approved", is_all_day=True, start_time=None, end_time=None):
    return SimpleNamespace(
        id=uuid.uuid4(),
        start_date=start,
        end_date=end,
        status=status,
        is_all_day=is_all_day,
        start_time=start_time,
        end_time=end_time,
    )


class TestMergeOccurrences:
    """근무와 패턴 발생 병합."""

    def test_override_replaces_occurrence(self):
        """패턴 연결 근무가 같은 날짜의 발생을 대체."""
        p = pattern()
        override = shift(date(2024, 6, 5), pattern_id=p.id)
        items = merge_occurrences([override], [p], date(2024, 6, 3), date(2024, 6, 9))

        assert [i.date for i in items] == [date(2024, 6, 3), date(2024, 6, 5), date(2024, 6, 7)]
        wednesday = items[1]
        assert wednesday.shift_id == override.id
        assert wednesday.start_time == time(12, 0)
        assert wednesday.is_from_pattern is True
        assert items[0].shift_id is None

    def test_unlinked_shift_does_not_suppress(self):
        p = pattern()
        items = merge_occurrences([shift(date(2024, 6, 5))], [p], date(2024, 6, 5), date(2024, 6, 5))
        assert len(items) == 2
        # 같은 날짜는 시작 시각 순 (Same date ordered by start time)
        assert [i.start_time for i in items] == [time(9, 0), time(12, 0)]

    def test_override_outside_range_still_applies_inside(self):
        p = pattern()
        items = merge_occurrences([shift(date(2024, 6, 10), pattern_id=p.id)], [p], date(2024, 6, 3), date(2024, 6, 9))
        assert len(items) == 3


class TestAggregateAvailability:
    """직원 점유 슬롯 집계."""

    def test_shifts_patterns_and_time_off(self):
        p = pattern()
        slots = aggregate_availability(
            [shift(date(2024, 6, 4))],
            [p],
            [time_off(date(2024, 6, 6), date(2024, 6, 6))],
            date(2024, 6, 3),
            date(2024, 6, 7),
        )
        assert [(s.date.day, s.type, s.source) for s in slots] == [
            (3, "shift", "pattern"),
            (4, "shift", "shift"),
            (5, "shift", "pattern"),
            (6, "time-off", "time-off"),
            (7, "shift", "pattern"),
        ]
        assert slots[0].source_id == p.id

    def test_cancelled_override_hides_occurrence_without_busy_slot(self):
        """취소된 대체 근무 — 발생은 숨기고 점유 슬롯도 없음."""
        p = pattern()
        cancelled = shift(date(2024, 6, 5), pattern_id=p.id, status="Cancelled")
        slots = aggregate_availability([cancelled], [p], [], date(2024, 6, 5), date(2024, 6, 5))
        assert slots == []

    def test_only_approved_time_off(self):
        requests = [
            time_off(date(2024, 6, 3), date(2024, 6, 3), status="Pending"),
            time_off(date(2024, 6, 3), date(2024, 6, 3), status="Denied"),
        ]
        assert aggregate_availability([], [], requests, date(2024, 6, 1), date(2024, 6, 30)) == []

    def test_inverted_range_is_empty(self):
        assert aggregate_availability([shift(date(2024, 6, 3))], [], [], date(2024, 6, 5), date(2024, 6, 1)) == []


class TestTimeOffSlots:
    """휴가 일 단위 슬롯."""

    def test_all_day_clipped_to_range(self):
        request = time_off(date(2024, 5, 30), date(2024, 6, 2))
        slots = time_off_slots(request, date(2024, 6, 1), date(2024, 6, 30))
        assert [s.date for s in slots] == [date(2024, 6, 1), date(2024, 6, 2)]
        assert all(s.start_time == time(0, 0) and s.end_time == time(23, 59) for s in slots)

    def test_partial_day_uses_request_times(self):
        request = time_off(
            date(2024, 6, 3), date(2024, 6, 3), is_all_day=False, start_time=time(13, 0), end_time=time(15, 0),
        )
        slots = time_off_slots(request, date(2024, 6, 1), date(2024, 6, 30))
        assert [(s.start_time, s.end_time) for s in slots] == [(time(13, 0), time(15, 0))]
        assert slots[0].source_id == request.id
