"""반복 규칙 파서/전개기 테스트.

Recurrence rule tests — Parsing, validation errors, and expansion of
recurring shift patterns into dated occurrences.
"""

import uuid
from datetime import date, time
from types import SimpleNamespace

import pytest

from app.domain.recurrence import expand, parse_rule
from app.utils.exceptions import InvalidPatternError


def make_pattern(rrule: str, pattern_start: date, pattern_end: date | None = None, is_active: bool = True):
    return SimpleNamespace(
        id=uuid.uuid4(),
        staff_member_id=uuid.uuid4(),
        location_id=None,
        rrule=rrule,
        start_time=time(9, 0),
        end_time=time(17, 0),
        pattern_start=pattern_start,
        pattern_end=pattern_end,
        shift_type="Custom",
        notes=None,
        is_active=is_active,
    )


class TestParseRule:
    """규칙 파싱 테스트."""

    def test_weekly_byday(self):
        rule = parse_rule("FREQ=WEEKLY;BYDAY=MO,WE,FR")
        assert rule.freq == "WEEKLY"
        assert rule.interval == 1
        assert rule.by_day == (0, 2, 4)

    def test_prefix_and_lowercase(self):
        """RRULE: 접두사와 소문자 허용."""
        rule = parse_rule("rrule:freq=daily;interval=2")
        assert rule.freq == "DAILY"
        assert rule.interval == 2

    def test_until_with_time_part(self):
        rule = parse_rule("FREQ=DAILY;UNTIL=20240630T235959Z")
        assert rule.until == date(2024, 6, 30)

    @pytest.mark.parametrize("text", [
        "",
        "   ",
        "BYDAY=MO",
        "FREQ=YEARLY",
        "FREQ=WEEKLY;BYDAY=XX",
        "FREQ=WEEKLY;BYDAY=1MO",
        "FREQ=DAILY;INTERVAL=0",
        "FREQ=DAILY;INTERVAL=abc",
        "FREQ=DAILY;COUNT=-1",
        "FREQ=DAILY;UNTIL=20240101;COUNT=3",
        "FREQ=WEEKLY;BYMONTHDAY=1",
        "FREQ=MONTHLY;BYMONTHDAY=0",
        "FREQ=MONTHLY;BYMONTHDAY=32",
        "FREQ=DAILY;UNTIL=2024-01-01",
        "FREQ=DAILY;UNTIL=20241301",
        "FREQ=DAILY;BYHOUR=9",
        "FREQ=DAILY;FREQ=WEEKLY",
        "FREQ",
    ])
    def test_invalid_rules(self, text):
        """잘못된 규칙은 InvalidPatternError (400)."""
        with pytest.raises(InvalidPatternError) as exc:
            parse_rule(text)
        assert exc.value.status_code == 400


class TestExpand:
    """패턴 전개 테스트."""

    def test_weekly_mon_wed_fri(self):
        """6/1(토) 시작 월/수/금 패턴 → 6/3~6/9 구간에 3, 5, 7일."""
        pattern = make_pattern("FREQ=WEEKLY;BYDAY=MO,WE,FR", date(2024, 6, 1))
        days = [o.date for o in expand(pattern, date(2024, 6, 3), date(2024, 6, 9))]
        assert days == [date(2024, 6, 3), date(2024, 6, 5), date(2024, 6, 7)]

    def test_occurrence_carries_pattern_fields(self):
        pattern = make_pattern("FREQ=DAILY", date(2024, 6, 1))
        occurrence = next(iter(expand(pattern, date(2024, 6, 1), date(2024, 6, 1))))
        assert occurrence.pattern_id == pattern.id
        assert occurrence.staff_member_id == pattern.staff_member_id
        assert occurrence.start_time == time(9, 0)
        assert occurrence.end_time == time(17, 0)

    def test_weekly_without_byday_uses_anchor_weekday(self):
        pattern = make_pattern("FREQ=WEEKLY", date(2024, 6, 4))  # Tuesday
        days = [o.date for o in expand(pattern, date(2024, 6, 1), date(2024, 6, 30))]
        assert days == [date(2024, 6, 4), date(2024, 6, 11), date(2024, 6, 18), date(2024, 6, 25)]

    def test_biweekly(self):
        pattern = make_pattern("FREQ=WEEKLY;INTERVAL=2;BYDAY=MO", date(2024, 6, 3))
        days = [o.date for o in expand(pattern, date(2024, 6, 1), date(2024, 6, 30))]
        assert days == [date(2024, 6, 3), date(2024, 6, 17)]

    def test_daily_interval(self):
        pattern = make_pattern("FREQ=DAILY;INTERVAL=3", date(2024, 6, 1))
        days = [o.date for o in expand(pattern, date(2024, 6, 5), date(2024, 6, 12))]
        assert days == [date(2024, 6, 7), date(2024, 6, 10)]

    def test_monthly_last_day(self):
        """BYMONTHDAY=-1 → 매월 말일 (윤년 2월 29일 포함)."""
        pattern = make_pattern("FREQ=MONTHLY;BYMONTHDAY=-1", date(2024, 1, 31))
        days = [o.date for o in expand(pattern, date(2024, 1, 1), date(2024, 4, 30))]
        assert days == [date(2024, 1, 31), date(2024, 2, 29), date(2024, 3, 31), date(2024, 4, 30)]

    def test_count_is_counted_from_series_start(self):
        """COUNT는 구간 시작이 아니라 시리즈 시작부터 셈."""
        pattern = make_pattern("FREQ=DAILY;COUNT=3", date(2024, 6, 1))
        days = [o.date for o in expand(pattern, date(2024, 6, 2), date(2024, 6, 10))]
        assert days == [date(2024, 6, 2), date(2024, 6, 3)]

    def test_until_bounds_series(self):
        pattern = make_pattern("FREQ=DAILY;UNTIL=20240603", date(2024, 6, 1))
        days = [o.date for o in expand(pattern, date(2024, 6, 1), date(2024, 6, 30))]
        assert days == [date(2024, 6, 1), date(2024, 6, 2), date(2024, 6, 3)]

    def test_pattern_end_bounds_series(self):
        pattern = make_pattern("FREQ=DAILY", date(2024, 6, 1), pattern_end=date(2024, 6, 2))
        days = [o.date for o in expand(pattern, date(2024, 5, 1), date(2024, 6, 30))]
        assert days == [date(2024, 6, 1), date(2024, 6, 2)]

    def test_range_before_pattern_start_is_empty(self):
        pattern = make_pattern("FREQ=DAILY", date(2024, 6, 1))
        assert list(expand(pattern, date(2024, 5, 1), date(2024, 5, 31))) == []

    def test_inactive_pattern_is_empty(self):
        pattern = make_pattern("FREQ=DAILY", date(2024, 6, 1), is_active=False)
        assert list(expand(pattern, date(2024, 6, 1), date(2024, 6, 30))) == []

    def test_invalid_rule_fails_at_call_time(self):
        """잘못된 규칙은 순회 전 호출 시점에 실패."""
        pattern = make_pattern("FREQ=HOURLY", date(2024, 6, 1))
        with pytest.raises(InvalidPatternError):
            expand(pattern, date(2024, 6, 1), date(2024, 6, 30))

    def test_open_ended_pattern_is_finite(self):
        pattern = make_pattern("FREQ=DAILY", date(2020, 1, 1))
        occurrences = list(expand(pattern, date(2024, 6, 1), date(2024, 6, 7)))
        assert len(occurrences) == 7

    def test_expansion_is_repeatable(self):
        """같은 입력으로 두 번 전개하면 같은 결과."""
        pattern = make_pattern("FREQ=WEEKLY;INTERVAL=2;BYDAY=TU,TH;COUNT=6", date(2024, 6, 1))
        first = list(expand(pattern, date(2024, 6, 1), date(2024, 8, 31)))
        second = list(expand(pattern, date(2024, 6, 1), date(2024, 8, 31)))
        assert first == second
        assert len(first) == 6

    def test_independent_iterators(self):
        """두 반복자는 서로의 진행에 영향을 주지 않음."""
        pattern = make_pattern("FREQ=DAILY", date(2024, 6, 1))
        left = expand(pattern, date(2024, 6, 1), date(2024, 6, 5))
        right = expand(pattern, date(2024, 6, 1), date(2024, 6, 5))
        assert next(left).date == date(2024, 6, 1)
        assert next(left).date == date(2024, 6, 2)
        assert [o.date for o in right] == [date(2024, 6, d) for d in range(1, 6)]
        assert [o.date for o in left] == [date(2024, 6, d) for d in range(3, 6)]
