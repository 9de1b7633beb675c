"""반복 근무 규칙 파서 및 전개기.

Recurrence rule parser and expander.
Parses the subset of RFC 5545 RRULE syntax used by recurring shift patterns
and expands a pattern into concrete dated occurrences inside a query window.

Supported rule parts:
    FREQ=DAILY|WEEKLY|MONTHLY (필수, required)
    INTERVAL=n                (기본 1, default 1)
    BYDAY=MO,TU,...           (요일 코드, plain weekday codes only)
    BYMONTHDAY=n|-n           (MONTHLY 전용, -1 = 말일)
    UNTIL=YYYYMMDD[THHMMSS[Z]]
    COUNT=n                   (UNTIL과 동시 사용 불가, exclusive with UNTIL)

Example:
    rule = parse_rule("FREQ=WEEKLY;BYDAY=MO,WE,FR")
    occurrences = list(expand(pattern, date(2024, 6, 3), date(2024, 6, 9)))
"""

import calendar
import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any
from uuid import UUID

from app.utils.exceptions import InvalidPatternError

# 요일 코드 → date.weekday() 값 (Weekday code to Python weekday index)
WEEKDAY_CODES: dict[str, int] = {
    "MO": 0,
    "TU": 1,
    "WE": 2,
    "TH": 3,
    "FR": 4,
    "SA": 5,
    "SU": 6,
}

FREQUENCIES: tuple[str, ...] = ("DAILY", "WEEKLY", "MONTHLY")

_UNTIL_RE = re.compile(r"^(\d{8})(T\d{6}Z?)?$")
_KNOWN_PARTS = {"FREQ", "INTERVAL", "BYDAY", "BYMONTHDAY", "UNTIL", "COUNT"}


@dataclass(frozen=True)
class RecurrenceRule:
    """파싱된 반복 규칙.

    Parsed recurrence rule. Matching is evaluated relative to an anchor date
    (the pattern's first day) so INTERVAL steps are counted from there.

    Attributes:
        freq: 반복 주기 (DAILY / WEEKLY / MONTHLY)
        interval: 반복 간격 (Step between periods, >= 1)
        by_day: 허용 요일 인덱스 (Allowed weekday indexes, empty = unrestricted)
        by_month_day: 허용 일자, 음수는 말일 기준 (Allowed month days; negatives count from month end)
        until: 마지막 허용 날짜 (Last allowed date, inclusive)
        count: 최대 발생 횟수 (Maximum number of occurrences)
    """

    freq: str
    interval: int = 1
    by_day: tuple[int, ...] = ()
    by_month_day: tuple[int, ...] = ()
    until: date | None = None
    count: int | None = None

    def matches(self, day: date, anchor: date) -> bool:
        """주어진 날짜가 규칙에 해당하는지 확인합니다 (COUNT 제외).

        Return whether ``day`` is produced by this rule for a series starting
        at ``anchor``. COUNT is not considered here; the expander enforces it.
        """
        if day < anchor:
            return False
        if self.until is not None and day > self.until:
            return False

        if self.freq == "DAILY":
            if (day - anchor).days % self.interval:
                return False
            return not self.by_day or day.weekday() in self.by_day

        if self.freq == "WEEKLY":
            weekdays = self.by_day or (anchor.weekday(),)
            if day.weekday() not in weekdays:
                return False
            # 주 간격은 월요일 시작 주 기준으로 계산 (Week steps use Monday-based weeks)
            anchor_week = anchor - timedelta(days=anchor.weekday())
            day_week = day - timedelta(days=day.weekday())
            return ((day_week - anchor_week).days // 7) % self.interval == 0

        # MONTHLY
        months = (day.year - anchor.year) * 12 + (day.month - anchor.month)
        if months % self.interval:
            return False
        if self.by_month_day:
            return any(_month_day_matches(day, n) for n in self.by_month_day)
        if self.by_day:
            return day.weekday() in self.by_day
        return day.day == anchor.day


def _month_day_matches(day: date, month_day: int) -> bool:
    if month_day > 0:
        return day.day == month_day
    last = calendar.monthrange(day.year, day.month)[1]
    return day.day == last + month_day + 1


def _parse_positive_int(key: str, value: str) -> int:
    if not value.isdigit() or int(value) < 1:
        raise InvalidPatternError(f"{key} must be a positive integer")
    return int(value)


def parse_rule(text: str) -> RecurrenceRule:
    """RRULE 문자열을 RecurrenceRule로 파싱합니다.

    Parse an RRULE string into a RecurrenceRule.

    Args:
        text: RRULE 문자열, "RRULE:" 접두사 허용 (Rule text, optional "RRULE:" prefix)

    Returns:
        RecurrenceRule: 파싱된 규칙 (Parsed rule)

    Raises:
        InvalidPatternError: 형식 오류, 미지원 항목, 잘못된 값
                             (Malformed text, unsupported part, or invalid value)
    """
    if not text or not text.strip():
        raise InvalidPatternError("Recurrence rule is empty")

    body: str = text.strip().upper()
    if body.startswith("RRULE:"):
        body = body[len("RRULE:"):]

    parts: dict[str, str] = {}
    for chunk in body.split(";"):
        chunk = chunk.strip()
        if not chunk:
            continue
        key, sep, value = chunk.partition("=")
        key, value = key.strip(), value.strip()
        if not sep or not key or not value:
            raise InvalidPatternError(f"Malformed rule part: {chunk}")
        if key not in _KNOWN_PARTS:
            raise InvalidPatternError(f"Unsupported rule part: {key}")
        if key in parts:
            raise InvalidPatternError(f"Duplicate rule part: {key}")
        parts[key] = value

    freq: str | None = parts.get("FREQ")
    if freq is None:
        raise InvalidPatternError("Recurrence rule must contain FREQ")
    if freq not in FREQUENCIES:
        raise InvalidPatternError(f"Unsupported frequency: {freq}")

    interval: int = _parse_positive_int("INTERVAL", parts["INTERVAL"]) if "INTERVAL" in parts else 1

    by_day: list[int] = []
    if "BYDAY" in parts:
        for code in parts["BYDAY"].split(","):
            code = code.strip()
            if code not in WEEKDAY_CODES:
                raise InvalidPatternError(f"Invalid BYDAY value: {code}")
            if WEEKDAY_CODES[code] not in by_day:
                by_day.append(WEEKDAY_CODES[code])

    by_month_day: list[int] = []
    if "BYMONTHDAY" in parts:
        if freq != "MONTHLY":
            raise InvalidPatternError("BYMONTHDAY is only supported with FREQ=MONTHLY")
        for raw in parts["BYMONTHDAY"].split(","):
            try:
                n = int(raw.strip())
            except ValueError:
                raise InvalidPatternError(f"Invalid BYMONTHDAY value: {raw}")
            if n == 0 or not -31 <= n <= 31:
                raise InvalidPatternError(f"Invalid BYMONTHDAY value: {raw}")
            by_month_day.append(n)

    if "UNTIL" in parts and "COUNT" in parts:
        raise InvalidPatternError("UNTIL and COUNT cannot both be set")

    until: date | None = None
    if "UNTIL" in parts:
        match = _UNTIL_RE.match(parts["UNTIL"])
        if match is None:
            raise InvalidPatternError(f"Invalid UNTIL value: {parts['UNTIL']}")
        try:
            until = datetime.strptime(match.group(1), "%Y%m%d").date()
        except ValueError:
            raise InvalidPatternError(f"Invalid UNTIL value: {parts['UNTIL']}")

    count: int | None = _parse_positive_int("COUNT", parts["COUNT"]) if "COUNT" in parts else None

    return RecurrenceRule(
        freq=freq,
        interval=interval,
        by_day=tuple(sorted(by_day)),
        by_month_day=tuple(by_month_day),
        until=until,
        count=count,
    )


@dataclass(frozen=True)
class ShiftOccurrence:
    """반복 패턴에서 전개된 단일 근무 발생.

    A single dated occurrence expanded from a recurring pattern.
    Not persisted; computed on demand.
    """

    date: date
    start_time: time
    end_time: time
    staff_member_id: UUID
    location_id: UUID | None
    shift_type: str
    pattern_id: UUID | None
    notes: str | None = None


def expand(
    pattern: Any,
    range_start: date,
    range_end: date,
    parser: Callable[[str], RecurrenceRule] = parse_rule,
) -> Iterator[ShiftOccurrence]:
    """반복 패턴을 조회 구간 내 발생 목록으로 전개합니다.

    Expand a recurring pattern into occurrences within [range_start, range_end].
    The rule is parsed eagerly so malformed rules fail at call time; the
    returned iterator is lazy, ascending, finite, and side-effect free.

    Args:
        pattern: rrule, start_time, end_time, pattern_start, pattern_end,
                 is_active, id, staff_member_id, location_id, shift_type,
                 notes 속성을 가진 객체 (ORM pattern or any object with those attributes)
        range_start: 조회 시작일, 포함 (Window start, inclusive)
        range_end: 조회 종료일, 포함 (Window end, inclusive)
        parser: 규칙 파서 (Rule parser, replaceable)

    Returns:
        Iterator[ShiftOccurrence]: 날짜 오름차순 발생 (Occurrences in date order)

    Raises:
        InvalidPatternError: 규칙이 잘못된 경우 (Malformed rule)
    """
    if not pattern.is_active:
        return iter(())

    rule: RecurrenceRule = parser(pattern.rrule)
    anchor: date = pattern.pattern_start

    last: date = range_end
    if pattern.pattern_end is not None:
        last = min(last, pattern.pattern_end)
    if rule.until is not None:
        last = min(last, rule.until)

    if last < anchor or last < range_start:
        return iter(())

    def _generate() -> Iterator[ShiftOccurrence]:
        # COUNT는 시리즈 시작부터 세어야 하므로 앵커부터 순회
        # COUNT is counted from the series start, so walk from the anchor
        day: date = anchor if rule.count is not None else max(anchor, range_start)
        produced = 0
        while day <= last:
            if rule.matches(day, anchor):
                produced += 1
                if day >= range_start:
                    yield ShiftOccurrence(
                        date=day,
                        start_time=pattern.start_time,
                        end_time=pattern.end_time,
                        staff_member_id=pattern.staff_member_id,
                        location_id=pattern.location_id,
                        shift_type=pattern.shift_type,
                        pattern_id=pattern.id,
                        notes=pattern.notes,
                    )
                if rule.count is not None and produced >= rule.count:
                    return
            day += timedelta(days=1)

    return _generate()
