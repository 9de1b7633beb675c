"""시각 문자열 변환 유틸리티.

Wall-clock time helpers. The API exchanges times as 24-hour "HH:mm" strings
while the database stores ``datetime.time`` values.
"""

import re
from datetime import time

# "HH:mm" 24시간 형식 (24-hour HH:mm)
HHMM_PATTERN: str = r"^([01]\d|2[0-3]):[0-5]\d$"
_HHMM_RE = re.compile(HHMM_PATTERN)


def parse_hhmm(value: str) -> time:
    """'HH:mm' 문자열을 time으로 변환합니다. 형식 오류 시 ValueError."""
    if not _HHMM_RE.match(value):
        raise ValueError(f"Invalid time '{value}', expected HH:mm")
    hour, minute = value.split(":")
    return time(int(hour), int(minute))


def format_hhmm(value: time) -> str:
    return value.strftime("%H:%M")
