"""공통 Pydantic 요청/응답 스키마 정의.

Common Pydantic request/response schema definitions.
Includes the pagination and count wrappers plus the "HH:mm" time
field shared by schedule and time-off schemas.
"""

from typing import Annotated, Any

from pydantic import BaseModel, Field

from app.utils.time_format import HHMM_PATTERN

# "HH:mm" 24시간 형식 문자열 — 24-hour wall-clock time string
TimeStr = Annotated[str, Field(pattern=HHMM_PATTERN, examples=["09:00"])]


class PaginatedResponse(BaseModel):
    """페이지네이션 응답 스키마.

    Paginated response wrapper schema.
    Wraps a list of items with pagination metadata.

    Attributes:
        items: 항목 목록 (List of result items)
        total: 전체 항목 수 (Total count across all pages)
        page: 현재 페이지 번호 (Current page number, 1-based)
        per_page: 페이지당 항목 수 (Items per page)
    """

    items: list[Any]  # 항목 목록 (Result items)
    total: int  # 전체 항목 수 (Total item count)
    page: int  # 현재 페이지 번호 (Current page)
    per_page: int  # 페이지당 항목 수 (Items per page)


class CountResponse(BaseModel):
    """개수 응답 스키마 (Single count, e.g. pending time-off badge)."""

    count: int
