"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes.
Services raise these directly; FastAPI turns them into ``{"detail": ...}``
responses, so call sites never repeat status codes.

Usage:
    from app.utils.exceptions import NotFoundError, ScheduleConflictError
    raise NotFoundError("Shift not found")
    raise ScheduleConflictError([{"type": "overlap", "message": "...", "severity": "error"}])
"""

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """404 — 리소스 없음, 다른 사업장 소속, 또는 소프트 삭제됨.

    The resource does not exist, belongs to another business, or is a
    soft-deleted staff member.
    """

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class DuplicateError(HTTPException):
    """409 — 고유성 위반 (duplicate staff email, role or time-off type name, location assignment)."""

    def __init__(self, detail: str = "Resource already exists") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class ForbiddenError(HTTPException):
    """403 — 권한 평가기가 거부 (Denied by the permission evaluator or an ownership rule)."""

    def __init__(self, detail: str = "Insufficient permissions") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class UnauthorizedError(HTTPException):
    """401 — 토큰 없음, 만료, 또는 위조 (Missing, expired or forged bearer token)."""

    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class BadRequestError(HTTPException):
    """400 — 비즈니스 규칙 위반.

    Request is well-formed but breaks a business rule: an invalid time-off
    transition, deleting a default role, a date range that is too long.
    Shape errors are left to pydantic (422).
    """

    def __init__(self, detail: str = "Bad request") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class InvalidPatternError(BadRequestError):
    """400 — 반복 규칙을 해석할 수 없음 (Recurrence rule cannot be parsed)."""

    def __init__(self, detail: str = "Invalid recurrence rule") -> None:
        super().__init__(detail=detail)


class ScheduleConflictError(HTTPException):
    """409 — 근무 충돌로 생성/수정이 차단됨.

    Raised when shift conflicts block a create or update. The detail is the
    conflict list so clients can show it and resubmit with X-Force-Create
    (warnings) or X-Override-Conflicts (errors).

    Args:
        conflicts: [{type, message, severity}] 충돌 목록 (Conflict dicts)
    """

    def __init__(self, conflicts: list[dict[str, str]]) -> None:
        self.conflicts: list[dict[str, str]] = conflicts
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=conflicts)
