"""휴가 요청 상태 전이.

Time-off request state machine.

Status Flow:
    Pending → Approved | Denied | Cancelled
    세 상태 모두 종료 상태 (All three are terminal)
"""

from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from app.utils.exceptions import BadRequestError

PENDING = "Pending"
APPROVED = "Approved"
DENIED = "Denied"
CANCELLED = "Cancelled"

TIME_OFF_STATUSES: tuple[str, ...] = (PENDING, APPROVED, DENIED, CANCELLED)

# 허용 전이 (Allowed transitions)
TRANSITIONS: dict[str, frozenset[str]] = {
    PENDING: frozenset({APPROVED, DENIED, CANCELLED}),
    APPROVED: frozenset(),
    DENIED: frozenset(),
    CANCELLED: frozenset(),
}


def can_transition(current: str, target: str) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


def transition(
    request: Any,
    target: str,
    approver_id: UUID | None = None,
    notes: str | None = None,
    now: datetime | None = None,
) -> None:
    """요청 상태를 전이합니다. 허용되지 않으면 BadRequestError.

    Move a request to ``target``. Approve and deny require an approver and
    stamp approved_by_staff_id, approved_at and approval_notes.

    Raises:
        BadRequestError: 허용되지 않은 전이 또는 승인자 누락
                         (Transition not allowed, or approver missing)
    """
    if not can_transition(request.status, target):
        raise BadRequestError(
            f"Cannot change time-off request from {request.status} to {target}"
        )

    if target in (APPROVED, DENIED):
        if approver_id is None:
            raise BadRequestError("Approver is required")
        request.approved_by_staff_id = approver_id
        request.approved_at = now or datetime.now(timezone.utc)
        request.approval_notes = notes

    request.status = target
