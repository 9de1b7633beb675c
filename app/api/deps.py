"""FastAPI 의존성 주입 모듈 — 인증 및 권한 검사.

FastAPI dependency injection module — Authentication and authorization.
Resolves the caller from the JWT and the path business, then gates
endpoints on permission flags through the permission evaluator.

Authentication Flow:
    1. 클라이언트가 Authorization: Bearer <token> 헤더를 전송
       (Client sends Authorization: Bearer <token> header)
    2. access_token_subject()가 액세스 토큰을 검증하고 사용자 ID를 반환
       (access_token_subject verifies the access token and returns its user id)
    3. 사용자 ID와 경로의 business_id로 직원 레코드 조회
       (Staff record resolved from the user id and the path business_id)

Authorization Flow (require_permission):
    1. get_current_staff로 직원 확인 (Caller resolved via get_current_staff)
    2. location_id 쿼리 파라미터, 없으면 주 매장 기준으로 권한 평가
       (Evaluated at the location_id query parameter, else the primary location)
    3. 거부 시 403 Forbidden 반환 (Returns 403 when denied)
"""

from typing import Annotated, Awaitable, Callable
from uuid import UUID

import jwt
from fastapi import Depends, Path, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.domain.permissions import PERMISSION_KEYS
from app.models.staff import StaffMember
from app.repositories.staff_repository import staff_repository
from app.services.permission_service import permission_service
from app.utils.exceptions import ForbiddenError, UnauthorizedError
from app.utils.jwt import access_token_subject

# HTTP Bearer 토큰 추출기 — Authorization 헤더에서 JWT 토큰 추출
# (Extracts JWT token from Authorization: Bearer <token> header)
security: HTTPBearer = HTTPBearer()


async def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
) -> UUID:
    """JWT 토큰에서 인증된 사용자 ID를 추출합니다.

    Decode the bearer token and return the identity user id ("sub").
    Token issuance lives in the identity service; this side only verifies.

    Raises:
        UnauthorizedError: 토큰이 유효하지 않거나 만료됨 (Invalid or expired token)
    """
    try:
        return access_token_subject(credentials.credentials)
    except (jwt.InvalidTokenError, ValueError):
        raise UnauthorizedError("Invalid or expired token")


async def get_current_staff(
    business_id: Annotated[UUID, Path()],
    user_id: Annotated[UUID, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> StaffMember:
    """경로의 사업장에 속한 호출자 직원 레코드를 반환합니다.

    Return the caller's staff record in the path business. Callers without
    one (or soft-deleted, or archived) are not members of the business.

    Raises:
        ForbiddenError: 사업장 소속 직원이 아님 (Not a staff member of this business)
    """
    staff: StaffMember | None = await staff_repository.get_by_user_id(db, user_id, business_id)
    if staff is None or staff.status == "Archived":
        raise ForbiddenError("Not a staff member of this business")
    return staff


def require_permission(permission: str) -> Callable[..., Awaitable[StaffMember]]:
    """권한 플래그 기반 검사 의존성 팩토리.

    Dependency factory enforcing one "Area.Action" permission. The check
    runs at the ``location_id`` query parameter when given, otherwise at
    the caller's primary location.

    Args:
        permission: 권한 키, 예 "Scheduling.Manage" (Permission key)

    Returns:
        FastAPI 의존성 함수 — 호출자 직원 반환 또는 403 발생
        (FastAPI dependency returning the caller or raising 403)
    """
    if permission not in PERMISSION_KEYS:
        raise ValueError(f"Unknown permission key: {permission}")

    async def _check(
        current_staff: Annotated[StaffMember, Depends(get_current_staff)],
        db: Annotated[AsyncSession, Depends(get_db)],
        location_id: Annotated[UUID | None, Query()] = None,
    ) -> StaffMember:
        if not await permission_service.check(db, current_staff, permission, location_id):
            raise ForbiddenError()
        return current_staff
    return _check


def header_flag(value: str | None) -> bool:
    """"true"/"1"/"yes" 헤더 값을 참으로 해석 (Truthy header values)."""
    return value is not None and value.strip().lower() in ("true", "1", "yes")
