"""JWT 검증 유틸리티 — 외부 인증 서비스가 발급한 액세스 토큰.

JWT helpers. Access tokens are issued by the identity service with the
shared secret; this API only verifies them and reads the user id. Minting is
kept for local development and tests.

Payload:
    sub  — 인증 사용자 ID (Identity user id, maps to StaffMember.user_id)
    exp  — 만료 UNIX timestamp (Expiration)
    type — "access"
"""

from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

import jwt

from app.config import settings

ACCESS_TOKEN_TYPE = "access"


def create_access_token(data: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    """액세스 토큰을 발급합니다 (로컬 개발/테스트용).

    Mint an access token, e.g. ``create_access_token({"sub": str(staff.user_id)})``.
    Expires after JWT_ACCESS_TOKEN_EXPIRE_MINUTES unless ``expires_delta`` is given.
    """
    lifetime: timedelta = expires_delta or timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    payload: dict[str, Any] = {**data, "exp": datetime.now(timezone.utc) + lifetime, "type": ACCESS_TOKEN_TYPE}
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict[str, Any]:
    """서명과 만료를 검증하고 페이로드를 반환합니다.

    Raises:
        jwt.ExpiredSignatureError: 만료된 토큰 (Expired token)
        jwt.InvalidTokenError: 그 밖의 검증 실패 (Any other validation failure)
    """
    return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])


def access_token_subject(token: str) -> UUID:
    """액세스 토큰의 사용자 ID (User id carried by a valid access token).

    Raises:
        jwt.InvalidTokenError: 서명/만료 오류, 액세스 토큰이 아님, sub 누락
                               (Bad signature or expiry, wrong type, missing sub)
        ValueError: sub가 UUID가 아님 (sub is not a UUID)
    """
    payload: dict[str, Any] = decode_token(token)
    if payload.get("type", ACCESS_TOKEN_TYPE) != ACCESS_TOKEN_TYPE:
        raise jwt.InvalidTokenError("Not an access token")
    subject: Any = payload.get("sub")
    if subject is None:
        raise jwt.InvalidTokenError("Token has no subject")
    return UUID(str(subject))
