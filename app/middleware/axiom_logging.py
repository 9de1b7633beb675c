"""Axiom API 로깅 미들웨어.

Axiom API logging middleware.
Sends one structured event per API call to Axiom: method, path, business,
conflict bypass headers, masked request data, status, duration and the error
detail. Conflict responses (409 with a conflict list) are logged with their
conflict types so blocked schedule writes can be searched by kind.
Tokens, secrets and staff contact details (email, phone) are masked.
"""

import json
import logging
import re
import time
from typing import Any

from axiom_py import Client as AxiomClient
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.config import settings

logger = logging.getLogger(__name__)

# 마스킹 대상 키 — Keys masked in logged payloads
_MASKED_KEYS = re.compile(r"(secret|token|authorization|api_?key|credential|email|phone)", re.IGNORECASE)

# 로깅 제외 경로 — Paths never logged
_SKIP_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})

# /api/v1/businesses/{business_id}/{area}/... 에서 사업장과 영역 추출
_BUSINESS_PATH = re.compile(r"^/api/v1/businesses/(?P<business_id>[0-9a-fA-F-]{36})(?:/(?P<area>[a-z-]+))?")

_MAX_DETAIL = 500


def _masked(data: Any, depth: int = 0) -> Any:
    """민감 키를 재귀적으로 마스킹 (Recursively mask sensitive keys)."""
    if depth > 5:
        return "..."
    if isinstance(data, dict):
        return {k: "***" if _MASKED_KEYS.search(k) else _masked(v, depth + 1) for k, v in data.items()}
    if isinstance(data, list):
        return [_masked(item, depth + 1) for item in data[:20]]
    return data


async def _request_payload(request: Request) -> Any:
    """쓰기 요청의 JSON 바디 (JSON body of write requests, masked)."""
    if request.method not in ("POST", "PUT", "PATCH"):
        return None
    raw: bytes = await request.body()
    if not raw:
        return None
    try:
        return _masked(json.loads(raw))
    except (json.JSONDecodeError, UnicodeDecodeError):
        return "(non-json body)"


async def _drain(response: Response) -> bytes:
    body = b""
    async for chunk in response.body_iterator:
        body += chunk if isinstance(chunk, bytes) else chunk.encode("utf-8")
    return body


def _describe_error(body: bytes, event: dict[str, Any]) -> None:
    """오류 응답 바디를 이벤트에 기록 — 충돌 목록이면 유형도 함께.

    Record the error detail of a response body on the event. A list detail
    (the schedule conflict list) also records its conflict types.
    """
    try:
        detail: Any = json.loads(body).get("detail")
    except (json.JSONDecodeError, UnicodeDecodeError, AttributeError):
        event["error"] = body.decode("utf-8", errors="replace")[:_MAX_DETAIL]
        return

    if isinstance(detail, list):
        types = [item.get("type") for item in detail if isinstance(item, dict)]
        if types:
            event["conflict_types"] = types
        detail = json.dumps(detail, ensure_ascii=False)
    text = str(detail)
    event["error"] = text if len(text) <= _MAX_DETAIL else text[:_MAX_DETAIL] + "..."


class AxiomLoggingMiddleware(BaseHTTPMiddleware):
    """API 요청/응답을 Axiom에 기록하는 미들웨어.

    Logs every API call to Axiom. Without AXIOM_API_TOKEN and AXIOM_DATASET
    the middleware passes requests through untouched.
    """

    def __init__(self, app: Any) -> None:
        super().__init__(app)
        self._dataset: str = settings.AXIOM_DATASET
        self._client: AxiomClient | None = None
        if settings.AXIOM_API_TOKEN and settings.AXIOM_DATASET:
            self._client = AxiomClient(token=settings.AXIOM_API_TOKEN)

    def _base_event(self, request: Request) -> dict[str, Any]:
        path: str = request.url.path
        event: dict[str, Any] = {"method": request.method, "path": path}
        match = _BUSINESS_PATH.match(path)
        if match:
            event["business_id"] = match.group("business_id")
            if match.group("area"):
                event["area"] = match.group("area")
        if request.query_params:
            event["query_params"] = _masked(dict(request.query_params))
        # 충돌 우회 헤더 — Conflict bypass headers as sent
        for header in (settings.FORCE_CREATE_HEADER, settings.OVERRIDE_CONFLICTS_HEADER):
            value = request.headers.get(header)
            if value is not None:
                event[header.lower().replace("-", "_")] = value
        return event

    def _send(self, event: dict[str, Any]) -> None:
        try:
            self._client.ingest_events(self._dataset, [event])
        except Exception as exc:
            # 로깅 실패가 요청 처리에 영향주지 않도록 — Logging never fails the request
            logger.warning("Axiom ingest failed: %s", exc)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if self._client is None or request.url.path in _SKIP_PATHS:
            return await call_next(request)

        started: float = time.perf_counter()
        event: dict[str, Any] = self._base_event(request)
        payload: Any = await _request_payload(request)
        if payload is not None:
            event["request_body"] = payload

        event["status_code"] = 500
        try:
            response: Response = await call_next(request)
            event["status_code"] = response.status_code
            if response.status_code >= 400:
                body: bytes = await _drain(response)
                _describe_error(body, event)
                # 소비한 바디로 응답 재구성 — Rebuild the response from the drained body
                response = Response(
                    content=body,
                    status_code=response.status_code,
                    headers=dict(response.headers),
                    media_type=response.media_type,
                )
            return response
        except Exception as exc:
            event["error"] = f"{type(exc).__name__}: {str(exc)[:300]}"
            raise
        finally:
            event["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
            self._send(event)
