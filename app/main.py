"""FastAPI 애플리케이션 엔트리포인트 — 미들웨어 및 라우터 등록.

FastAPI application entry point.
Configures logging, the Axiom and CORS middleware, the health check, and
mounts every business-scoped router under ``/api/v1/businesses/{business_id}``.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from app.config import settings
from app.database import engine
from app.middleware.axiom_logging import AxiomLoggingMiddleware

# 모듈 로거 기본 설정 — Module loggers (conflict gate, approvals) go to stderr
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    yield
    # 종료 시 커넥션 풀 정리 — Close pooled connections on shutdown
    await engine.dispose()


app: FastAPI = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Axiom 로깅 — CORS보다 먼저 등록하여 모든 요청을 캡처 (Registered first to see every request)
app.add_middleware(AxiomLoggingMiddleware)

# CORS 설정 — CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """동시 요청이 고유 제약을 위반한 경우 409 (Unique constraint lost to a concurrent write).

    Services check uniqueness before writing; this covers the race where two
    requests pass the check together and the database rejects the second.
    """
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(status_code=409, content={"detail": "Conflicting record already exists"})


@app.get("/health")
async def health_check() -> dict[str, str]:
    """서버 상태 확인 엔드포인트 (Health check for load balancers)."""
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# 라우터 등록 — 사업장 범위 엔드포인트
# Router registration — Business-scoped endpoints
# ---------------------------------------------------------------------------
from app.api.business import business_router  # noqa: E402

app.include_router(business_router, prefix="/api/v1/businesses/{business_id}")
