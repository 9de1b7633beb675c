"""데이터베이스 엔진, 세션, 소프트 삭제 필터.

Database engine, session factory and ORM base.
PostgreSQL through asyncpg in production; other async URLs (SQLite through
aiosqlite for tests) get a plain engine. Staff members are soft-deleted, and
a session hook hides deleted rows from every ORM SELECT.
"""

from collections.abc import AsyncGenerator
from datetime import datetime
from typing import Any

from sqlalchemy import Boolean, DateTime, event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, ORMExecuteState, Session, mapped_column, with_loader_criteria

from app.config import settings

# PostgreSQL 전용 풀 설정 — Pool tuning for asyncpg behind a transaction-mode pooler
_POSTGRES_ENGINE_ARGS: dict[str, Any] = {
    "pool_size": 5,
    "max_overflow": 10,
    # prepared statement 캐시 비활성화 — No prepared statement cache through the pooler
    "connect_args": {"statement_cache_size": 0},
}


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """URL 방언에 맞는 비동기 엔진 (Async engine with dialect-appropriate pool arguments)."""
    extra: dict[str, Any] = _POSTGRES_ENGINE_ARGS if url.startswith("postgresql") else {}
    return create_async_engine(url, echo=echo, pool_pre_ping=True, **extra)


engine: AsyncEngine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

# expire_on_commit=False — 커밋 후 응답 구성 시 재조회 없음 (No reload when building responses after commit)
async_session: async_sessionmaker[AsyncSession] = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """모든 ORM 모델의 선언적 베이스 (Declarative base; Alembic reads its metadata)."""


class SoftDeleteMixin:
    """소프트 삭제 컬럼 믹스인.

    Soft-delete columns. Rows with is_deleted=True are hidden from every ORM
    SELECT unless the statement carries ``execution_options(include_deleted=True)``.
    """

    # 삭제 여부 — Soft-delete flag
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # 삭제 일시 — Soft-delete timestamp (UTC)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


@event.listens_for(Session, "do_orm_execute")
def _filter_soft_deleted(execute_state: ORMExecuteState) -> None:
    """소프트 삭제된 행을 모든 ORM 조회에서 제외합니다.

    Add ``is_deleted = false`` criteria for every SoftDeleteMixin entity in
    top-level ORM SELECTs; the criteria propagate to its relationship loads.
    """
    if (
        execute_state.is_select
        and not execute_state.is_column_load
        and not execute_state.is_relationship_load
        and not execute_state.execution_options.get("include_deleted", False)
    ):
        execute_state.statement = execute_state.statement.options(
            with_loader_criteria(
                SoftDeleteMixin,
                lambda cls: cls.is_deleted.is_(False),
                include_aliases=True,
            )
        )


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """요청 단위 세션 의존성.

    Request-scoped session. Routers commit on success; anything left
    uncommitted (a raised conflict, a failed check) is rolled back when the
    session closes.
    """
    async with async_session() as session:
        yield session
