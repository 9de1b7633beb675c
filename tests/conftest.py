"""테스트 인프라 — 인메모리 SQLite DB, 세션, httpx 클라이언트 픽스처.

Test infrastructure — In-memory SQLite (aiosqlite) database, session, and
httpx client fixtures. Each test gets a fresh schema on a StaticPool so the
session and the app share one connection.
"""

import uuid
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.models import *  # noqa: F401,F403 — register all models with metadata
from app.utils.jwt import create_access_token

# ---------------------------------------------------------------------------
# 테스트 DB 설정
# ---------------------------------------------------------------------------
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진. 테스트마다 스키마를 새로 생성합니다."""
    eng = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — DB 세션을 오버라이드합니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
@pytest.fixture
def business_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def location_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest_asyncio.fixture
async def roles(db: AsyncSession, business_id):
    """기본 역할(Owner, Manager, Employee)을 생성합니다."""
    from app.repositories.role_repository import role_repository
    from app.services.role_service import role_service

    await role_service.ensure_default_roles(db, business_id)
    await db.commit()
    return {r.name: r for r in await role_repository.get_by_business(db, business_id)}


async def make_staff(
    db: AsyncSession,
    business_id: uuid.UUID,
    first_name: str,
    email: str,
    permission_level: str = "Basic",
    location_id: uuid.UUID | None = None,
    role=None,
):
    """직원과 (선택) 주 매장 배정을 생성합니다."""
    from app.models.staff import StaffLocation, StaffMember

    staff = StaffMember(
        business_id=business_id,
        user_id=uuid.uuid4(),
        first_name=first_name,
        last_name="Tester",
        email=email,
        permission_level=permission_level,
    )
    db.add(staff)
    await db.flush()
    if location_id is not None:
        db.add(StaffLocation(
            staff_member_id=staff.id,
            location_id=location_id,
            role_id=role.id if role is not None else None,
            is_primary=True,
        ))
    await db.commit()
    await db.refresh(staff)
    return staff


@pytest_asyncio.fixture
async def owner(db: AsyncSession, business_id, roles):
    """레거시 Owner 레벨 직원 — 배정 없이도 모든 권한."""
    return await make_staff(db, business_id, "Olivia", "owner@glowsalon.com", permission_level="Owner")


@pytest_asyncio.fixture
async def manager(db: AsyncSession, business_id, location_id, roles):
    """매장에 Manager 역할로 배정된 직원."""
    return await make_staff(
        db, business_id, "Mina", "manager@glowsalon.com", location_id=location_id, role=roles["Manager"],
    )


@pytest_asyncio.fixture
async def employee(db: AsyncSession, business_id, location_id, roles):
    """매장에 Employee 역할로 배정된 직원."""
    return await make_staff(
        db, business_id, "Eli", "employee@glowsalon.com", location_id=location_id, role=roles["Employee"],
    )


def make_token(staff) -> str:
    """테스트용 JWT 액세스 토큰을 생성합니다."""
    return create_access_token({"sub": str(staff.user_id)})


@pytest.fixture
def owner_token(owner) -> str:
    return make_token(owner)


@pytest.fixture
def manager_token(manager) -> str:
    return make_token(manager)


@pytest.fixture
def employee_token(employee) -> str:
    return make_token(employee)


def auth_header(token: str, **extra: str) -> dict[str, str]:
    headers: dict[str, str] = {"Authorization": f"Bearer {token}"}
    headers.update(extra)
    return headers


def base_url(business_id: uuid.UUID) -> str:
    return f"/api/v1/businesses/{business_id}"
