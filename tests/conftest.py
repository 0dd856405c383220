"""테스트 설정"""

import itertools
import os
from typing import Generator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from docker import from_env
from docker.errors import DockerException
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from testcontainers.postgres import PostgresContainer

from app.core.config import settings
from app.core.database import Base, get_db
from app.core.event_bus import EventSendResult, get_event_bus_client
from app.core.identity_provider import (
    IdentityProfile,
    get_identity_provider_client,
)
from app.core.utils.datetime import now_utc
from app.main import app


def _is_docker_available() -> bool:
    """로컬 환경에서 Docker 접근 가능 여부 확인"""
    if os.getenv("FORCE_DOCKER_TESTS", "").lower() in {"1", "true"}:
        return True
    if os.getenv("SKIP_DOCKER_TESTS", "").lower() in {"1", "true"}:
        return False

    try:
        client = from_env()
        client.ping()
        return True
    except DockerException:
        return False
    except Exception:
        return False


DOCKER_AVAILABLE = _is_docker_available()


@pytest.fixture(scope="session")
def external_id_factory():
    """
    테스트마다 겹치지 않는 외부 아이덴티티 ID 팩토리.
    UTC 기준 현재 타임스탬프(ms)를 시작값으로 사용
    """
    start = int(now_utc().timestamp() * 1000)
    counter = itertools.count(start=start)

    def _factory(n: int = 1):
        if n == 1:
            return f"user_{next(counter)}"
        return [f"user_{next(counter)}" for _ in range(n)]

    return _factory


@pytest.fixture
def fake_identity_provider():
    """아이덴티티 프로바이더 대역 (요청한 ID로 프로필 반환)"""
    provider = MagicMock()

    async def get_by_id(external_id: str) -> IdentityProfile:
        return IdentityProfile(
            external_id=external_id,
            first_name="Test",
            last_name="User",
            username=f"{external_id}_name",
            email=f"{external_id}@example.com",
            image_url=None,
        )

    provider.get_by_id = AsyncMock(side_effect=get_by_id)
    return provider


@pytest.fixture
def fake_event_bus():
    """이벤트 버스 대역 (발행 이벤트를 기록만 함)"""
    bus = MagicMock()
    counter = itertools.count(start=1)

    async def accept(*args, **kwargs) -> EventSendResult:
        return EventSendResult(name="test", ids=[f"evt_{next(counter)}"])

    bus.send_identity_updated = AsyncMock(side_effect=accept)
    bus.send_bulk_sync_requested = AsyncMock(side_effect=accept)
    bus.send_user_activity = AsyncMock(side_effect=accept)
    return bus


@pytest_asyncio.fixture
async def api_client(fake_identity_provider, fake_event_bus):
    """DB 없이 동작하는 비동기 테스트 클라이언트

    DB 세션은 MagicMock으로, 외부 클라이언트는 대역으로 대체합니다.
    """

    async def override_get_db():
        yield MagicMock(spec=AsyncSession)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_provider_client] = (
        lambda: fake_identity_provider
    )
    app.dependency_overrides[get_event_bus_client] = lambda: fake_event_bus

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport, base_url="http://test"
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    """PostgreSQL 테스트 컨테이너"""
    if not DOCKER_AVAILABLE:
        pytest.skip("Docker is not available; skipping container-based tests.")

    with PostgresContainer("postgres:16-alpine") as postgres:
        yield postgres


@pytest.fixture(scope="session")
def test_database_url(postgres_container: PostgresContainer) -> str:
    """테스트 데이터베이스 URL"""
    # asyncpg를 위한 URL 생성
    return str(
        postgres_container.get_connection_url().replace(
            "postgresql+psycopg2://", "postgresql+asyncpg://"
        )
    )


@pytest_asyncio.fixture
async def db_session(test_database_url: str):
    """테스트 데이터베이스 세션"""
    engine = create_async_engine(test_database_url, echo=False)

    # 각 테스트마다 깨끗한 스키마 유지
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async_session: async_sessionmaker[AsyncSession] = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()

    await engine.dispose()


# NOTE:
# pytest-asyncio(0.21+)는 기본적으로 테스트마다 독립적인 event loop를 생성
# session 스코프 async fixture는 이 구조와 충돌하여 ScopeMismatch 에러를 유발할 수 있음
# 이를 방지하기 위해 async fixture는 모두 function 스코프로 유지
@pytest_asyncio.fixture
async def client(db_session, fake_identity_provider, fake_event_bus):
    """비동기 테스트 클라이언트 (테스트 DB 사용)"""

    # 테스트용 데이터베이스로 의존성 오버라이드
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_provider_client] = (
        lambda: fake_identity_provider
    )
    app.dependency_overrides[get_event_bus_client] = lambda: fake_event_bus

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport, base_url="http://test"
    ) as client:
        yield client

    # 정리
    app.dependency_overrides.clear()


@pytest.fixture
def anyio_backend():
    """anyio 백엔드 설정"""
    return "asyncio"


@pytest.fixture
def api_key_header():
    """Internal API Key 헤더"""
    return {"X-Internal-Api-Key": settings.internal_api_key}
