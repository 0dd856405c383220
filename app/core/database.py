"""데이터베이스 엔진 및 세션 관리

요청 단위 세션을 제공하며, 핸들러가 예외 없이 반환하면 커밋합니다.
동기화 핸들러는 저장소 오류 시 스스로 롤백한 뒤 실패 결과를 반환합니다.
"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.core.config import settings

engine = create_async_engine(
    settings.database_url,
    echo=settings.database_echo,
    pool_pre_ping=True,
    pool_size=settings.database_pool_size,
    max_overflow=settings.database_max_overflow,
)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    """SQLAlchemy 모델 베이스 클래스"""


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """요청 단위 DB 세션 의존성"""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def close_db() -> None:
    """커넥션 풀 정리 (애플리케이션 종료 시)"""
    await engine.dispose()
