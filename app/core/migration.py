"""마이그레이션 자동 실행 유틸리티

서버 시작 시 Alembic 리비전을 확인하고, 설정에 따라 head까지 업그레이드합니다.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from alembic.util import CommandError
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]


@dataclass(frozen=True)
class MigrationStatus:
    current: Optional[str]
    head: Optional[str]

    @property
    def is_up_to_date(self) -> bool:
        return self.current is not None and self.current == self.head


def get_alembic_config() -> Config:
    """Alembic 설정 객체 반환"""
    config = Config(str(PROJECT_ROOT / "alembic.ini"))
    config.set_main_option("script_location", str(PROJECT_ROOT / "migrations"))
    config.set_main_option("sqlalchemy.url", settings.sync_database_url)
    return config


def get_current_revision() -> Optional[str]:
    """현재 데이터베이스의 마이그레이션 버전 조회

    Raises:
        SQLAlchemyError: 데이터베이스에 연결할 수 없는 경우
    """
    engine = create_engine(settings.sync_database_url)
    try:
        with engine.connect() as conn:
            rev = MigrationContext.configure(conn).get_current_revision()
            return str(rev) if rev else None
    finally:
        engine.dispose()


def get_head_revision() -> Optional[str]:
    """최신 마이그레이션 버전 조회"""
    script = ScriptDirectory.from_config(get_alembic_config())
    head = script.get_current_head()
    return str(head) if head else None


def check_migration_status() -> MigrationStatus:
    return MigrationStatus(
        current=get_current_revision(), head=get_head_revision()
    )


def run_migrations_on_startup(auto_migrate: bool = True) -> None:
    """서버 시작 시 마이그레이션 확인 및 실행

    Args:
        auto_migrate: True면 head까지 업그레이드, False면 상태만 로깅

    Raises:
        RuntimeError: 프로덕션 환경에서 확인 또는 업그레이드에 실패한 경우
    """
    try:
        status = check_migration_status()
        if status.is_up_to_date:
            logger.info(
                "Database schema is up to date",
                extra={"revision": status.current},
            )
            return

        logger.warning(
            "Database schema is behind",
            extra={"current": status.current, "head": status.head},
        )
        if auto_migrate:
            command.upgrade(get_alembic_config(), "head")
            logger.info(
                "Database migrated", extra={"revision": status.head}
            )
    except (SQLAlchemyError, CommandError) as e:
        logger.error("Migration check failed", extra={"error": str(e)})
        if settings.is_production:
            raise RuntimeError("프로덕션 환경에서 마이그레이션 확인 실패") from e
        logger.warning("Continuing startup without migrations (non-production)")
