"""서버 시작 시 마이그레이션 확인 테스트"""

from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from app.core import migration
from app.core.migration import MigrationStatus, run_migrations_on_startup


class TestRunMigrationsOnStartup:
    """run_migrations_on_startup 테스트"""

    def test_up_to_date_does_not_upgrade(self):
        """최신 상태면 업그레이드하지 않음"""
        with patch.object(
            migration,
            "check_migration_status",
            return_value=MigrationStatus(current="abc", head="abc"),
        ), patch.object(migration.command, "upgrade") as mock_upgrade:
            run_migrations_on_startup(auto_migrate=True)

        mock_upgrade.assert_not_called()

    def test_behind_upgrades_when_enabled(self):
        """뒤처진 경우 자동 업그레이드"""
        with patch.object(
            migration,
            "check_migration_status",
            return_value=MigrationStatus(current=None, head="abc"),
        ), patch.object(migration.command, "upgrade") as mock_upgrade:
            run_migrations_on_startup(auto_migrate=True)

        mock_upgrade.assert_called_once()
        assert mock_upgrade.call_args.args[1] == "head"

    def test_behind_only_logs_when_disabled(self):
        """자동 마이그레이션 비활성화 시 상태만 확인"""
        with patch.object(
            migration,
            "check_migration_status",
            return_value=MigrationStatus(current="old", head="new"),
        ), patch.object(migration.command, "upgrade") as mock_upgrade:
            run_migrations_on_startup(auto_migrate=False)

        mock_upgrade.assert_not_called()

    def test_database_unreachable_outside_production(self):
        """비프로덕션 환경에서는 DB 연결 실패에도 계속 시작"""
        error = OperationalError("SELECT 1", {}, Exception("refused"))
        with patch.object(
            migration, "check_migration_status", side_effect=error
        ), patch.object(migration.settings, "app_env", "development"):
            run_migrations_on_startup()

    def test_database_unreachable_in_production(self):
        """프로덕션 환경에서는 시작 실패"""
        error = OperationalError("SELECT 1", {}, Exception("refused"))
        with patch.object(
            migration, "check_migration_status", side_effect=error
        ), patch.object(migration.settings, "app_env", "production"):
            with pytest.raises(RuntimeError):
                run_migrations_on_startup()
