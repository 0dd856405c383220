"""User Service 단위 테스트"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.core.utils.datetime import now_utc
from app.core.utils.pagination import PageParams
from app.domains.users.exceptions import (
    EmptyProfileUpdateException,
    UserNotFoundException,
)
from app.domains.users.models import SyncedUser, UserRole
from app.domains.users.schemas import UserProfileUpdate
from app.domains.users.service import UserService


@pytest.fixture
def mock_session():
    """Mock AsyncSession"""
    return MagicMock()


@pytest.fixture
def user_service(mock_session):
    """UserService 인스턴스"""
    return UserService(mock_session)


def make_user(**kwargs) -> SyncedUser:
    return SyncedUser(
        id=kwargs.pop("id", 1),
        external_id=kwargs.pop("external_id", "user_1"),
        role=kwargs.pop("role", UserRole.USER),
        last_synced_at=now_utc(),
        **kwargs,
    )


class TestUserServiceGet:
    """UserService 조회 메서드 테스트"""

    @pytest.mark.asyncio
    async def test_get_user_success(self, user_service):
        """사용자 조회 성공"""
        # Given
        mock_user = make_user()
        user_service.repository.find_by_external_id = AsyncMock(
            return_value=mock_user
        )

        # When
        result = await user_service.get_user("user_1")

        # Then
        assert result == mock_user
        user_service.repository.find_by_external_id.assert_called_once_with(
            "user_1"
        )

    @pytest.mark.asyncio
    async def test_get_user_not_found(self, user_service):
        """사용자 없음"""
        user_service.repository.find_by_external_id = AsyncMock(
            return_value=None
        )

        with pytest.raises(UserNotFoundException) as exc_info:
            await user_service.get_user("user_404")

        assert exc_info.value.detail_info == {"external_id": "user_404"}

    @pytest.mark.asyncio
    async def test_get_users_list(self, user_service):
        """목록 조회 시 페이지를 offset으로 변환"""
        # Given
        user_service.repository.get_list = AsyncMock(
            return_value=[make_user(id=1), make_user(id=2, external_id="u2")]
        )
        user_service.repository.count = AsyncMock(return_value=42)

        # When
        users, total = await user_service.get_users(
            PageParams(page=3, size=10)
        )

        # Then
        assert len(users) == 2
        assert total == 42
        user_service.repository.get_list.assert_called_once_with(
            skip=20, limit=10
        )


class TestUserServiceUpdateProfile:
    """로컬 프로필 수정 테스트"""

    @pytest.mark.asyncio
    async def test_update_role(self, user_service):
        """역할만 수정 (주소 유지)"""
        # Given
        user = make_user(address={"city": "Seoul"})
        user_service.repository.find_by_external_id = AsyncMock(
            return_value=user
        )
        user_service.repository.update = AsyncMock(side_effect=lambda u: u)

        # When
        with patch("app.domains.users.service.logger"):
            result = await user_service.update_profile(
                "user_1", UserProfileUpdate(role=UserRole.ADMIN)
            )

        # Then
        assert result.role == UserRole.ADMIN
        assert result.address == {"city": "Seoul"}
        user_service.repository.update.assert_awaited_once_with(user)

    @pytest.mark.asyncio
    async def test_update_address_and_clear(self, user_service):
        """주소 설정 후 null로 삭제"""
        user = make_user()
        user_service.repository.find_by_external_id = AsyncMock(
            return_value=user
        )
        user_service.repository.update = AsyncMock(side_effect=lambda u: u)

        with patch("app.domains.users.service.logger"):
            await user_service.update_profile(
                "user_1",
                UserProfileUpdate.model_validate(
                    {"address": {"city": "Busan", "country": "KR"}}
                ),
            )
            assert user.address["city"] == "Busan"
            assert user.address["country"] == "KR"

            await user_service.update_profile(
                "user_1", UserProfileUpdate.model_validate({"address": None})
            )
            assert user.address is None

    @pytest.mark.asyncio
    async def test_empty_update_rejected(self, user_service):
        """수정할 필드가 없으면 거부 (조회하지 않음)"""
        user_service.repository.find_by_external_id = AsyncMock()

        with pytest.raises(EmptyProfileUpdateException):
            await user_service.update_profile("user_1", UserProfileUpdate())

        user_service.repository.find_by_external_id.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_unknown_user(self, user_service):
        """없는 사용자 수정"""
        user_service.repository.find_by_external_id = AsyncMock(
            return_value=None
        )

        with pytest.raises(UserNotFoundException):
            await user_service.update_profile(
                "user_404", UserProfileUpdate(role=UserRole.ADMIN)
            )
