"""Users 도메인 서비스

동기화된 사용자 조회와 로컬 권한 필드(role, address) 수정을 담당합니다.
프로바이더 소유 필드는 동기화 핸들러만 변경합니다.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.core.middlewares.context import get_request_id
from app.core.utils.pagination import PageParams
from app.domains.users.exceptions import (
    EmptyProfileUpdateException,
    UserNotFoundException,
)
from app.domains.users.models import SyncedUser
from app.domains.users.repository import UserRepository
from app.domains.users.schemas import UserProfileUpdate

logger = get_logger(__name__)


class UserService:
    """사용자 서비스"""

    def __init__(self, session: AsyncSession):
        self.repository = UserRepository(session)

    async def get_user(self, external_id: str) -> SyncedUser:
        """사용자 조회

        Args:
            external_id: 외부 아이덴티티 ID

        Returns:
            사용자 객체

        Raises:
            UserNotFoundException: 사용자를 찾을 수 없는 경우
        """
        user = await self.repository.find_by_external_id(external_id)
        if not user:
            raise UserNotFoundException(external_id=external_id)
        return user

    async def get_users(
        self, page_params: PageParams
    ) -> tuple[list[SyncedUser], int]:
        """사용자 목록 조회

        Returns:
            (사용자 목록, 전체 사용자 수) 튜플
        """
        users = await self.repository.get_list(
            skip=page_params.skip, limit=page_params.limit
        )
        total = await self.repository.count()
        return list(users), total

    async def update_profile(
        self, external_id: str, data: UserProfileUpdate
    ) -> SyncedUser:
        """로컬 프로필 수정

        요청에 포함된 필드만 반영합니다 (address=null 은 주소 삭제).

        Args:
            external_id: 외부 아이덴티티 ID
            data: 수정할 로컬 필드

        Raises:
            EmptyProfileUpdateException: 수정할 필드가 없는 경우
            UserNotFoundException: 사용자를 찾을 수 없는 경우
        """
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            raise EmptyProfileUpdateException(external_id=external_id)

        user = await self.get_user(external_id)

        if "role" in changes and data.role is not None:
            user.role = data.role
        if "address" in changes:
            user.address = (
                data.address.model_dump() if data.address is not None else None
            )

        updated = await self.repository.update(user)

        logger.info(
            "User profile updated",
            extra={
                "request_id": get_request_id(),
                "external_id": external_id,
                "fields": sorted(changes.keys()),
            },
        )
        return updated
