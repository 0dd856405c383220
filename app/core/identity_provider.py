"""아이덴티티 프로바이더 조회 클라이언트

외부 아이덴티티 프로바이더(Clerk Backend API)에서 사용자 정보를 조회하여
동기화 파이프라인이 사용하는 ``IdentityProfile`` 형태로 변환합니다.
"""

from functools import lru_cache
from typing import Any, Optional
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ConfigDict, Field

from app.core.config import Settings, settings
from app.core.exceptions import BadGatewayException, ErrorCode, NotFoundException
from app.core.logging import get_logger

logger = get_logger(__name__)


class IdentityProfile(BaseModel):
    """프로바이더가 소유하는 사용자 프로필 필드

    외부 페이로드 형태가 고정되어 있으므로 wire 필드명은 camelCase를 사용합니다.
    """

    model_config = ConfigDict(populate_by_name=True)

    external_id: str = Field(..., min_length=1, alias="externalId")
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    username: Optional[str] = None
    email: Optional[str] = None
    image_url: Optional[str] = Field(default=None, alias="imageUrl")

    def to_event_data(self) -> dict[str, Any]:
        """이벤트 페이로드(dict, camelCase)로 변환"""
        return self.model_dump(by_alias=True, mode="json")


class IdentityNotFoundException(NotFoundException):
    """프로바이더에 해당 아이덴티티가 없는 경우"""

    def __init__(self, external_id: str):
        super().__init__(
            message="아이덴티티 프로바이더에서 사용자를 찾을 수 없습니다.",
            error_code=ErrorCode.IDENTITY_NOT_FOUND,
            detail={"external_id": external_id},
        )


class IdentityProviderException(BadGatewayException):
    """프로바이더 호출 실패 (전송 오류, 비정상 응답)"""

    def __init__(self, external_id: str, original_error: str):
        super().__init__(
            message=f"사용자 정보 조회에 실패했습니다: {original_error}",
            error_code=ErrorCode.IDENTITY_PROVIDER_ERROR,
            detail={"external_id": external_id, "error": original_error},
        )


def profile_from_provider(data: dict[str, Any]) -> IdentityProfile:
    """프로바이더 응답(snake_case)을 IdentityProfile로 변환

    이메일은 ``email_addresses`` 의 첫 번째 항목을 사용합니다.
    """
    email_addresses = data.get("email_addresses") or []
    email = email_addresses[0].get("email_address") if email_addresses else None

    return IdentityProfile(
        external_id=data["id"],
        first_name=data.get("first_name"),
        last_name=data.get("last_name"),
        username=data.get("username"),
        email=email,
        image_url=data.get("image_url"),
    )


class IdentityProviderClient:
    """아이덴티티 프로바이더 읽기 클라이언트"""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """클라이언트 초기화

        Args:
            settings: 애플리케이션 설정
            transport: httpx 전송 계층 (테스트 대역 주입용)
        """
        self.base_url = settings.identity_provider_base_url.rstrip("/")
        self.timeout = settings.identity_provider_timeout
        self._headers = {
            "Authorization": f"Bearer {settings.identity_provider_secret_key}"
        }
        self._transport = transport

    async def get_by_id(self, external_id: str) -> IdentityProfile:
        """외부 ID로 사용자 프로필 조회

        Args:
            external_id: 외부 아이덴티티 ID

        Returns:
            IdentityProfile: 현재 프로필

        Raises:
            IdentityNotFoundException: 프로바이더에 사용자가 없는 경우
            IdentityProviderException: 전송 오류 또는 비정상 응답
        """
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self._headers,
                transport=self._transport,
            ) as client:
                response = await client.get(
                    f"/users/{quote(external_id, safe='')}"
                )
                response.raise_for_status()

        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                raise IdentityNotFoundException(external_id=external_id)
            logger.error(
                f"Identity provider error for {external_id}: "
                f"HTTP {e.response.status_code}"
            )
            raise IdentityProviderException(
                external_id=external_id,
                original_error=f"HTTP {e.response.status_code}",
            )
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch identity {external_id}: {e}")
            raise IdentityProviderException(
                external_id=external_id, original_error=str(e)
            )

        try:
            return profile_from_provider(response.json())
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise IdentityProviderException(
                external_id=external_id,
                original_error=f"Malformed profile: {e}",
            )


@lru_cache
def _create_identity_provider_client() -> IdentityProviderClient:
    """아이덴티티 프로바이더 클라이언트 생성 (싱글톤)"""
    return IdentityProviderClient(settings)


def get_identity_provider_client() -> IdentityProviderClient:
    """아이덴티티 프로바이더 클라이언트 의존성"""
    return _create_identity_provider_client()
