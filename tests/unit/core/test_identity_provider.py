"""아이덴티티 프로바이더 클라이언트 단위 테스트"""

import httpx
import pytest

from app.core.config import Settings
from app.core.exceptions import ErrorCode
from app.core.identity_provider import (
    IdentityNotFoundException,
    IdentityProfile,
    IdentityProviderClient,
    IdentityProviderException,
    profile_from_provider,
)

CLERK_USER = {
    "id": "user_2abc",
    "first_name": "Ada",
    "last_name": "Lovelace",
    "username": "ada",
    "email_addresses": [
        {"id": "idn_1", "email_address": "ada@example.com"},
        {"id": "idn_2", "email_address": "ada@other.example.com"},
    ],
    "image_url": "https://img.example.com/ada.png",
    "public_metadata": {},
}


def make_client(handler) -> IdentityProviderClient:
    """MockTransport를 사용하는 IdentityProviderClient 생성"""
    test_settings = Settings(
        identity_provider_base_url="https://idp.test/v1",
        identity_provider_secret_key="sk_test_123",
    )
    return IdentityProviderClient(
        test_settings, transport=httpx.MockTransport(handler)
    )


class TestProfileMapping:
    """프로바이더 응답 변환 테스트"""

    def test_maps_first_email_address(self):
        """첫 번째 이메일 주소 사용"""
        profile = profile_from_provider(CLERK_USER)

        assert profile.external_id == "user_2abc"
        assert profile.first_name == "Ada"
        assert profile.email == "ada@example.com"
        assert profile.image_url == "https://img.example.com/ada.png"

    def test_missing_email_addresses(self):
        """이메일이 없으면 None"""
        profile = profile_from_provider({"id": "user_1", "email_addresses": []})

        assert profile.email is None
        assert profile.username is None

    def test_event_data_uses_camel_case(self):
        """이벤트 페이로드는 camelCase"""
        data = profile_from_provider(CLERK_USER).to_event_data()

        assert data["externalId"] == "user_2abc"
        assert data["firstName"] == "Ada"
        assert data["imageUrl"] == "https://img.example.com/ada.png"
        assert "external_id" not in data


class TestGetById:
    """get_by_id 테스트"""

    @pytest.mark.asyncio
    async def test_get_by_id_success(self):
        """정상 조회 및 Bearer 인증 헤더"""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=CLERK_USER)

        profile = await make_client(handler).get_by_id("user_2abc")

        assert isinstance(profile, IdentityProfile)
        assert profile.username == "ada"
        assert seen[0].url.path == "/v1/users/user_2abc"
        assert seen[0].headers["Authorization"] == "Bearer sk_test_123"

    @pytest.mark.asyncio
    async def test_get_by_id_not_found(self):
        """404는 IdentityNotFoundException"""
        client = make_client(lambda request: httpx.Response(404, json={}))

        with pytest.raises(IdentityNotFoundException) as exc_info:
            await client.get_by_id("user_missing")

        assert exc_info.value.status_code == 404
        assert exc_info.value.error_code == ErrorCode.IDENTITY_NOT_FOUND
        assert exc_info.value.detail_info == {"external_id": "user_missing"}

    @pytest.mark.asyncio
    async def test_get_by_id_server_error(self):
        """5xx는 IdentityProviderException"""
        client = make_client(lambda request: httpx.Response(500))

        with pytest.raises(IdentityProviderException) as exc_info:
            await client.get_by_id("user_1")

        assert exc_info.value.status_code == 502
        assert exc_info.value.detail_info["error"] == "HTTP 500"

    @pytest.mark.asyncio
    async def test_get_by_id_timeout(self):
        """타임아웃은 IdentityProviderException"""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(IdentityProviderException):
            await make_client(handler).get_by_id("user_1")

    @pytest.mark.asyncio
    async def test_get_by_id_malformed_body(self):
        """id 없는 응답은 IdentityProviderException"""
        client = make_client(
            lambda request: httpx.Response(200, json={"first_name": "x"})
        )

        with pytest.raises(IdentityProviderException):
            await client.get_by_id("user_1")

    @pytest.mark.asyncio
    async def test_get_by_id_non_json_body(self):
        """JSON이 아닌 응답도 IdentityProviderException"""
        client = make_client(
            lambda request: httpx.Response(200, text="<html>oops</html>")
        )

        with pytest.raises(IdentityProviderException) as exc_info:
            await client.get_by_id("user_1")

        assert "Malformed profile" in exc_info.value.detail_info["error"]

    @pytest.mark.asyncio
    async def test_get_by_id_non_object_email_entry(self):
        """email_addresses 항목이 객체가 아니면 IdentityProviderException"""
        client = make_client(
            lambda request: httpx.Response(
                200, json={"id": "user_1", "email_addresses": ["a@example.com"]}
            )
        )

        with pytest.raises(IdentityProviderException) as exc_info:
            await client.get_by_id("user_1")

        assert exc_info.value.status_code == 502
        assert "Malformed profile" in exc_info.value.detail_info["error"]
