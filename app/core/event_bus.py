"""이벤트 버스 발행 클라이언트

외부 이벤트 버스(Inngest Event API)로 이름이 있는 이벤트를 발행합니다.
발행 성공은 "전달을 위해 수락됨"을 의미하며, 핸들러 실행 완료를 보장하지 않습니다.
재시도는 하지 않습니다 (버스의 at-least-once 전달에 위임).
"""

from enum import Enum
from functools import lru_cache
from typing import Any, Optional

import httpx
from pydantic import BaseModel, Field

from app.core.config import Settings, settings
from app.core.exceptions import BadGatewayException, ErrorCode
from app.core.logging import get_logger
from app.core.utils.datetime import format_iso, now_utc

logger = get_logger(__name__)


class EventName(str, Enum):
    """파이프라인이 발행/수신하는 이벤트 이름"""

    IDENTITY_CREATED = "identity.created"
    IDENTITY_UPDATED = "identity.updated"
    IDENTITY_DELETED = "identity.deleted"
    USER_ACTIVITY = "user.activity"
    USERS_BULK_SYNC = "users.bulk-sync"


class EventSendResult(BaseModel):
    """이벤트 발행 결과

    Attributes:
        name: 발행한 이벤트 이름
        ids: 이벤트 버스가 부여한 이벤트 ID 목록
    """

    name: str
    ids: list[str] = Field(default_factory=list)


class EventDispatchException(BadGatewayException):
    """이벤트 버스가 이벤트를 수락하지 않은 경우"""

    def __init__(self, event_name: str, original_error: str):
        super().__init__(
            message=f"이벤트 발행에 실패했습니다: {event_name}",
            error_code=ErrorCode.EVENT_DISPATCH_ERROR,
            detail={"event_name": event_name, "error": original_error},
        )


class EventBusClient:
    """이벤트 버스 클라이언트

    ``POST {base_url}/e/{event_key}`` 로 ``[{"name", "data", "ts"}]`` 를 전송합니다.
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """이벤트 버스 클라이언트 초기화

        Args:
            settings: 애플리케이션 설정
            transport: httpx 전송 계층 (테스트 대역 주입용)
        """
        self.base_url = settings.event_bus_base_url.rstrip("/")
        self.event_key = settings.event_bus_event_key
        self.timeout = settings.event_bus_timeout
        self._transport = transport

    async def send(self, name: str, data: dict[str, Any]) -> EventSendResult:
        """이름이 있는 이벤트 발행

        Args:
            name: 이벤트 이름
            data: 이벤트 페이로드

        Returns:
            EventSendResult: 버스가 수락한 이벤트 ID

        Raises:
            EventDispatchException: 전송 실패 또는 버스가 거부한 경우
        """
        event = {
            "name": name,
            "data": data,
            "ts": int(now_utc().timestamp() * 1000),
        }

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    f"/e/{self.event_key}", json=[event]
                )
                response.raise_for_status()

        except httpx.HTTPStatusError as e:
            logger.error(
                f"Event bus rejected {name}: HTTP {e.response.status_code}"
            )
            raise EventDispatchException(
                event_name=name,
                original_error=f"HTTP {e.response.status_code}",
            )
        except httpx.HTTPError as e:
            logger.error(f"Failed to send event {name}: {e}")
            raise EventDispatchException(event_name=name, original_error=str(e))

        try:
            body = response.json()
        except ValueError:
            # 2xx 응답이면 본문과 무관하게 수락된 것으로 간주
            body = {}

        ids = body.get("ids", []) if isinstance(body, dict) else []
        logger.info(
            "Event sent",
            extra={"event_name": name, "event_ids": ids},
        )
        return EventSendResult(name=name, ids=[str(i) for i in ids])

    async def send_identity_created(
        self, data: dict[str, Any]
    ) -> EventSendResult:
        """identity.created 이벤트 발행"""
        return await self.send(EventName.IDENTITY_CREATED.value, data)

    async def send_identity_updated(
        self, data: dict[str, Any]
    ) -> EventSendResult:
        """identity.updated 이벤트 발행"""
        return await self.send(EventName.IDENTITY_UPDATED.value, data)

    async def send_identity_deleted(
        self, data: dict[str, Any]
    ) -> EventSendResult:
        """identity.deleted 이벤트 발행"""
        return await self.send(EventName.IDENTITY_DELETED.value, data)

    async def send_custom_event(
        self, name: str, data: dict[str, Any]
    ) -> EventSendResult:
        """호출자가 지정한 이름으로 이벤트 발행"""
        return await self.send(name, data)

    async def send_user_activity(
        self, external_id: str, activity: str
    ) -> EventSendResult:
        """user.activity 이벤트 발행

        Args:
            external_id: 외부 아이덴티티 ID
            activity: 활동 라벨
        """
        return await self.send(
            EventName.USER_ACTIVITY.value,
            {
                "externalId": external_id,
                "activity": activity,
                "timestamp": format_iso(now_utc()),
            },
        )

    async def send_bulk_sync_requested(
        self, external_ids: list[str]
    ) -> EventSendResult:
        """users.bulk-sync 이벤트 발행

        Args:
            external_ids: 재동기화할 외부 아이덴티티 ID 목록
        """
        return await self.send(
            EventName.USERS_BULK_SYNC.value,
            {
                "externalIds": list(external_ids),
                "requestedAt": format_iso(now_utc()),
            },
        )


@lru_cache
def _create_event_bus_client() -> EventBusClient:
    """이벤트 버스 클라이언트 생성 (싱글톤)"""
    return EventBusClient(settings)


def get_event_bus_client() -> EventBusClient:
    """이벤트 버스 클라이언트 의존성

    Returns:
        EventBusClient 인스턴스
    """
    return _create_event_bus_client()
