"""인바운드 이벤트 타입 정의

이벤트 이름별로 타입이 지정된 페이로드를 갖는 tagged variant 입니다.
인바운드 경계에서 ``decode_event`` 로 디코딩되며, 알려진 이벤트의 페이로드가
유효하지 않으면 명시적인 검증 실패를 발생시킵니다.
"""

from datetime import datetime
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    model_validator,
)

from app.core.event_bus import EventName
from app.core.identity_provider import IdentityProfile
from app.domains.sync.exceptions import InvalidEventPayloadException
from app.domains.users.models import PROVIDER_FIELDS


class IdentityEventPayload(IdentityProfile):
    """identity.created / identity.updated 페이로드"""

    timestamp: Optional[datetime] = None

    def provider_fields(self) -> dict[str, Any]:
        """프로바이더 소유 필드 값"""
        return self.model_dump(include=set(PROVIDER_FIELDS))


class IdentityDeletedPayload(BaseModel):
    """identity.deleted 페이로드"""

    model_config = ConfigDict(populate_by_name=True)

    external_id: str = Field(..., min_length=1, alias="externalId")
    timestamp: Optional[datetime] = None


class BulkSyncRequestedPayload(BaseModel):
    """users.bulk-sync 페이로드"""

    model_config = ConfigDict(populate_by_name=True)

    external_ids: list[str] = Field(..., alias="externalIds")
    requested_at: Optional[datetime] = Field(default=None, alias="requestedAt")


class IdentityCreatedEvent(BaseModel):
    name: Literal["identity.created"]
    data: IdentityEventPayload


class IdentityUpdatedEvent(BaseModel):
    name: Literal["identity.updated"]
    data: IdentityEventPayload


class IdentityDeletedEvent(BaseModel):
    name: Literal["identity.deleted"]
    data: IdentityDeletedPayload


class BulkSyncRequestedEvent(BaseModel):
    name: Literal["users.bulk-sync"]
    data: BulkSyncRequestedPayload


InboundEvent = Annotated[
    Union[
        IdentityCreatedEvent,
        IdentityUpdatedEvent,
        IdentityDeletedEvent,
        BulkSyncRequestedEvent,
    ],
    Field(discriminator="name"),
]

_inbound_event_adapter: TypeAdapter[InboundEvent] = TypeAdapter(InboundEvent)

KNOWN_EVENT_NAMES = frozenset(
    {
        EventName.IDENTITY_CREATED.value,
        EventName.IDENTITY_UPDATED.value,
        EventName.IDENTITY_DELETED.value,
        EventName.USERS_BULK_SYNC.value,
    }
)


class EventEnvelope(BaseModel):
    """이벤트 버스가 전달하는 이벤트 봉투

    ``{"name", "data", "id", "ts"}`` 형태이며, 버스 런타임이
    ``{"event": {...}}`` 로 감싸서 보내는 경우도 허용합니다.
    """

    name: str = Field(..., min_length=1)
    data: dict[str, Any] = Field(default_factory=dict)
    id: Optional[str] = None
    ts: Optional[int] = None

    @model_validator(mode="before")
    @classmethod
    def unwrap_event(cls, value: Any) -> Any:
        if isinstance(value, dict) and isinstance(value.get("event"), dict):
            return value["event"]
        return value


def decode_event(envelope: EventEnvelope) -> Optional[InboundEvent]:
    """봉투를 타입이 지정된 이벤트로 디코딩

    Args:
        envelope: 인바운드 이벤트 봉투

    Returns:
        디코딩된 이벤트, 알 수 없는 이벤트 이름이면 None

    Raises:
        InvalidEventPayloadException: 알려진 이벤트의 페이로드가 유효하지 않은 경우
    """
    if envelope.name not in KNOWN_EVENT_NAMES:
        return None

    try:
        return _inbound_event_adapter.validate_python(
            {"name": envelope.name, "data": envelope.data}
        )
    except ValidationError as e:
        errors = [
            {"loc": [str(part) for part in err["loc"]], "msg": err["msg"]}
            for err in e.errors()
        ]
        raise InvalidEventPayloadException(
            event_name=envelope.name, errors=errors
        )
