"""인바운드 이벤트 디코딩 테스트"""

import pytest

from app.domains.sync.events import (
    BulkSyncRequestedEvent,
    EventEnvelope,
    IdentityCreatedEvent,
    IdentityDeletedEvent,
    IdentityUpdatedEvent,
    decode_event,
)
from app.domains.sync.exceptions import InvalidEventPayloadException

PROFILE_DATA = {
    "externalId": "user_1",
    "firstName": "Ada",
    "lastName": "Lovelace",
    "username": "ada",
    "email": "ada@example.com",
    "imageUrl": None,
}


class TestEventEnvelope:
    """이벤트 봉투 테스트"""

    def test_plain_envelope(self):
        """name/data 형태"""
        envelope = EventEnvelope.model_validate(
            {"name": "identity.created", "data": PROFILE_DATA, "id": "evt_1"}
        )
        assert envelope.name == "identity.created"
        assert envelope.id == "evt_1"

    def test_wrapped_envelope(self):
        """버스 런타임의 {"event": {...}} 형태도 허용"""
        envelope = EventEnvelope.model_validate(
            {"event": {"name": "identity.deleted", "data": {"externalId": "u"}}}
        )
        assert envelope.name == "identity.deleted"
        assert envelope.data == {"externalId": "u"}


class TestDecodeEvent:
    """decode_event 테스트"""

    def test_decode_created(self):
        """identity.created 디코딩"""
        event = decode_event(
            EventEnvelope(name="identity.created", data=PROFILE_DATA)
        )

        assert isinstance(event, IdentityCreatedEvent)
        assert event.data.external_id == "user_1"
        assert event.data.provider_fields() == {
            "first_name": "Ada",
            "last_name": "Lovelace",
            "username": "ada",
            "email": "ada@example.com",
            "image_url": None,
        }

    def test_decode_updated_with_timestamp(self):
        """identity.updated 디코딩 (timestamp 포함)"""
        event = decode_event(
            EventEnvelope(
                name="identity.updated",
                data={**PROFILE_DATA, "timestamp": "2026-01-01T00:00:00Z"},
            )
        )

        assert isinstance(event, IdentityUpdatedEvent)
        assert event.data.timestamp is not None
        assert event.data.timestamp.year == 2026

    def test_decode_deleted(self):
        """identity.deleted 디코딩"""
        event = decode_event(
            EventEnvelope(name="identity.deleted", data={"externalId": "u1"})
        )

        assert isinstance(event, IdentityDeletedEvent)
        assert event.data.external_id == "u1"

    def test_decode_bulk_sync(self):
        """users.bulk-sync 디코딩"""
        event = decode_event(
            EventEnvelope(
                name="users.bulk-sync",
                data={"externalIds": ["a", "b"], "requestedAt": None},
            )
        )

        assert isinstance(event, BulkSyncRequestedEvent)
        assert event.data.external_ids == ["a", "b"]

    def test_unknown_event_returns_none(self):
        """알 수 없는 이벤트는 None"""
        assert decode_event(EventEnvelope(name="billing.paid", data={})) is None

    def test_missing_external_id_raises(self):
        """externalId 누락은 명시적 검증 실패"""
        with pytest.raises(InvalidEventPayloadException) as exc_info:
            decode_event(
                EventEnvelope(name="identity.created", data={"firstName": "x"})
            )

        exc = exc_info.value
        assert exc.status_code == 400
        assert exc.error_code == "INVALID_EVENT_PAYLOAD"
        assert exc.detail_info["event_name"] == "identity.created"
        assert exc.detail_info["errors"][0]["loc"][-1] == "externalId"

    def test_empty_external_id_raises(self):
        """빈 externalId 거부"""
        with pytest.raises(InvalidEventPayloadException):
            decode_event(
                EventEnvelope(name="identity.deleted", data={"externalId": ""})
            )
