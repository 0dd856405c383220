"""인바운드 이벤트 라우팅

이벤트 이름 → 처리 함수 디스패치 테이블입니다.
같은 엔드포인트로 무관한 이벤트가 전달될 수 있으므로 알 수 없는 이벤트는
핸들러를 호출하지 않고 성공(handled=False)으로 처리합니다.
"""

from typing import Any, Awaitable, Callable

from app.core.event_bus import EventName
from app.core.logging import get_logger
from app.core.middlewares.context import get_request_id
from app.domains.sync.events import (
    BulkSyncRequestedEvent,
    EventEnvelope,
    IdentityCreatedEvent,
    IdentityDeletedEvent,
    IdentityUpdatedEvent,
    decode_event,
)
from app.domains.sync.handlers import SyncHandlers
from app.domains.sync.orchestrator import BulkReconciliationOrchestrator
from app.domains.sync.schemas import EventDispatchResult

logger = get_logger(__name__)

EventRoute = Callable[[Any], Awaitable[EventDispatchResult]]


class EventRouter:
    """인바운드 이벤트 디스패처"""

    def __init__(
        self,
        handlers: SyncHandlers,
        orchestrator: BulkReconciliationOrchestrator,
    ):
        self.handlers = handlers
        self.orchestrator = orchestrator
        self._routes: dict[str, EventRoute] = {
            EventName.IDENTITY_CREATED.value: self._on_identity_created,
            EventName.IDENTITY_UPDATED.value: self._on_identity_updated,
            EventName.IDENTITY_DELETED.value: self._on_identity_deleted,
            EventName.USERS_BULK_SYNC.value: self._on_bulk_sync_requested,
        }

    @property
    def event_names(self) -> list[str]:
        """등록된 이벤트 이름 목록"""
        return sorted(self._routes)

    async def dispatch(self, envelope: EventEnvelope) -> EventDispatchResult:
        """이벤트를 이름에 맞는 핸들러로 전달

        Raises:
            InvalidEventPayloadException: 알려진 이벤트의 페이로드가 유효하지 않은 경우
            InvalidBulkSyncRequestException: users.bulk-sync 요청 구조 오류
        """
        route = self._routes.get(envelope.name)
        if route is None:
            logger.info(
                "Ignoring unhandled event",
                extra={
                    "request_id": get_request_id(),
                    "event_name": envelope.name,
                    "event_id": envelope.id,
                },
            )
            return EventDispatchResult(event_name=envelope.name, handled=False)

        event = decode_event(envelope)
        return await route(event)

    async def _on_identity_created(
        self, event: IdentityCreatedEvent
    ) -> EventDispatchResult:
        outcome = await self.handlers.handle_created(event.data)
        return EventDispatchResult(
            event_name=event.name, handled=True, outcome=outcome
        )

    async def _on_identity_updated(
        self, event: IdentityUpdatedEvent
    ) -> EventDispatchResult:
        outcome = await self.handlers.handle_updated(event.data)
        return EventDispatchResult(
            event_name=event.name, handled=True, outcome=outcome
        )

    async def _on_identity_deleted(
        self, event: IdentityDeletedEvent
    ) -> EventDispatchResult:
        outcome = await self.handlers.handle_deleted(event.data)
        return EventDispatchResult(
            event_name=event.name, handled=True, outcome=outcome
        )

    async def _on_bulk_sync_requested(
        self, event: BulkSyncRequestedEvent
    ) -> EventDispatchResult:
        results = await self.orchestrator.reconcile(event.data.external_ids)
        return EventDispatchResult(
            event_name=event.name, handled=True, results=results
        )
