"""Sync 도메인 라우터

- events_router: 이벤트 버스가 이벤트를 전달하는 인바운드 엔드포인트
- reconciliation_router: 온디맨드 재동기화 및 이벤트 발행 API (API Key 인증)
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.dependencies import verify_internal_api_key
from app.core.event_bus import (
    EventBusClient,
    EventSendResult,
    get_event_bus_client,
)
from app.core.identity_provider import (
    IdentityProviderClient,
    get_identity_provider_client,
)
from app.core.schemas import APIResponse, ErrorResponse, create_response
from app.domains.sync.dispatcher import EventRouter
from app.domains.sync.events import KNOWN_EVENT_NAMES, EventEnvelope
from app.domains.sync.exceptions import SyncErrorCode, SyncFailedException
from app.domains.sync.handlers import SyncHandlers
from app.domains.sync.orchestrator import BulkReconciliationOrchestrator
from app.domains.sync.schemas import (
    BulkSyncRequest,
    BulkSyncResponse,
    EventDispatchResult,
    EventRegistrationResponse,
    ReconciliationResult,
)
from app.domains.users.schemas import UserActivityRequest

events_router = APIRouter()
reconciliation_router = APIRouter()


def get_sync_handlers(session: AsyncSession = Depends(get_db)) -> SyncHandlers:
    """SyncHandlers 의존성"""
    return SyncHandlers(
        session, reject_stale_updates=settings.sync_reject_stale_updates
    )


def get_orchestrator(
    identity_provider: IdentityProviderClient = Depends(
        get_identity_provider_client
    ),
    event_bus: EventBusClient = Depends(get_event_bus_client),
) -> BulkReconciliationOrchestrator:
    """BulkReconciliationOrchestrator 의존성"""
    return BulkReconciliationOrchestrator(
        identity_provider,
        event_bus,
        concurrency=settings.bulk_sync_concurrency,
        max_ids=settings.bulk_sync_max_ids,
    )


def get_event_router(
    handlers: SyncHandlers = Depends(get_sync_handlers),
    orchestrator: BulkReconciliationOrchestrator = Depends(get_orchestrator),
) -> EventRouter:
    """EventRouter 의존성"""
    return EventRouter(handlers, orchestrator)


def _registration_response() -> APIResponse[EventRegistrationResponse]:
    return create_response(
        data=EventRegistrationResponse(events=sorted(KNOWN_EVENT_NAMES)),
        message="이벤트 엔드포인트가 활성화되어 있습니다.",
    )


@events_router.get(
    "", response_model=APIResponse[EventRegistrationResponse]
)
async def inspect_events():
    """이벤트 엔드포인트 점검 (버스 런타임 introspection)"""
    return _registration_response()


@events_router.put(
    "", response_model=APIResponse[EventRegistrationResponse]
)
async def register_events():
    """이벤트 엔드포인트 등록 (버스 런타임 sync)"""
    return _registration_response()


@events_router.post(
    "",
    response_model=APIResponse[EventDispatchResult],
    responses={
        400: {"model": ErrorResponse, "description": "페이로드 검증 실패"},
        409: {"model": ErrorResponse, "description": "동기화 대상 없음"},
        500: {"model": ErrorResponse, "description": "저장소 오류"},
    },
)
async def receive_event(
    envelope: EventEnvelope,
    event_router: EventRouter = Depends(get_event_router),
):
    """이벤트 수신 및 핸들러 디스패치

    핸들러가 실패 결과를 반환하면 버스 런타임이 재시도할 수 있도록 non-2xx로 응답합니다.
    """
    result = await event_router.dispatch(envelope)

    if result.outcome is not None and not result.outcome.success:
        raise SyncFailedException(
            error_code=result.outcome.error_code
            or SyncErrorCode.USER_SYNC_STORE_ERROR.value,
            message=result.outcome.error or "동기화에 실패했습니다.",
            outcome=result.outcome.model_dump(mode="json"),
        )

    return create_response(
        data=result,
        message=(
            "이벤트가 처리되었습니다."
            if result.handled
            else "처리 대상이 아닌 이벤트입니다."
        ),
    )


@reconciliation_router.post(
    "/bulk-sync",
    response_model=APIResponse[BulkSyncResponse],
    status_code=202,
    dependencies=[Depends(verify_internal_api_key)],
)
async def bulk_sync_users(
    bulk_data: BulkSyncRequest,
    defer: bool = Query(False, description="users.bulk-sync 이벤트로 위임"),
    orchestrator: BulkReconciliationOrchestrator = Depends(get_orchestrator),
    event_bus: EventBusClient = Depends(get_event_bus_client),
):
    """벌크 재동기화"""
    if defer:
        orchestrator.validate(bulk_data.external_ids)
        sent = await event_bus.send_bulk_sync_requested(bulk_data.external_ids)
        return create_response(
            data=BulkSyncResponse(
                total=len(bulk_data.external_ids),
                deferred=True,
                event_ids=sent.ids,
            ),
            message="벌크 재동기화 요청 이벤트를 발행했습니다.",
        )

    results = await orchestrator.reconcile(bulk_data.external_ids)
    return create_response(
        data=BulkSyncResponse.from_results(results),
        message="벌크 재동기화 이벤트 발행이 완료되었습니다.",
    )


@reconciliation_router.post(
    "/{external_id}/sync",
    response_model=APIResponse[ReconciliationResult],
    status_code=202,
    dependencies=[Depends(verify_internal_api_key)],
)
async def sync_user(
    external_id: str,
    orchestrator: BulkReconciliationOrchestrator = Depends(get_orchestrator),
):
    """단일 사용자 재동기화"""
    result = await orchestrator.reconcile_one(external_id)
    return create_response(
        data=result,
        message="사용자 재동기화 이벤트를 발행했습니다.",
    )


@reconciliation_router.post(
    "/{external_id}/activity",
    response_model=APIResponse[EventSendResult],
    status_code=202,
    dependencies=[Depends(verify_internal_api_key)],
)
async def record_user_activity(
    external_id: str,
    activity_data: UserActivityRequest,
    event_bus: EventBusClient = Depends(get_event_bus_client),
):
    """사용자 활동 이벤트 발행"""
    sent = await event_bus.send_user_activity(
        external_id, activity_data.activity
    )
    return create_response(
        data=sent,
        message="사용자 활동 이벤트를 발행했습니다.",
    )
