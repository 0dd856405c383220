"""Sync 도메인 모듈

외부 아이덴티티 프로바이더의 라이프사이클 이벤트를 로컬 사용자 저장소에 반영하는
동기화 파이프라인입니다.

구조:
    - events.py: 인바운드 이벤트 tagged variant 및 디코딩
    - handlers.py: created / updated / deleted 동기화 핸들러
    - orchestrator.py: 벌크 재동기화 오케스트레이터
    - dispatcher.py: 이벤트 이름 → 핸들러 디스패치 테이블
    - schemas.py: SyncOutcome, 벌크 재동기화 스키마
    - router.py: 인바운드 이벤트 / 재동기화 API 엔드포인트
    - exceptions.py: 도메인 예외
"""

from app.domains.sync.dispatcher import EventRouter
from app.domains.sync.exceptions import (
    InvalidBulkSyncRequestException,
    InvalidEventPayloadException,
    SyncErrorCode,
    SyncFailedException,
)
from app.domains.sync.handlers import SyncHandlers
from app.domains.sync.orchestrator import BulkReconciliationOrchestrator
from app.domains.sync.router import events_router, reconciliation_router
from app.domains.sync.schemas import (
    BulkSyncRequest,
    BulkSyncResponse,
    ReconciliationResult,
    SyncAction,
    SyncOutcome,
)

__all__ = [
    "EventRouter",
    "SyncHandlers",
    "BulkReconciliationOrchestrator",
    "SyncAction",
    "SyncOutcome",
    "ReconciliationResult",
    "BulkSyncRequest",
    "BulkSyncResponse",
    "events_router",
    "reconciliation_router",
    "SyncErrorCode",
    "SyncFailedException",
    "InvalidEventPayloadException",
    "InvalidBulkSyncRequestException",
]
