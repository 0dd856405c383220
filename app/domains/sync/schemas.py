"""Sync 도메인 스키마 정의

동기화 핸들러 결과, 벌크 재동기화 요청/결과, 인바운드 이벤트 처리 결과 스키마입니다.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class SyncAction(str, Enum):
    """동기화 핸들러 동작"""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


class SyncOutcome(BaseModel):
    """동기화 핸들러 1회 실행 결과

    Attributes:
        success: 성공 여부
        external_id: 외부 아이덴티티 ID
        action: 수행한 동작
        record_id: 로컬 레코드 ID (있는 경우)
        found: 삭제 대상 존재 여부 (삭제 시)
        skipped: 오래된 이벤트라 반영하지 않은 경우 True
        error: 실패 설명
        error_code: 실패 에러 코드
    """

    success: bool
    external_id: str
    action: SyncAction
    record_id: Optional[int] = None
    found: Optional[bool] = None
    skipped: bool = False
    error: Optional[str] = None
    error_code: Optional[str] = None


class ReconciliationResult(BaseModel):
    """ID 단위 재동기화 결과"""

    external_id: str
    success: bool
    event_ids: list[str] = Field(default_factory=list)
    error: Optional[str] = None


class BulkSyncRequest(BaseModel):
    """벌크 재동기화 요청 스키마

    목록의 개수/공백 검증은 오케스트레이터가 BULK_SYNC_MAX_IDS 기준으로 수행합니다.
    """

    external_ids: list[str] = Field(
        ..., description="재동기화할 외부 아이덴티티 ID 목록"
    )


class BulkSyncResponse(BaseModel):
    """벌크 재동기화 응답 스키마

    deferred=True 인 경우 users.bulk-sync 이벤트만 발행하며 results는 비어 있습니다.
    """

    total: int = Field(..., description="요청된 ID 수")
    succeeded: int = Field(default=0, description="성공한 ID 수")
    failed: int = Field(default=0, description="실패한 ID 수")
    results: list[ReconciliationResult] = Field(
        default_factory=list, description="입력 순서와 동일한 ID별 결과"
    )
    deferred: bool = Field(default=False, description="이벤트 발행으로 위임 여부")
    event_ids: list[str] = Field(default_factory=list)

    @classmethod
    def from_results(
        cls, results: list[ReconciliationResult]
    ) -> "BulkSyncResponse":
        succeeded = sum(1 for result in results if result.success)
        return cls(
            total=len(results),
            succeeded=succeeded,
            failed=len(results) - succeeded,
            results=results,
        )


class EventDispatchResult(BaseModel):
    """인바운드 이벤트 처리 결과

    handled=False 이면 이 파이프라인과 무관한 이벤트로 아무 처리도 하지 않은 것입니다.
    """

    event_name: str
    handled: bool
    outcome: Optional[SyncOutcome] = None
    results: Optional[list[ReconciliationResult]] = None


class EventRegistrationResponse(BaseModel):
    """이벤트 엔드포인트 조회 응답 (버스 런타임 등록/점검용)"""

    events: list[str]
