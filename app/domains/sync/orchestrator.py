"""벌크 재동기화 오케스트레이터

외부 ID 목록을 받아 ID마다 프로바이더에서 현재 프로필을 조회하고
identity.updated 이벤트를 재발행합니다. 재발행 이벤트의 timestamp는 프로필 조회
시각입니다. 저장소에는 직접 쓰지 않으며,
실제 반영은 Updated 핸들러가 수행합니다.

ID 단위 실패는 결과에 기록하고 나머지 ID 처리를 계속합니다.
작업은 제한된 수의 워커가 병렬로 처리하며, 결과는 입력 인덱스 슬롯에 기록되어
완료 순서와 무관하게 입력 순서를 유지합니다.
"""

import asyncio
from typing import Any, Optional

from app.core.event_bus import EventBusClient
from app.core.exceptions import BaseAPIException
from app.core.identity_provider import IdentityProviderClient
from app.core.logging import get_logger
from app.core.utils.datetime import format_iso, now_utc
from app.core.utils.time import measure_time
from app.domains.sync.exceptions import InvalidBulkSyncRequestException
from app.domains.sync.schemas import ReconciliationResult

logger = get_logger(__name__)


def _describe_error(error: Exception) -> str:
    if isinstance(error, BaseAPIException):
        return error.message
    return str(error) or error.__class__.__name__


class BulkReconciliationOrchestrator:
    """벌크 재동기화 오케스트레이터"""

    def __init__(
        self,
        identity_provider: IdentityProviderClient,
        event_bus: EventBusClient,
        concurrency: int = 5,
        max_ids: int = 1000,
    ):
        """
        Args:
            identity_provider: 프로바이더 읽기 클라이언트
            event_bus: 이벤트 발행 클라이언트
            concurrency: 동시 처리 워커 수
            max_ids: 한 번에 처리할 수 있는 최대 ID 수
        """
        self.identity_provider = identity_provider
        self.event_bus = event_bus
        self.concurrency = max(1, concurrency)
        self.max_ids = max_ids

    def validate(self, external_ids: Any) -> list[str]:
        """요청 구조 검증 (네트워크 호출 전에 수행)

        Raises:
            InvalidBulkSyncRequestException: 목록이 없거나 비어 있거나,
                빈 ID가 포함되었거나, 최대 개수를 초과한 경우
        """
        if not isinstance(external_ids, (list, tuple)):
            raise InvalidBulkSyncRequestException(
                reason="external_ids must be a list"
            )
        if not external_ids:
            raise InvalidBulkSyncRequestException(
                reason="external_ids must not be empty"
            )
        if len(external_ids) > self.max_ids:
            raise InvalidBulkSyncRequestException(
                reason=f"external_ids must not exceed {self.max_ids} items"
            )
        for index, external_id in enumerate(external_ids):
            if not isinstance(external_id, str) or not external_id.strip():
                raise InvalidBulkSyncRequestException(
                    reason=f"external_ids[{index}] must be a non-empty string"
                )
        return list(external_ids)

    async def reconcile_one(self, external_id: str) -> ReconciliationResult:
        """단일 ID 재동기화 (오류는 호출자에게 전파)

        Raises:
            IdentityNotFoundException: 프로바이더에 사용자가 없는 경우
            IdentityProviderException: 프로바이더 호출 실패
            EventDispatchException: 이벤트 발행 실패
        """
        profile = await self.identity_provider.get_by_id(external_id)
        fetched_at = now_utc()
        sent = await self.event_bus.send_identity_updated(
            {**profile.to_event_data(), "timestamp": format_iso(fetched_at)}
        )
        return ReconciliationResult(
            external_id=external_id, success=True, event_ids=sent.ids
        )

    async def reconcile(self, external_ids: Any) -> list[ReconciliationResult]:
        """벌크 재동기화

        Args:
            external_ids: 외부 아이덴티티 ID 목록 (중복 허용, 각각 독립 처리)

        Returns:
            입력 순서와 동일한 ID별 결과 목록

        Raises:
            InvalidBulkSyncRequestException: 요청 구조가 유효하지 않은 경우
        """
        ids = self.validate(external_ids)

        slots: list[Optional[ReconciliationResult]] = [None] * len(ids)
        queue: asyncio.Queue[tuple[int, str]] = asyncio.Queue()
        for item in enumerate(ids):
            queue.put_nowait(item)

        async def worker() -> None:
            while True:
                try:
                    index, external_id = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return
                slots[index] = await self._reconcile_item(external_id)

        logger.info(
            "Starting bulk reconciliation",
            extra={"total": len(ids), "concurrency": self.concurrency},
        )
        with measure_time() as timer:
            await asyncio.gather(
                *(worker() for _ in range(min(self.concurrency, len(ids))))
            )

        results = [slot for slot in slots if slot is not None]
        failed = sum(1 for result in results if not result.success)
        logger.info(
            "Bulk reconciliation finished",
            extra={
                "total": len(results),
                "failed": failed,
                "elapsed_ms": timer["elapsed_ms"],
            },
        )
        return results

    async def _reconcile_item(self, external_id: str) -> ReconciliationResult:
        try:
            return await self.reconcile_one(external_id)
        except Exception as e:
            logger.warning(
                "Failed to reconcile user",
                extra={"external_id": external_id, "error": str(e)},
            )
            return ReconciliationResult(
                external_id=external_id,
                success=False,
                error=_describe_error(e),
            )
