"""동기화 핸들러

이벤트 버스가 전달한 아이덴티티 라이프사이클 이벤트를 로컬 저장소에 반영합니다.
각 핸들러는 호출당 최대 1회의 저장소 변경만 수행하므로 at-least-once 재전달 시
전체를 다시 실행해도 안전합니다.

- created: external_id 기준 Upsert (중복 이벤트도 실패하지 않음)
- updated: 기존 레코드만 갱신, 없으면 일관성 오류로 실패 (생성하지 않음)
- deleted: 있으면 삭제, 없어도 오류 아님 (found=False)
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.core.middlewares.context import get_request_id
from app.core.utils.datetime import ensure_utc, now_utc
from app.domains.sync.events import IdentityDeletedPayload, IdentityEventPayload
from app.domains.sync.exceptions import SyncErrorCode
from app.domains.sync.schemas import SyncAction, SyncOutcome
from app.domains.users.repository import UserRepository

logger = get_logger(__name__)


class SyncHandlers:
    """아이덴티티 동기화 핸들러 모음"""

    def __init__(self, session: AsyncSession, reject_stale_updates: bool = False):
        """
        Args:
            session: DB 세션
            reject_stale_updates: True면 저장된 last_synced_at보다 오래된
                updated 이벤트를 반영하지 않음. 이때 last_synced_at에는
                이벤트 시각만 기록하며, 시각이 없는 이벤트는 값을 바꾸지 않음
        """
        self.session = session
        self.repository = UserRepository(session)
        self.reject_stale_updates = reject_stale_updates

    def _event_time(self, payload: IdentityEventPayload) -> Optional[datetime]:
        """가드 활성화 시 비교 기준이 되는 이벤트 시각"""
        if self.reject_stale_updates and payload.timestamp is not None:
            return ensure_utc(payload.timestamp)
        return None

    def _synced_at(self, payload: IdentityEventPayload) -> Optional[datetime]:
        """last_synced_at에 기록할 값 (None이면 기존 값 유지)"""
        if self.reject_stale_updates:
            return self._event_time(payload)
        return now_utc()

    async def handle_created(self, payload: IdentityEventPayload) -> SyncOutcome:
        """identity.created 처리 (Upsert)"""
        try:
            user = await self.repository.upsert_by_external_id(
                payload.external_id,
                payload.provider_fields(),
                synced_at=self._synced_at(payload),
            )
        except SQLAlchemyError as e:
            return await self._store_failure(
                SyncAction.CREATED, payload.external_id, e
            )

        self._log_synced(SyncAction.CREATED, payload.external_id, user.id)
        return SyncOutcome(
            success=True,
            external_id=payload.external_id,
            record_id=user.id,
            action=SyncAction.CREATED,
        )

    async def handle_updated(self, payload: IdentityEventPayload) -> SyncOutcome:
        """identity.updated 처리

        대상 레코드가 없으면 이벤트 순서 역전 또는 유실 신호이므로 실패를 반환합니다.
        """
        not_newer_than = self._event_time(payload)

        try:
            user = await self.repository.update_by_external_id(
                payload.external_id,
                payload.provider_fields(),
                synced_at=self._synced_at(payload),
                not_newer_than=not_newer_than,
            )
            if user is None and not_newer_than is not None:
                # 갱신 조건 불일치: 오래된 이벤트인지 대상 부재인지 구분
                existing = await self.repository.find_by_external_id(
                    payload.external_id
                )
                if existing is not None:
                    logger.info(
                        "Stale update skipped",
                        extra={
                            "request_id": get_request_id(),
                            "external_id": payload.external_id,
                            "event_timestamp": not_newer_than.isoformat(),
                        },
                    )
                    return SyncOutcome(
                        success=True,
                        external_id=payload.external_id,
                        record_id=existing.id,
                        action=SyncAction.UPDATED,
                        skipped=True,
                    )
        except SQLAlchemyError as e:
            return await self._store_failure(
                SyncAction.UPDATED, payload.external_id, e
            )

        if user is None:
            logger.warning(
                "Update received for unknown identity",
                extra={
                    "request_id": get_request_id(),
                    "external_id": payload.external_id,
                },
            )
            return SyncOutcome(
                success=False,
                external_id=payload.external_id,
                action=SyncAction.UPDATED,
                error=f"User with external_id {payload.external_id} not found",
                error_code=SyncErrorCode.USER_SYNC_TARGET_MISSING.value,
            )

        self._log_synced(SyncAction.UPDATED, payload.external_id, user.id)
        return SyncOutcome(
            success=True,
            external_id=payload.external_id,
            record_id=user.id,
            action=SyncAction.UPDATED,
        )

    async def handle_deleted(
        self, payload: IdentityDeletedPayload
    ) -> SyncOutcome:
        """identity.deleted 처리 (없어도 성공)"""
        try:
            user = await self.repository.delete_by_external_id(
                payload.external_id
            )
        except SQLAlchemyError as e:
            return await self._store_failure(
                SyncAction.DELETED, payload.external_id, e
            )

        record_id: Optional[int] = user.id if user is not None else None
        self._log_synced(SyncAction.DELETED, payload.external_id, record_id)
        return SyncOutcome(
            success=True,
            external_id=payload.external_id,
            record_id=record_id,
            action=SyncAction.DELETED,
            found=user is not None,
        )

    async def _store_failure(
        self, action: SyncAction, external_id: str, error: SQLAlchemyError
    ) -> SyncOutcome:
        """저장소 오류를 실패 결과로 변환 (트랜잭션 롤백)"""
        await self.session.rollback()
        logger.exception(
            "Failed to sync user",
            extra={
                "request_id": get_request_id(),
                "external_id": external_id,
                "action": action.value,
            },
        )
        return SyncOutcome(
            success=False,
            external_id=external_id,
            action=action,
            error=str(error),
            error_code=SyncErrorCode.USER_SYNC_STORE_ERROR.value,
        )

    def _log_synced(
        self, action: SyncAction, external_id: str, record_id: Optional[int]
    ) -> None:
        logger.info(
            "User synced",
            extra={
                "request_id": get_request_id(),
                "external_id": external_id,
                "record_id": record_id,
                "action": action.value,
            },
        )
