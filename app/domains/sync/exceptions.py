"""Sync 도메인 예외 정의"""

from enum import Enum
from typing import Any

from fastapi import status

from app.core.exceptions import BadRequestException, BaseAPIException


class SyncErrorCode(str, Enum):
    """동기화 도메인 에러 코드"""

    USER_SYNC_TARGET_MISSING = "USER_SYNC_TARGET_MISSING"
    USER_SYNC_STORE_ERROR = "USER_SYNC_STORE_ERROR"
    INVALID_EVENT_PAYLOAD = "INVALID_EVENT_PAYLOAD"
    INVALID_BULK_SYNC_REQUEST = "INVALID_BULK_SYNC_REQUEST"


# 핸들러 실패 코드별 응답 상태 (이벤트 버스가 재시도할 수 있도록 non-2xx)
_FAILURE_STATUS = {
    SyncErrorCode.USER_SYNC_TARGET_MISSING: status.HTTP_409_CONFLICT,
    SyncErrorCode.USER_SYNC_STORE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class InvalidEventPayloadException(BadRequestException):
    """알려진 이벤트의 페이로드가 유효하지 않은 경우"""

    def __init__(self, event_name: str, errors: list[dict[str, Any]]):
        super().__init__(
            message="이벤트 페이로드가 유효하지 않습니다.",
            error_code=SyncErrorCode.INVALID_EVENT_PAYLOAD,
            detail={"event_name": event_name, "errors": errors},
        )


class InvalidBulkSyncRequestException(BadRequestException):
    """벌크 동기화 요청 구조가 유효하지 않은 경우"""

    def __init__(self, reason: str):
        super().__init__(
            message="벌크 동기화 요청이 유효하지 않습니다.",
            error_code=SyncErrorCode.INVALID_BULK_SYNC_REQUEST,
            detail={"reason": reason},
        )


class SyncFailedException(BaseAPIException):
    """동기화 핸들러가 실패 결과를 반환한 경우

    Args:
        error_code: 실패 결과의 에러 코드
        message: 실패 설명
        outcome: 직렬화된 SyncOutcome
    """

    def __init__(self, error_code: str, message: str, outcome: dict[str, Any]):
        super().__init__(
            status_code=_FAILURE_STATUS.get(
                error_code, status.HTTP_500_INTERNAL_SERVER_ERROR
            ),
            error_code=error_code,
            message=message,
            detail={"outcome": outcome},
        )
