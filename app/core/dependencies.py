"""공통 의존성 함수 정의

이 모듈은 FastAPI 엔드포인트에서 사용되는 공통 의존성 함수들을 정의합니다.
"""

import secrets
from typing import Optional

from fastapi import Header

from app.core.config import settings
from app.core.exceptions import ErrorCode, UnauthorizedException


async def verify_internal_api_key(
    x_internal_api_key: Optional[str] = Header(
        default=None, alias="X-Internal-Api-Key"
    )
) -> None:
    """내부 API Key 검증 (관리 API 호출용)

    Raises:
        UnauthorizedException: API Key가 없거나 유효하지 않은 경우

    Example:
        @router.post("/bulk-sync", dependencies=[Depends(verify_internal_api_key)])
        async def bulk_sync_users():
            ...
    """
    if x_internal_api_key is None or not secrets.compare_digest(
        x_internal_api_key.encode(), settings.internal_api_key.encode()
    ):
        raise UnauthorizedException(
            message="유효하지 않은 API 키입니다.",
            error_code=ErrorCode.INVALID_API_KEY,
        )
