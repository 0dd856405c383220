"""요청/응답 로깅 미들웨어"""

from typing import Callable, cast

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.logging import get_logger
from app.core.middlewares.context import set_request_id
from app.core.utils.time import measure_time

logger = get_logger(__name__)

# 로깅 제외 경로
EXCLUDE_PATHS = {"/health", "/docs", "/redoc", "/openapi.json", "/favicon.ico"}

REQUEST_ID_HEADER = "X-Request-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """요청 ID 전파 및 처리 시간 로깅 미들웨어

    이벤트 버스 런타임이 보낸 요청 ID 헤더가 있으면 그대로 이어받아
    핸들러 로그와 응답 헤더에 남깁니다.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        if request.url.path in EXCLUDE_PATHS:
            return cast(Response, await call_next(request))

        request_id = set_request_id(request.headers.get(REQUEST_ID_HEADER))
        fields = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
        }

        logger.info(
            f"→ {request.method} {request.url.path}",
            extra={
                **fields,
                "client": request.client.host if request.client else "unknown",
            },
        )

        try:
            with measure_time() as timer:
                response = await call_next(request)
        except Exception:
            logger.exception(
                f"✗ {request.method} {request.url.path}",
                extra={**fields, "elapsed_ms": timer["elapsed_ms"]},
            )
            raise

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Process-Time"] = f"{timer['elapsed_ms']:.2f}ms"

        log_method = (
            logger.info if response.status_code < 400 else logger.warning
        )
        log_method(
            f"{'✓' if response.status_code < 400 else '✗'} "
            f"{request.method} {request.url.path}",
            extra={
                **fields,
                "status_code": response.status_code,
                "elapsed_ms": timer["elapsed_ms"],
            },
        )

        return cast(Response, response)
