from enum import Enum
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.logging import get_logger
from app.core.middlewares.context import get_request_id

logger = get_logger(__name__)


class ErrorCode(str, Enum):
    """전역 에러 코드"""

    # 공통 에러
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    BAD_REQUEST = "BAD_REQUEST"

    # 인증 관련
    INVALID_API_KEY = "INVALID_API_KEY"

    # 외부 연동 관련
    BAD_GATEWAY = "BAD_GATEWAY"
    IDENTITY_PROVIDER_ERROR = "IDENTITY_PROVIDER_ERROR"
    IDENTITY_NOT_FOUND = "IDENTITY_NOT_FOUND"
    EVENT_DISPATCH_ERROR = "EVENT_DISPATCH_ERROR"


class BaseAPIException(HTTPException):
    """기본 API 예외 클래스"""

    def __init__(
        self,
        status_code: int,
        error_code: str,
        message: str,
        detail: Optional[Dict[str, Any]] = None,
    ):
        self.error_code = error_code
        self.message = message
        self.detail_info = detail or {}
        super().__init__(status_code=status_code, detail=message)


class BadRequestException(BaseAPIException):
    """400 Bad Request"""

    def __init__(
        self,
        message: str = "잘못된 요청입니다.",
        error_code: str = ErrorCode.BAD_REQUEST,
        detail: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code=error_code,
            message=message,
            detail=detail,
        )


class UnauthorizedException(BaseAPIException):
    """401 Unauthorized"""

    def __init__(
        self,
        message: str = "인증이 필요합니다.",
        error_code: str = ErrorCode.UNAUTHORIZED,
        detail: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code=error_code,
            message=message,
            detail=detail,
        )


class NotFoundException(BaseAPIException):
    """404 Not Found"""

    def __init__(
        self,
        message: str = "리소스를 찾을 수 없습니다.",
        error_code: str = ErrorCode.NOT_FOUND,
        detail: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error_code=error_code,
            message=message,
            detail=detail,
        )


class BadGatewayException(BaseAPIException):
    """502 Bad Gateway (외부 서비스 호출 실패)"""

    def __init__(
        self,
        message: str = "외부 서비스 호출에 실패했습니다.",
        error_code: str = ErrorCode.BAD_GATEWAY,
        detail: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            error_code=error_code,
            message=message,
            detail=detail,
        )


async def base_exception_handler(
    request: Request, exc: BaseAPIException
) -> JSONResponse:
    """BaseAPIException 핸들러"""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "message": exc.message,
            "error": {
                "code": exc.error_code,
                "message": exc.message,
                "detail": exc.detail_info,
            },
        },
    )


async def http_exception_handler(
    request: Request, exc: HTTPException
) -> JSONResponse:
    """HTTPException 핸들러"""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "message": str(exc.detail),
            "error": {
                "code": ErrorCode.INTERNAL_ERROR,
                "message": str(exc.detail),
                "detail": None,
            },
        },
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """요청 검증 실패 핸들러"""
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "message": "요청 형식이 올바르지 않습니다.",
            "error": {
                "code": ErrorCode.VALIDATION_ERROR,
                "message": "요청 형식이 올바르지 않습니다.",
                "detail": {"errors": jsonable_encoder(exc.errors())},
            },
        },
    )


async def generic_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """일반 예외 핸들러"""
    logger.exception(
        "Unhandled exception",
        extra={"request_id": get_request_id(), "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "message": "서버 내부 오류가 발생했습니다.",
            "error": {
                "code": ErrorCode.INTERNAL_ERROR,
                "message": "서버 내부 오류가 발생했습니다.",
                "detail": None,
            },
        },
    )
