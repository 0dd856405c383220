"""Identity Sync 애플리케이션 진입점"""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1 import api_router as api_v1_router
from app.core.config import settings
from app.core.database import close_db
from app.core.exceptions import (
    BaseAPIException,
    base_exception_handler,
    generic_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from app.core.logging import get_logger, setup_logging
from app.core.middlewares import LoggingMiddleware
from app.core.migration import run_migrations_on_startup
from app.core.schemas import APIResponse, create_response

# 로깅 설정 초기화
setup_logging()
logger = get_logger(__name__)

APP_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """애플리케이션 생명주기 관리"""
    logger.info(
        f"Starting {settings.app_name}",
        extra={
            "environment": settings.app_env,
            "reject_stale_updates": settings.sync_reject_stale_updates,
            "bulk_sync_concurrency": settings.bulk_sync_concurrency,
        },
    )
    run_migrations_on_startup(auto_migrate=settings.auto_migrate)

    yield

    logger.info(f"Shutting down {settings.app_name}")
    await close_db()


async def health_check() -> APIResponse[dict[str, Any]]:
    """헬스 체크 엔드포인트"""
    return create_response(
        data={
            "status": "healthy",
            "app_name": settings.app_name,
            "environment": settings.app_env,
            "version": APP_VERSION,
        },
        message="OK",
    )


def create_app() -> FastAPI:
    """FastAPI 애플리케이션 팩토리"""
    app = FastAPI(
        title=settings.app_name,
        description="Identity event synchronization service",
        version=APP_VERSION,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan,
    )

    # 미들웨어 (나중에 추가한 것이 바깥쪽)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)

    app.add_exception_handler(BaseAPIException, base_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(
        RequestValidationError, validation_exception_handler
    )
    app.add_exception_handler(Exception, generic_exception_handler)

    app.add_api_route(
        "/health",
        health_check,
        methods=["GET"],
        tags=["Health"],
        response_model=APIResponse[dict[str, Any]],
    )
    app.include_router(api_v1_router, prefix="/api/v1")

    return app


app = create_app()
