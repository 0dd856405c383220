"""API v1 라우터"""

from typing import Any

from fastapi import APIRouter

from app.core.schemas import APIResponse
from app.domains.sync.router import events_router, reconciliation_router
from app.domains.users.router import router as users_router

api_router = APIRouter()

# 도메인 라우터 등록
api_router.include_router(users_router, prefix="/users", tags=["Users"])
api_router.include_router(
    reconciliation_router, prefix="/users", tags=["Sync"]
)
api_router.include_router(events_router, prefix="/events", tags=["Events"])


@api_router.get("/", response_model=APIResponse[dict[str, Any]])
async def api_v1_root():
    """API v1 루트 엔드포인트"""
    return APIResponse(
        success=True,
        message="Identity Sync API v1",
        data={
            "version": "v1",
            "docs": "/docs",
        },
    )
