"""Users 도메인 라우터

동기화된 사용자 조회 및 로컬 프로필 수정 API 엔드포인트입니다.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.dependencies import verify_internal_api_key
from app.core.schemas import (
    APIResponse,
    ListAPIResponse,
    create_list_response,
    create_response,
)
from app.core.utils.pagination import PageParams
from app.domains.users.schemas import UserProfileUpdate, UserResponse
from app.domains.users.service import UserService

router = APIRouter()


def get_user_service(session: AsyncSession = Depends(get_db)) -> UserService:
    """UserService 의존성"""
    return UserService(session)


@router.get(
    "",
    response_model=ListAPIResponse[UserResponse],
    dependencies=[Depends(verify_internal_api_key)],
)
async def get_users(
    page_params: PageParams = Depends(),
    service: UserService = Depends(get_user_service),
):
    """사용자 목록 조회"""
    users, total = await service.get_users(page_params)
    return create_list_response(
        data=[UserResponse.model_validate(user) for user in users],
        total=total,
        page=page_params.page,
        size=page_params.size,
        message="사용자 목록을 조회했습니다.",
    )


@router.get(
    "/{external_id}",
    response_model=APIResponse[UserResponse],
    dependencies=[Depends(verify_internal_api_key)],
)
async def get_user(
    external_id: str,
    service: UserService = Depends(get_user_service),
):
    """사용자 상세 조회"""
    user = await service.get_user(external_id)
    return create_response(
        data=UserResponse.model_validate(user),
        message="사용자 정보를 조회했습니다.",
    )


@router.patch(
    "/{external_id}/profile",
    response_model=APIResponse[UserResponse],
    dependencies=[Depends(verify_internal_api_key)],
)
async def update_user_profile(
    external_id: str,
    profile_data: UserProfileUpdate,
    service: UserService = Depends(get_user_service),
):
    """로컬 프로필 수정 (role, address)"""
    user = await service.update_profile(external_id, profile_data)
    return create_response(
        data=UserResponse.model_validate(user),
        message="사용자 프로필이 수정되었습니다.",
    )
