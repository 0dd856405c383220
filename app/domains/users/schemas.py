"""Users 도메인 스키마 정의

동기화된 사용자 조회 및 로컬 프로필 수정을 위한 Pydantic 스키마입니다.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.domains.users.models import UserRole


class Address(BaseModel):
    """주소 (로컬 관리 필드)"""

    street: Optional[str] = Field(default=None, max_length=255)
    city: Optional[str] = Field(default=None, max_length=100)
    state: Optional[str] = Field(default=None, max_length=100)
    postal_code: Optional[str] = Field(default=None, max_length=20)
    country: Optional[str] = Field(default=None, max_length=100)


class UserProfileUpdate(BaseModel):
    """로컬 프로필 수정 요청 스키마

    프로바이더가 소유하지 않는 필드(role, address)만 수정할 수 있습니다.
    """

    role: Optional[UserRole] = Field(default=None, description="사용자 역할")
    address: Optional[Address] = Field(default=None, description="주소")


class UserActivityRequest(BaseModel):
    """사용자 활동 이벤트 발행 요청 스키마"""

    activity: str = Field(
        ..., min_length=1, max_length=100, description="활동 라벨"
    )


class UserResponse(BaseModel):
    """사용자 응답 스키마"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    external_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    image_url: Optional[str] = None
    display_name: str
    role: UserRole
    address: Optional[Address] = None
    last_synced_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
