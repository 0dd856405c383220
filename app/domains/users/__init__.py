"""Users 도메인 모듈

아이덴티티 프로바이더에서 동기화된 사용자를 저장하고 조회하는 도메인입니다.

구조:
    - models.py: SQLAlchemy 모델 정의 (SyncedUser)
    - schemas.py: Pydantic 스키마 (UserResponse, UserProfileUpdate, etc.)
    - repository.py: 데이터 접근 계층 (external_id 기준 Upsert/Delete)
    - service.py: 비즈니스 로직 (조회, 로컬 프로필 수정)
    - router.py: API 엔드포인트 (API Key 인증 포함)
    - exceptions.py: 도메인 예외
"""

from app.domains.users.exceptions import (
    EmptyProfileUpdateException,
    UserErrorCode,
    UserNotFoundException,
)
from app.domains.users.models import SyncedUser, UserRole
from app.domains.users.router import router
from app.domains.users.schemas import (
    Address,
    UserProfileUpdate,
    UserResponse,
)
from app.domains.users.service import UserService

__all__ = [
    "SyncedUser",
    "UserRole",
    "UserService",
    "Address",
    "UserProfileUpdate",
    "UserResponse",
    "router",
    "UserErrorCode",
    "UserNotFoundException",
    "EmptyProfileUpdateException",
]
