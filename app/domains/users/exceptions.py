"""Users 도메인 예외 정의"""

from enum import Enum

from app.core.exceptions import BadRequestException, NotFoundException


class UserErrorCode(str, Enum):
    """사용자 도메인 에러 코드"""

    USER_NOT_FOUND = "USER_NOT_FOUND"
    EMPTY_PROFILE_UPDATE = "EMPTY_PROFILE_UPDATE"


class UserNotFoundException(NotFoundException):
    """사용자를 찾을 수 없는 경우"""

    def __init__(self, external_id: str | None = None):
        detail = {"external_id": external_id} if external_id else {}
        super().__init__(
            message="사용자를 찾을 수 없습니다.",
            error_code=UserErrorCode.USER_NOT_FOUND,
            detail=detail,
        )


class EmptyProfileUpdateException(BadRequestException):
    """수정할 프로필 필드가 없는 경우"""

    def __init__(self, external_id: str | None = None):
        detail = {"external_id": external_id} if external_id else {}
        super().__init__(
            message="수정할 프로필 정보가 없습니다.",
            error_code=UserErrorCode.EMPTY_PROFILE_UPDATE,
            detail=detail,
        )
