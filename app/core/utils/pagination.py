"""페이지네이션 유틸리티"""

from fastapi import Query


class PageParams:
    """페이지/크기 쿼리 파라미터 의존성

    서비스 계층은 ``skip`` / ``limit`` 만 사용합니다.

    Example::

        @router.get("", response_model=ListAPIResponse[UserResponse])
        async def get_users(page_params: PageParams = Depends()):
            users, total = await service.get_users(page_params)
            ...
    """

    def __init__(
        self,
        page: int = Query(1, ge=1, description="페이지 번호"),
        size: int = Query(20, ge=1, le=100, description="페이지 크기"),
    ):
        self.page = page
        self.size = size

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.size

    @property
    def limit(self) -> int:
        return self.size
