"""Users 도메인 리포지토리

동기화된 사용자에 대한 데이터 접근 계층입니다.
동기화 경로의 변경 연산은 모두 external_id 단위의 단일 SQL 문으로 수행되어
키 단위 원자성을 PostgreSQL에 위임합니다.
"""

from datetime import datetime
from typing import Any, Optional, Sequence, cast

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.domains.users.models import PROVIDER_FIELDS, SyncedUser


def _provider_values(fields: dict[str, Any]) -> dict[str, Any]:
    """프로바이더 소유 필드만 추출 (누락 필드는 None으로 덮어쓰기)"""
    return {name: fields.get(name) for name in PROVIDER_FIELDS}


class UserRepository:
    """사용자 리포지토리"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_external_id(
        self, external_id: str
    ) -> Optional[SyncedUser]:
        """외부 ID로 사용자 조회

        Args:
            external_id: 외부 아이덴티티 ID

        Returns:
            사용자 객체 또는 None
        """
        query = select(SyncedUser).where(SyncedUser.external_id == external_id)
        result = await self.session.execute(query)
        return cast(Optional[SyncedUser], result.scalar_one_or_none())

    async def get_list(
        self,
        skip: int = 0,
        limit: int = 20,
    ) -> Sequence[SyncedUser]:
        """사용자 목록 조회

        Args:
            skip: 건너뛸 레코드 수
            limit: 조회할 최대 레코드 수

        Returns:
            사용자 목록
        """
        query = (
            select(SyncedUser)
            .offset(skip)
            .limit(limit)
            .order_by(SyncedUser.created_at.desc())
        )
        result = await self.session.execute(query)
        return cast(Sequence[SyncedUser], result.scalars().all())

    async def count(self) -> int:
        """사용자 수 조회"""
        result = await self.session.execute(select(func.count(SyncedUser.id)))
        return int(result.scalar_one())

    async def upsert_by_external_id(
        self,
        external_id: str,
        fields: dict[str, Any],
        synced_at: Optional[datetime],
    ) -> SyncedUser:
        """외부 ID 기준 Upsert

        없으면 생성하고, 있으면 프로바이더 소유 필드만 덮어씁니다.
        role, address는 건드리지 않습니다.

        Args:
            external_id: 외부 아이덴티티 ID
            fields: 프로바이더 소유 필드 값
            synced_at: 기록할 동기화 시각. None이면 기존 last_synced_at 유지
                (신규 행은 NULL)

        Returns:
            생성 또는 갱신된 사용자 객체
        """
        values = _provider_values(fields)
        changes: dict[str, Any] = {**values, "updated_at": func.now()}
        if synced_at is not None:
            changes["last_synced_at"] = synced_at

        # PostgreSQL INSERT ... ON CONFLICT DO UPDATE (UPSERT)
        stmt = insert(SyncedUser).values(
            external_id=external_id,
            last_synced_at=synced_at,
            **values,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[SyncedUser.external_id],
            set_=changes,
        )

        result = await self.session.scalars(
            stmt.returning(SyncedUser),
            execution_options={"populate_existing": True},
        )
        return cast(SyncedUser, result.one())

    async def update_by_external_id(
        self,
        external_id: str,
        fields: dict[str, Any],
        synced_at: Optional[datetime],
        not_newer_than: Optional[datetime] = None,
    ) -> Optional[SyncedUser]:
        """외부 ID 기준 갱신 (생성하지 않음)

        Args:
            external_id: 외부 아이덴티티 ID
            fields: 프로바이더 소유 필드 값
            synced_at: 기록할 동기화 시각. None이면 기존 last_synced_at 유지
            not_newer_than: 지정 시 last_synced_at이 이 시각 이하인 경우만 갱신

        Returns:
            갱신된 사용자 객체, 대상 행이 없으면 None
        """
        changes = _provider_values(fields)
        if synced_at is not None:
            changes["last_synced_at"] = synced_at

        stmt = (
            update(SyncedUser)
            .where(SyncedUser.external_id == external_id)
            .values(**changes)
        )

        if not_newer_than is not None:
            stmt = stmt.where(
                or_(
                    SyncedUser.last_synced_at.is_(None),
                    SyncedUser.last_synced_at <= not_newer_than,
                )
            )

        result = await self.session.scalars(
            stmt.returning(SyncedUser),
            execution_options={"populate_existing": True},
        )
        return cast(Optional[SyncedUser], result.one_or_none())

    async def delete_by_external_id(
        self, external_id: str
    ) -> Optional[SyncedUser]:
        """외부 ID 기준 삭제

        Returns:
            삭제된 사용자 객체, 없으면 None
        """
        stmt = (
            delete(SyncedUser)
            .where(SyncedUser.external_id == external_id)
            .returning(SyncedUser)
        )
        result = await self.session.scalars(stmt)
        return cast(Optional[SyncedUser], result.one_or_none())

    async def update(self, user: SyncedUser) -> SyncedUser:
        """사용자 수정 (로컬 필드 변경 반영)

        Args:
            user: 수정할 사용자 객체

        Returns:
            수정된 사용자 객체
        """
        await self.session.flush()
        await self.session.refresh(user)
        return user
