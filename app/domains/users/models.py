"""Users 도메인 모델 정의

외부 아이덴티티 프로바이더의 사용자 레코드를 미러링하는 모델입니다.
external_id가 프로바이더 레코드와의 상관 키이며, 로컬 PK(id)는 자동 증가합니다.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, String, func
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class UserRole(str, Enum):
    """사용자 역할 (로컬 권한 필드)"""

    USER = "user"
    ADMIN = "admin"


# 프로바이더가 소유하는 필드 (동기화 시 전체 덮어쓰기)
PROVIDER_FIELDS = (
    "first_name",
    "last_name",
    "username",
    "email",
    "image_url",
)


class SyncedUser(Base):
    """동기화된 사용자 모델

    role, address는 로컬에서 관리하며 프로바이더 동기화로 덮어쓰지 않습니다.
    """

    __tablename__ = "synced_users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    external_id: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="아이덴티티 프로바이더 사용자 ID",
    )

    # Provider-sourced
    first_name: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True, comment="이름"
    )
    last_name: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True, comment="성"
    )
    username: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True, index=True, comment="사용자명"
    )
    email: Mapped[Optional[str]] = mapped_column(
        String(320), nullable=True, index=True, comment="이메일"
    )
    image_url: Mapped[Optional[str]] = mapped_column(
        String(2048), nullable=True, comment="프로필 이미지 URL"
    )

    # Locally authoritative
    role: Mapped[UserRole] = mapped_column(
        SAEnum(
            UserRole,
            name="user_role",
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=UserRole.USER,
        server_default=UserRole.USER.value,
        comment="사용자 역할 (로컬 관리)",
    )
    address: Mapped[Optional[dict[str, Any]]] = mapped_column(
        JSON, nullable=True, comment="주소 (로컬 관리)"
    )

    last_synced_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, comment="마지막 동기화 일시"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        comment="생성 일시",
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        onupdate=func.now(),
        nullable=True,
        comment="수정 일시",
    )

    @property
    def display_name(self) -> str:
        """표시 이름 (이름 → 사용자명 → 기본값 순)"""
        full_name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return full_name or self.username or "Unknown User"

    def __repr__(self) -> str:
        return (
            f"<SyncedUser(id={self.id}, external_id={self.external_id}, "
            f"last_synced_at={self.last_synced_at})>"
        )
