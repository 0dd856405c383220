"""create_synced_users_table

Revision ID: 4f2c9a1d7e30
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "4f2c9a1d7e30"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum("user", "admin", name="user_role")


def upgrade() -> None:
    """업그레이드 마이그레이션: synced_users 테이블 생성"""
    op.create_table(
        "synced_users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "external_id",
            sa.String(length=255),
            nullable=False,
            comment="아이덴티티 프로바이더 사용자 ID",
        ),
        sa.Column(
            "first_name", sa.String(length=255), nullable=True, comment="이름"
        ),
        sa.Column(
            "last_name", sa.String(length=255), nullable=True, comment="성"
        ),
        sa.Column(
            "username",
            sa.String(length=255),
            nullable=True,
            comment="사용자명",
        ),
        sa.Column(
            "email", sa.String(length=320), nullable=True, comment="이메일"
        ),
        sa.Column(
            "image_url",
            sa.String(length=2048),
            nullable=True,
            comment="프로필 이미지 URL",
        ),
        sa.Column(
            "role",
            user_role,
            server_default="user",
            nullable=False,
            comment="사용자 역할 (로컬 관리)",
        ),
        sa.Column(
            "address", sa.JSON(), nullable=True, comment="주소 (로컬 관리)"
        ),
        sa.Column(
            "last_synced_at",
            sa.DateTime(timezone=True),
            nullable=True,
            comment="마지막 동기화 일시",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
            comment="생성 일시",
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=True,
            comment="수정 일시",
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    # external_id 기준 Upsert를 위한 유니크 인덱스
    op.create_index(
        op.f("ix_synced_users_external_id"),
        "synced_users",
        ["external_id"],
        unique=True,
    )
    op.create_index(
        op.f("ix_synced_users_email"), "synced_users", ["email"], unique=False
    )
    op.create_index(
        op.f("ix_synced_users_username"),
        "synced_users",
        ["username"],
        unique=False,
    )


def downgrade() -> None:
    """다운그레이드 마이그레이션: synced_users 테이블 삭제"""
    op.drop_index(op.f("ix_synced_users_username"), table_name="synced_users")
    op.drop_index(op.f("ix_synced_users_email"), table_name="synced_users")
    op.drop_index(
        op.f("ix_synced_users_external_id"), table_name="synced_users"
    )
    op.drop_table("synced_users")
    user_role.drop(op.get_bind(), checkfirst=True)
