"""날짜/시간 유틸리티"""

from datetime import datetime, timezone

UTC = timezone.utc


def now_utc() -> datetime:
    """현재 UTC 시간 반환"""
    return datetime.now(UTC)


def ensure_utc(dt: datetime) -> datetime:
    """naive datetime은 UTC로 간주하여 tz-aware로 변환"""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def format_iso(dt: datetime) -> str:
    """ISO 8601 형식으로 포맷"""
    return dt.isoformat()
