"""전역 로깅 설정

동기화 코드는 ``extra`` 로 request_id, external_id 등 구조화 필드를 함께 남깁니다.
개발 환경에서는 메시지 뒤에 key=value 로, 프로덕션에서는 JSON 필드로 출력합니다.
"""

import json
import logging
import sys
from typing import Any

from app.core.config import settings

# LogRecord 기본 속성 (extra 필드 구분용)
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "color_message"}


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }


class ColoredFormatter(logging.Formatter):
    """컬러 로그 포맷터 (개발 환경용)"""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        extras = _extra_fields(record)
        color = self.COLORS.get(record.levelname, self.RESET)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        line = super().format(record)
        if extras:
            line += " | " + " ".join(f"{k}={v}" for k, v in extras.items())
        return line


class JsonFormatter(logging.Formatter):
    """JSON 한 줄 로그 포맷터 (프로덕션용, 로그 수집 시스템 연동)"""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_extra_fields(record))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging() -> None:
    """애플리케이션 로깅 설정"""

    # 로그 레벨 설정
    log_level = logging.DEBUG if settings.debug else logging.INFO

    # 로그 포맷 설정
    if settings.is_development:
        formatter: logging.Formatter = ColoredFormatter(
            fmt=(
                "%(asctime)s | %(levelname)-8s | "
                "%(name)s:%(lineno)d | %(message)s"
            ),
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = JsonFormatter(datefmt="%Y-%m-%dT%H:%M:%S%z")

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.setLevel(log_level)

    # 루트 로거 설정
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    # 외부 라이브러리 로그 레벨 조정
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.INFO)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.database_echo else logging.WARNING
    )
    logging.getLogger("alembic").setLevel(logging.INFO)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """로거 인스턴스 반환

    Example::

        logger = get_logger(__name__)
        logger.info("User synced", extra={"external_id": external_id})
    """
    return logging.getLogger(name)
