"""Core 모듈"""

from app.core.config import settings
from app.core.database import Base, get_db
from app.core.exceptions import (
    BadGatewayException,
    BadRequestException,
    BaseAPIException,
    ErrorCode,
    NotFoundException,
    UnauthorizedException,
)
from app.core.logging import get_logger, setup_logging

__all__ = [
    "settings",
    "Base",
    "get_db",
    "ErrorCode",
    "BaseAPIException",
    "BadRequestException",
    "UnauthorizedException",
    "NotFoundException",
    "BadGatewayException",
    "get_logger",
    "setup_logging",
]
