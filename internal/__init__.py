from utils.timestamp import now_micros, format_timestamp
from internal.logging import get_logger, LogLevel, StructuredLogger
from core.errors import BaseIdError, ConfigError, InvalidFieldError, MalformedInputError, TruncatedInputError

__all__ = [
    "now_micros",
    "format_timestamp",
    "get_logger",
    "LogLevel",
    "StructuredLogger",
    "BaseIdError",
    "ConfigError",
    "InvalidFieldError",
    "MalformedInputError",
    "TruncatedInputError",
]
