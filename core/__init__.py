"""Core utilities shared across all modules."""

from core.cache import RedisCache, create_cache
from core.config import settings
from core.errors import (
    AudioDecodeError,
    ConfigError,
    InputError,
    NotFoundError,
    ServiceError,
    TranscriptionServiceError,
)

__all__ = [
    "AudioDecodeError",
    "ConfigError",
    "InputError",
    "NotFoundError",
    "RedisCache",
    "ServiceError",
    "TranscriptionServiceError",
    "create_cache",
    "settings",
]
