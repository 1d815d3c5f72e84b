"""Transcription gateway interface and shared retry, caching and rate limiting."""

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Protocol, TypeVar

from core.cache import RedisCache, create_cache, file_cache_key
from core.config import settings
from core.errors import TranscriptionServiceError
from stt.models import FullTranscription

logger = logging.getLogger(__name__)

T = TypeVar("T")

CACHE_PREFIX = "stt:transcript"
RATE_LIMIT_KEY = "stt:ratelimit"
RETRYABLE_CODES = ("RATE_LIMITED", "TIMEOUT")


class TranscriptionGateway(Protocol):
    """Speech-to-text capability consumed by the QC pipeline."""

    def transcribe_full(self, audio_path: str) -> FullTranscription:
        """Transcribe a whole file with word-level timestamps."""
        ...

    def transcribe_segment(self, audio_path: str) -> str:
        """Transcribe a short pre-trimmed clip to plain text."""
        ...


class TranscriptionGatewayBase(ABC):
    """Gateway with Redis caching of full transcriptions and retry logic."""

    name = "base"

    def __init__(self, segment_temperature: float | None = None) -> None:
        self._cache: RedisCache | None = create_cache()
        if segment_temperature is None:
            segment_temperature = settings.qc_segment_temperature
        self.segment_temperature = float(segment_temperature)

    def transcribe_full(self, audio_path: str) -> FullTranscription:
        """Transcribe a whole file, serving repeated uploads from the cache."""
        key = None
        if self._cache:
            key = file_cache_key(self._cache_prefix(), audio_path)
            cached = self._cache.get(key)
            if cached:
                logger.info("Cache hit for %s", audio_path)
                return FullTranscription.from_dict(cached)

        result = self._call_with_retries(self._do_transcribe_full, audio_path)
        if self._cache and key:
            self._cache.set(key, result.to_dict())
        logger.info(
            "Transcribed %s: %d words, %.2fs", audio_path, len(result.words), result.duration_seconds
        )
        return result

    def transcribe_segment(self, audio_path: str) -> str:
        return self._call_with_retries(self._do_transcribe_segment, audio_path)

    def _cache_prefix(self) -> str:
        return ":".join((CACHE_PREFIX, self.name, *self._cache_params()))

    def _cache_params(self) -> tuple[str, ...]:
        """Settings that change the full transcription of a given file."""
        return ()

    def _call_with_retries(self, func: Callable[[str], T], audio_path: str) -> T:
        max_retries = max(1, int(settings.stt_max_retries))
        delay = float(settings.stt_retry_delay_seconds)
        last_error: TranscriptionServiceError | None = None

        for attempt in range(max_retries):
            if self._cache:
                self._cache.wait_for_rate_limit(
                    f"{RATE_LIMIT_KEY}:{self.name}", settings.stt_rate_limit_requests
                )
            try:
                return func(audio_path)
            except TranscriptionServiceError as e:
                if e.error_code in RETRYABLE_CODES:
                    logger.warning("%s, attempt %d/%d", e.error_code, attempt + 1, max_retries)
                    last_error = e
                    time.sleep(delay)
                    delay *= float(settings.stt_retry_backoff_multiplier)
                else:
                    raise

        raise last_error or TranscriptionServiceError("Max retries exceeded")

    @abstractmethod
    def _do_transcribe_full(self, audio_path: str) -> FullTranscription:
        """Execute single full-file transcription attempt."""

    @abstractmethod
    def _do_transcribe_segment(self, audio_path: str) -> str:
        """Execute single segment transcription attempt."""
