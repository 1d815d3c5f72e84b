"""Transcript stores keyed by upload filename."""

from __future__ import annotations

import json
import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from core.cache import RedisCache, create_cache
from core.config import settings
from core.errors import ConfigError, NotFoundError
from qc.models import Transcript

logger = logging.getLogger(__name__)

STORE_PREFIX = "qc:transcript"


class TranscriptStore(ABC):
    """Key-value store for annotated transcripts."""

    @abstractmethod
    def get(self, filename: str) -> Transcript:
        """Return the stored transcript or raise NotFoundError."""

    @abstractmethod
    def put(self, transcript: Transcript, filename: str | None = None) -> None:
        """Insert or overwrite a transcript (keyed by its own filename by default)."""

    @abstractmethod
    def replace(self, filename: str, transcript: Transcript) -> None:
        """Overwrite an existing transcript wholesale or raise NotFoundError."""

    @abstractmethod
    def update(self, filename: str, mutate: Callable[[Transcript], None]) -> Transcript:
        """Apply mutate to the current stored transcript atomically or raise NotFoundError."""

    @abstractmethod
    def __contains__(self, filename: object) -> bool: ...


class InMemoryTranscriptStore(TranscriptStore):
    """Process-local store guarded by a re-entrant lock."""

    def __init__(self) -> None:
        self._items: dict[str, Transcript] = {}
        self._lock = threading.RLock()

    def get(self, filename: str) -> Transcript:
        with self._lock:
            try:
                return self._items[filename]
            except KeyError:
                raise NotFoundError(f"File {filename} not found") from None

    def put(self, transcript: Transcript, filename: str | None = None) -> None:
        with self._lock:
            self._items[filename or transcript.filename] = transcript

    def replace(self, filename: str, transcript: Transcript) -> None:
        with self._lock:
            if filename not in self._items:
                raise NotFoundError(f"File {filename} not found")
            self._items[filename] = transcript

    def update(self, filename: str, mutate: Callable[[Transcript], None]) -> Transcript:
        with self._lock:
            transcript = self.get(filename)
            mutate(transcript)
            return transcript

    def __contains__(self, filename: object) -> bool:
        with self._lock:
            return filename in self._items


class RedisTranscriptStore(TranscriptStore):
    """Store backed by Redis JSON values with a TTL."""

    def __init__(self, cache: RedisCache, ttl: int | None = None) -> None:
        self._cache = cache
        self._ttl = ttl or settings.store_ttl_seconds

    @staticmethod
    def _key(filename: str) -> str:
        return f"{STORE_PREFIX}:{filename}"

    def get(self, filename: str) -> Transcript:
        data = self._cache.get(self._key(filename))
        if data is None:
            raise NotFoundError(f"File {filename} not found")
        return Transcript.from_dict(data)

    def put(self, transcript: Transcript, filename: str | None = None) -> None:
        self._cache.set(self._key(filename or transcript.filename), transcript.to_dict(), self._ttl)

    def replace(self, filename: str, transcript: Transcript) -> None:
        if not self._cache.set_if_exists(self._key(filename), transcript.to_dict(), self._ttl):
            raise NotFoundError(f"File {filename} not found")

    def update(self, filename: str, mutate: Callable[[Transcript], None]) -> Transcript:
        def apply(data: dict[str, Any]) -> dict[str, Any]:
            transcript = Transcript.from_dict(data)
            mutate(transcript)
            return transcript.to_dict()

        data = self._cache.update(self._key(filename), apply, self._ttl)
        if data is None:
            raise NotFoundError(f"File {filename} not found")
        return Transcript.from_dict(data)

    def __contains__(self, filename: object) -> bool:
        return isinstance(filename, str) and self._cache.exists(self._key(filename))


class SqlTranscriptStore(TranscriptStore):
    """Store backed by the SQLAlchemy `transcripts` table."""

    def __init__(self) -> None:
        from core import db

        self._db = db
        self._db.init_db()

    def get(self, filename: str) -> Transcript:
        payload = self._db.get_transcript_payload(filename)
        if payload is None:
            raise NotFoundError(f"File {filename} not found")
        return Transcript.from_dict(json.loads(payload))

    def put(self, transcript: Transcript, filename: str | None = None) -> None:
        self._db.upsert_transcript(filename or transcript.filename, json.dumps(transcript.to_dict()))

    def replace(self, filename: str, transcript: Transcript) -> None:
        if not self._db.replace_transcript(filename, json.dumps(transcript.to_dict())):
            raise NotFoundError(f"File {filename} not found")

    def update(self, filename: str, mutate: Callable[[Transcript], None]) -> Transcript:
        def apply(payload: str) -> str:
            transcript = Transcript.from_dict(json.loads(payload))
            mutate(transcript)
            return json.dumps(transcript.to_dict())

        payload = self._db.update_transcript(filename, apply)
        if payload is None:
            raise NotFoundError(f"File {filename} not found")
        return Transcript.from_dict(json.loads(payload))

    def __contains__(self, filename: object) -> bool:
        return isinstance(filename, str) and self._db.get_transcript_payload(filename) is not None


def create_store(backend: str | None = None) -> TranscriptStore:
    """Create the configured transcript store."""
    backend = (backend or settings.store_backend).lower()
    logger.info("Using %s transcript store", backend)
    if backend == "memory":
        return InMemoryTranscriptStore()
    if backend == "redis":
        cache = create_cache()
        if cache is None:
            raise ConfigError(f"Redis store configured but {settings.cache_redis_url} is unreachable")
        return RedisTranscriptStore(cache)
    if backend == "sql":
        return SqlTranscriptStore()
    raise ConfigError(f"Unknown store backend: {backend}")
