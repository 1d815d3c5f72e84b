"""SQLAlchemy database client."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from core.config import settings
from core.models import Base, TranscriptRecord

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        connect_args: dict[str, Any] = {}
        if settings.database_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        _engine = create_engine(settings.database_url, echo=False, connect_args=connect_args)
    return _engine


def get_session() -> Session:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(bind=get_engine())
    return _session_factory()


def init_db() -> None:
    Base.metadata.create_all(get_engine())


def get_transcript_payload(filename: str) -> str | None:
    with get_session() as session:
        record = session.get(TranscriptRecord, filename)
        return record.payload if record else None


def upsert_transcript(filename: str, payload: str) -> None:
    with get_session() as session:
        record = session.get(TranscriptRecord, filename)
        if record:
            record.payload = payload
        else:
            session.add(TranscriptRecord(filename=filename, payload=payload))
        session.commit()


def replace_transcript(filename: str, payload: str) -> bool:
    """Overwrite an existing record. Returns False if the filename is unknown."""
    with get_session() as session:
        record = session.get(TranscriptRecord, filename, with_for_update=True)
        if not record:
            return False
        record.payload = payload
        session.commit()
        return True


def update_transcript(filename: str, func: Callable[[str], str]) -> str | None:
    """Rewrite a record's payload under a row lock. Returns None if the filename is unknown."""
    with get_session() as session:
        record = session.get(TranscriptRecord, filename, with_for_update=True)
        if not record:
            return None
        payload = func(record.payload)
        record.payload = payload
        session.commit()
        return payload
