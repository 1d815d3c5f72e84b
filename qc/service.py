"""Upload processing: full transcription, word QC, assembly and storage."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

from core.errors import AudioDecodeError, InputError, NotFoundError
from core.store import TranscriptStore
from qc.assembler import assemble_transcript
from qc.audio import audio_duration_seconds
from qc.models import QCResult, Transcript, Word
from qc.pipeline import WordQCPipeline
from stt.base import TranscriptionGateway
from stt.gateway import create_gateway
from stt.models import TimedWord

logger = logging.getLogger(__name__)


class TranscriptQCService:
    """Produces, stores and edits QC-annotated transcripts."""

    def __init__(
        self,
        store: TranscriptStore,
        gateway_factory: Callable[[], TranscriptionGateway] = create_gateway,
        pipeline_factory: Callable[[TranscriptionGateway], WordQCPipeline] = WordQCPipeline,
    ) -> None:
        self._store = store
        self._gateway_factory = gateway_factory
        self._pipeline_factory = pipeline_factory

    def process_upload(
        self,
        audio_path: str | Path,
        filename: str,
        cancel_event: threading.Event | None = None,
    ) -> Transcript:
        """
        Transcribe an uploaded recording and QC every word.

        Raises:
            ConfigError: missing STT credential
            TranscriptionServiceError: full-file transcription failed
        """
        gateway = self._gateway_factory()
        transcription = gateway.transcribe_full(str(audio_path))

        pipeline = self._pipeline_factory(gateway)
        outcomes = pipeline.run(audio_path, transcription.words, cancel_event)

        transcript = assemble_transcript(filename, transcription, outcomes)
        if not transcript.duration:
            transcript.duration = _local_duration(audio_path)

        passed = sum(1 for w in transcript.words if w.qc_passed)
        logger.info(
            "QC completed for %s: %d/%d words passed", filename, passed, len(transcript.words)
        )
        self._store.put(transcript, filename)
        return transcript

    def get_transcript(self, filename: str) -> Transcript:
        return self._store.get(filename)

    def update_transcript(self, filename: str, data: dict[str, Any] | None) -> Transcript:
        """Replace a stored transcript wholesale with a client-edited version."""
        if filename not in self._store:
            raise NotFoundError(f"File {filename} not found")
        if data is None:
            raise InputError("Request body must be a JSON transcript")
        transcript = Transcript.from_dict(data)
        self._store.replace(filename, transcript)
        logger.info("Transcript %s updated (%d words)", filename, len(transcript.words))
        return transcript

    def recheck_word(self, audio_path: str | Path, filename: str, index: int) -> QCResult:
        """Re-run QC for one stored word, e.g. after a human edit."""
        transcript = self._store.get(filename)
        if not 0 <= index < len(transcript.words):
            raise NotFoundError(f"Word {index} not found in {filename}")

        checked = _timed(transcript.words[index])
        pipeline = self._pipeline_factory(self._gateway_factory())
        result = pipeline.verify(audio_path, checked)

        def apply(current: Transcript) -> None:
            # The word may have been edited while it was being verified
            if index < len(current.words) and _timed(current.words[index]) == checked:
                current.words[index].apply_qc(result)
            else:
                logger.info("Word %d of %s changed during recheck, result discarded", index, filename)

        self._store.update(filename, apply)
        return result


def _timed(word: Word) -> TimedWord:
    return TimedWord(word.text, word.start_time, word.end_time)


def _local_duration(audio_path: str | Path) -> float:
    try:
        return round(audio_duration_seconds(audio_path), 3)
    except AudioDecodeError as e:
        logger.warning("Could not read duration locally: %s", e)
        return 0.0
