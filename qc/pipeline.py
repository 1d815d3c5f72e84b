"""Word-level re-verification of a transcript against its own audio."""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path

from core.config import settings
from core.errors import AudioDecodeError, TranscriptionServiceError
from qc.audio import audio_segment
from qc.models import EMPTY_RESULT_TEXT, QCFailure, QCOutcome, QCResult, outcome_to_result
from qc.text import is_match, normalize_text, similarity_score
from stt.base import TranscriptionGateway
from stt.models import TimedWord

logger = logging.getLogger(__name__)

CANCELLED = QCFailure("CANCELLED", "verification cancelled")


class WordQCPipeline:
    """Re-transcribes each word's exact audio span and fuzzy-matches it to the original.

    Words are independent: each one gets its own temporary clip and its own
    gateway call, so they can run on a bounded thread pool. Output order always
    matches input order.
    """

    def __init__(
        self,
        gateway: TranscriptionGateway,
        threshold: float | None = None,
        max_workers: int | None = None,
        temp_dir: str | Path | None = None,
    ) -> None:
        self._gateway = gateway
        self.threshold = float(settings.qc_similarity_threshold if threshold is None else threshold)
        self.max_workers = max(1, int(max_workers or settings.qc_max_workers))
        self._temp_dir = temp_dir or settings.qc_temp_dir

    def check(self, audio_path: str | Path, word: TimedWord) -> QCOutcome:
        """Verify one word, returning a QCFailure instead of raising."""
        if word.end_ms <= word.start_ms:
            return QCFailure(
                "EMPTY_SPAN", f"empty time span {word.start_ms:.3f}-{word.end_ms:.3f}ms"
            )

        try:
            with audio_segment(audio_path, word.start_ms, word.end_ms, self._temp_dir) as segment:
                raw_alternative = self._gateway.transcribe_segment(str(segment))
        except (AudioDecodeError, TranscriptionServiceError) as e:
            logger.warning("QC failed for %r (%s): %s", word.text, e.error_code, e)
            return QCFailure(e.error_code, str(e))
        except Exception as e:
            logger.exception("Unexpected QC error for %r", word.text)
            return QCFailure("INTERNAL_ERROR", str(e))

        if not raw_alternative or not raw_alternative.strip():
            return QCResult(alternative_text=EMPTY_RESULT_TEXT, passed=False)

        clean_alternative = normalize_text(raw_alternative)
        clean_original = normalize_text(word.text)
        similarity = similarity_score(clean_original, clean_alternative)
        passed = is_match(similarity, self.threshold)
        logger.debug(
            "QC %r vs %r: similarity=%s passed=%s", clean_original, clean_alternative, similarity, passed
        )
        return QCResult(alternative_text=clean_alternative.strip(), passed=passed)

    def verify(self, audio_path: str | Path, word: TimedWord) -> QCResult:
        return outcome_to_result(self.check(audio_path, word))

    def run(
        self,
        audio_path: str | Path,
        words: Sequence[TimedWord],
        cancel_event: threading.Event | None = None,
    ) -> list[QCOutcome]:
        """
        Verify every word, in parallel up to max_workers.

        Once cancel_event is set no new words are started; words never started
        get a CANCELLED failure.
        """
        if self.max_workers == 1:
            outcomes: list[QCOutcome] = []
            for word in words:
                if cancel_event is not None and cancel_event.is_set():
                    outcomes.append(CANCELLED)
                else:
                    outcomes.append(self.check(audio_path, word))
            return outcomes

        slots = threading.BoundedSemaphore(self.max_workers)
        futures: list[Future[QCOutcome] | None] = []

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="word-qc") as executor:
            for word in words:
                slots.acquire()
                if cancel_event is not None and cancel_event.is_set():
                    slots.release()
                    futures.append(None)
                    continue
                future = executor.submit(self.check, audio_path, word)
                future.add_done_callback(lambda _: slots.release())
                futures.append(future)

        return [f.result() if f is not None else CANCELLED for f in futures]
