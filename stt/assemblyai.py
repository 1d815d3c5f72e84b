"""AssemblyAI transcription gateway."""

import logging

import assemblyai as aai

from core.errors import TranscriptionServiceError
from stt.base import TranscriptionGatewayBase
from stt.models import FullTranscription, TimedWord

logger = logging.getLogger(__name__)


class AssemblyAIGateway(TranscriptionGatewayBase):
    """Audio transcription using AssemblyAI."""

    name = "assemblyai"

    def __init__(
        self,
        api_key: str,
        speech_model: str = "universal-2",
        language: str | None = None,
        segment_temperature: float | None = None,
    ) -> None:
        super().__init__(segment_temperature)
        aai.settings.api_key = api_key
        self._speech_model = speech_model
        self._language = language
        # AssemblyAI exposes no decoding temperature
        logger.debug("Ignoring segment temperature %.2f for AssemblyAI", self.segment_temperature)

    def _cache_params(self) -> tuple[str, ...]:
        return (self._speech_model, self._language or "auto")

    def _transcribe(self, audio_path: str, *, punctuate: bool) -> aai.Transcript:
        config = aai.TranscriptionConfig(
            speech_models=[self._speech_model],
            language_code=self._language,
            punctuate=punctuate,
            format_text=punctuate,
        )

        try:
            transcript = aai.Transcriber(config=config).transcribe(audio_path)
        except aai.types.TranscriptError as e:
            raise TranscriptionServiceError(str(e)) from e

        if transcript.status == aai.TranscriptStatus.error:
            error_msg = transcript.error or "Unknown error"
            error_lower = error_msg.lower()
            if "rate limit" in error_lower:
                raise TranscriptionServiceError(error_msg, "RATE_LIMITED")
            if "timeout" in error_lower:
                raise TranscriptionServiceError(error_msg, "TIMEOUT")
            if "api key" in error_lower or "unauthorized" in error_lower:
                raise TranscriptionServiceError(error_msg, "AUTH_FAILED")
            raise TranscriptionServiceError(error_msg)

        return transcript

    def _do_transcribe_full(self, audio_path: str) -> FullTranscription:
        transcript = self._transcribe(audio_path, punctuate=True)
        words = tuple(
            TimedWord(text=w.text, start_ms=float(w.start), end_ms=float(w.end))
            for w in (transcript.words or [])
        )
        return FullTranscription(
            duration_seconds=float(transcript.audio_duration or 0),
            words=words,
            text=transcript.text or "",
        )

    def _do_transcribe_segment(self, audio_path: str) -> str:
        return self._transcribe(audio_path, punctuate=False).text or ""
