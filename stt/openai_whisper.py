"""OpenAI Whisper API transcription gateway."""

import logging
from typing import Any

import openai
from openai import OpenAI

from core.errors import TranscriptionServiceError
from stt.base import TranscriptionGatewayBase
from stt.models import FullTranscription, TimedWord

logger = logging.getLogger(__name__)


class OpenAIWhisperGateway(TranscriptionGatewayBase):
    """Transcription using the OpenAI audio transcription endpoint.

    Full files are transcribed as ``verbose_json`` with word timestamps; word
    segments are transcribed as plain text at a low temperature so repeated
    calls on the same clip stay close to deterministic.
    """

    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "whisper-1",
        language: str | None = None,
        segment_temperature: float | None = None,
    ) -> None:
        super().__init__(segment_temperature)
        self._client = OpenAI(api_key=api_key)
        self._model = model
        self._language = language

    def _cache_params(self) -> tuple[str, ...]:
        return (self._model, self._language or "auto")

    def _request_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {"model": self._model}
        if self._language:
            options["language"] = self._language
        return options

    def _do_transcribe_full(self, audio_path: str) -> FullTranscription:
        try:
            with open(audio_path, "rb") as audio_file:
                response = self._client.audio.transcriptions.create(
                    file=audio_file,
                    response_format="verbose_json",
                    timestamp_granularities=["word"],
                    **self._request_options(),
                )
        except openai.OpenAIError as e:
            raise _map_error(e) from e

        words = tuple(
            TimedWord(
                text=w.word.strip(),
                start_ms=float(w.start) * 1000,
                end_ms=float(w.end) * 1000,
            )
            for w in (getattr(response, "words", None) or [])
        )
        return FullTranscription(
            duration_seconds=float(getattr(response, "duration", None) or 0.0),
            words=words,
            text=getattr(response, "text", "") or "",
        )

    def _do_transcribe_segment(self, audio_path: str) -> str:
        try:
            with open(audio_path, "rb") as audio_file:
                response = self._client.audio.transcriptions.create(
                    file=audio_file,
                    response_format="text",
                    temperature=self.segment_temperature,
                    **self._request_options(),
                )
        except openai.OpenAIError as e:
            raise _map_error(e) from e

        if isinstance(response, str):
            return response
        return getattr(response, "text", "") or ""


def _map_error(error: openai.OpenAIError) -> TranscriptionServiceError:
    """Categorize an SDK error. Timeout must be checked before its connection-error base."""
    message = str(error) or error.__class__.__name__
    if isinstance(error, openai.APITimeoutError):
        return TranscriptionServiceError(message, "TIMEOUT")
    if isinstance(error, openai.APIConnectionError):
        return TranscriptionServiceError(message, "NETWORK_ERROR")
    if isinstance(error, openai.RateLimitError):
        if getattr(error, "code", None) == "insufficient_quota":
            return TranscriptionServiceError(message, "QUOTA_EXCEEDED")
        return TranscriptionServiceError(message, "RATE_LIMITED")
    if isinstance(error, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return TranscriptionServiceError(message, "AUTH_FAILED")
    return TranscriptionServiceError(message)
