"""Factory for the configured transcription gateway."""

import logging

from core.config import get_credential, settings
from core.errors import ConfigError
from stt.base import TranscriptionGateway

logger = logging.getLogger(__name__)

CREDENTIALS = {
    "openai": "OPENAI_API_KEY",
    "assemblyai": "ASSEMBLYAI_API_KEY",
}


def create_gateway(backend: str | None = None) -> TranscriptionGateway:
    """
    Build the gateway for the configured STT backend.

    Raises:
        ConfigError: unknown backend or missing API credential
    """
    backend = (backend or settings.stt_backend).lower()
    if backend not in CREDENTIALS:
        raise ConfigError(f"Unknown STT backend: {backend}")

    api_key = get_credential(CREDENTIALS[backend])
    if not api_key:
        raise ConfigError(f"{CREDENTIALS[backend]} is missing.")

    logger.info("Creating %s transcription gateway", backend)
    if backend == "openai":
        from stt.openai_whisper import OpenAIWhisperGateway

        return OpenAIWhisperGateway(
            api_key=api_key,
            model=settings.stt_model,
            language=settings.stt_language_code,
        )

    from stt.assemblyai import AssemblyAIGateway

    return AssemblyAIGateway(
        api_key=api_key,
        speech_model=settings.stt_assemblyai_speech_model,
        language=settings.stt_language_code,
    )
