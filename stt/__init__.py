"""Speech-to-text gateways (OpenAI Whisper, AssemblyAI)."""

from stt.base import TranscriptionGateway, TranscriptionGatewayBase
from stt.gateway import create_gateway
from stt.models import FullTranscription, TimedWord

__all__ = [
    "FullTranscription",
    "TimedWord",
    "TranscriptionGateway",
    "TranscriptionGatewayBase",
    "create_gateway",
]
