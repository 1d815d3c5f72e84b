"""Data models for speech-to-text results."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class TimedWord:
    """Single transcribed word with timing in milliseconds."""

    text: str
    start_ms: float
    end_ms: float


@dataclass(frozen=True, slots=True)
class FullTranscription:
    """Word-level transcription of a whole recording."""

    duration_seconds: float
    words: tuple[TimedWord, ...]
    text: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "duration_seconds": self.duration_seconds,
            "words": [
                {"text": w.text, "start_ms": w.start_ms, "end_ms": w.end_ms} for w in self.words
            ],
            "text": self.text,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FullTranscription":
        """Deserialize from dictionary."""
        return cls(
            duration_seconds=data["duration_seconds"],
            words=tuple(
                TimedWord(text=w["text"], start_ms=w["start_ms"], end_ms=w["end_ms"])
                for w in data["words"]
            ),
            text=data.get("text", ""),
        )
