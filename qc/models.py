"""Data models for annotated transcripts and QC outcomes."""

from dataclasses import dataclass, field
from typing import Any

from core.errors import InputError

EMPTY_RESULT_TEXT = "Error: empty result"
QC_ERROR_PREFIX = "QC Error: "


@dataclass(frozen=True, slots=True)
class QCResult:
    """Outcome of re-verifying one word."""

    alternative_text: str
    passed: bool


@dataclass(frozen=True, slots=True)
class QCFailure:
    """Typed failure of a single word's verification."""

    error_code: str
    message: str

    def to_result(self) -> QCResult:
        return QCResult(alternative_text=f"{QC_ERROR_PREFIX}{self.message}", passed=False)


QCOutcome = QCResult | QCFailure


def outcome_to_result(outcome: QCOutcome) -> QCResult:
    """Fold an outcome into the result stored on a word."""
    if isinstance(outcome, QCFailure):
        return outcome.to_result()
    return outcome


@dataclass(slots=True)
class Word:
    """Transcribed word with timing in milliseconds and QC annotation."""

    text: str
    start_time: float
    end_time: float
    edited: bool = False
    qc_passed: bool = False
    qc_alternative: str = ""

    def apply_qc(self, result: QCResult) -> None:
        self.qc_passed = result.passed
        self.qc_alternative = result.alternative_text

    def to_dict(self) -> dict[str, Any]:
        return {
            "word": self.text,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "edited": self.edited,
            "qc": self.qc_passed,
            "qc_word": self.qc_alternative,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Word":
        """Deserialize a word, raising InputError on malformed entries."""
        if not isinstance(data, dict):
            raise InputError("Each word must be a JSON object")
        try:
            text = data["word"]
            start = float(data["start_time"])
            end = float(data["end_time"])
        except (KeyError, TypeError, ValueError) as e:
            raise InputError(f"Malformed word entry: {e}") from e
        if start < 0 or end < start:
            raise InputError(f"Invalid word timing: start_time={start}, end_time={end}")
        return cls(
            text=str(text),
            start_time=start,
            end_time=end,
            edited=bool(data.get("edited", False)),
            qc_passed=bool(data.get("qc", False)),
            qc_alternative=str(data.get("qc_word") or ""),
        )


@dataclass(slots=True)
class Transcript:
    """Annotated transcript of one uploaded recording."""

    filename: str
    duration: float
    words: list[Word] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "filename": self.filename,
            "duration": self.duration,
            "words": [w.to_dict() for w in self.words],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Transcript":
        """Deserialize from dictionary, raising InputError on malformed input."""
        if not isinstance(data, dict):
            raise InputError("Transcript must be a JSON object")
        words = data.get("words", [])
        if not isinstance(words, list):
            raise InputError("'words' must be a list")
        try:
            duration = float(data.get("duration", 0) or 0)
        except (TypeError, ValueError) as e:
            raise InputError(f"Invalid duration: {e}") from e
        if duration < 0:
            raise InputError("'duration' must not be negative")
        return cls(
            filename=str(data.get("filename", "") or ""),
            duration=duration,
            words=[Word.from_dict(w) for w in words],
        )
