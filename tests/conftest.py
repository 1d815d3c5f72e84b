"""Shared test fixtures."""

from collections.abc import Callable
from pathlib import Path

import numpy as np
import pytest
import soundfile as sf

from stt.models import FullTranscription, TimedWord


class FakeGateway:
    """In-process gateway returning canned transcriptions."""

    def __init__(
        self,
        full: FullTranscription | None = None,
        segments: list[str | Exception] | None = None,
    ) -> None:
        self.full = full or FullTranscription(duration_seconds=0.0, words=())
        self.segments = list(segments or [])
        self.segment_paths: list[str] = []

    def transcribe_full(self, audio_path: str) -> FullTranscription:
        return self.full

    def transcribe_segment(self, audio_path: str) -> str:
        self.segment_paths.append(audio_path)
        response = self.segments.pop(0) if self.segments else ""
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def make_wav(tmp_path: Path) -> Callable[..., Path]:
    def _make(
        name: str = "source.wav",
        seconds: float = 3.0,
        sample_rate: int = 16000,
        channels: int = 1,
        subtype: str = "PCM_16",
    ) -> Path:
        t = np.arange(int(seconds * sample_rate)) / sample_rate
        tone = 0.5 * np.sin(2 * np.pi * 440 * t)
        data = np.column_stack([tone] * channels) if channels > 1 else tone
        path = tmp_path / name
        sf.write(str(path), data, sample_rate, subtype=subtype)
        return path

    return _make


@pytest.fixture
def source_wav(make_wav) -> Path:
    return make_wav()


@pytest.fixture
def three_words() -> FullTranscription:
    return FullTranscription(
        duration_seconds=1.5,
        words=(
            TimedWord("hello", 0.0, 500.0),
            TimedWord("world", 500.0, 1000.0),
            TimedWord("foo", 1000.0, 1500.0),
        ),
        text="hello world foo",
    )


@pytest.fixture
def sample_transcript_dict() -> dict:
    return {
        "filename": "interview.wav",
        "duration": 1.5,
        "words": [
            {
                "word": "hello",
                "start_time": 0.0,
                "end_time": 500.0,
                "edited": False,
                "qc": True,
                "qc_word": "hello",
            },
            {
                "word": "world",
                "start_time": 500.0,
                "end_time": 1000.0,
                "edited": True,
                "qc": False,
                "qc_word": "word",
            },
        ],
    }


@pytest.fixture
def fake_gateway() -> type[FakeGateway]:
    return FakeGateway
