"""Cutting word-sized clips out of a source recording."""

from __future__ import annotations

import logging
import tempfile
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import numpy as np
import soundfile as sf

from core.errors import AudioDecodeError

logger = logging.getLogger(__name__)

OUTPUT_FORMAT = "WAV"
FALLBACK_SUBTYPE = "FLOAT"


def _buffer_dtype(subtype: str) -> str:
    """Read dtype that copies samples of the given subtype without rescaling."""
    if subtype.startswith("PCM_"):
        return "int32"
    if subtype == "DOUBLE":
        return "float64"
    return "float32"


def ms_to_frames(ms: float, sample_rate: int) -> int:
    return round(ms / 1000 * sample_rate)


def frames_to_ms(frames: int, sample_rate: int) -> float:
    return frames / sample_rate * 1000


def extract_segment(
    source_path: str | Path,
    start_ms: float,
    end_ms: float,
    temp_dir: str | Path | None = None,
) -> Path:
    """
    Copy the [start_ms, end_ms) span of an audio file into a new WAV file.

    The clip keeps the source sample rate, channel count and (where WAV can
    hold it) sample subtype. Reads go through a one-second buffer; the last
    read is shortened to the frames still missing before end_ms. A start past
    the end of the source yields an empty clip.

    Args:
        source_path: Audio file readable by libsndfile
        start_ms: Span start in milliseconds
        end_ms: Span end in milliseconds
        temp_dir: Directory for the clip (system temp dir by default)

    Returns:
        Path of the new clip, which the caller must delete

    Raises:
        AudioDecodeError: If the source cannot be opened or decoded
    """
    try:
        source = sf.SoundFile(str(source_path))
    except (sf.SoundFileError, RuntimeError, OSError) as e:
        raise AudioDecodeError(f"Cannot decode {source_path}: {e}") from e

    output_path = Path(temp_dir or tempfile.gettempdir()) / f"{uuid.uuid4()}.wav"

    with source:
        sample_rate = source.samplerate
        channels = source.channels
        subtype = source.subtype
        if not sf.check_format(OUTPUT_FORMAT, subtype):
            subtype = FALLBACK_SUBTYPE

        dtype = _buffer_dtype(subtype)
        buffer = np.empty((sample_rate, channels), dtype=dtype)
        start_frame = max(0, ms_to_frames(start_ms, sample_rate))

        with sf.SoundFile(
            str(output_path),
            mode="w",
            samplerate=sample_rate,
            channels=channels,
            subtype=subtype,
            format=OUTPUT_FORMAT,
        ) as output:
            if start_frame >= source.frames:
                logger.debug(
                    "Segment start %.1fms is past the end of %s", start_ms, source_path
                )
                return output_path

            try:
                source.seek(start_frame)
                position_ms = frames_to_ms(source.tell(), sample_rate)
                while position_ms < end_ms:
                    wanted = min(len(buffer), round((end_ms - position_ms) / 1000 * sample_rate))
                    if wanted <= 0:
                        break
                    chunk = source.read(wanted, dtype=dtype, always_2d=True, out=buffer[:wanted])
                    if len(chunk) == 0:
                        break
                    output.write(chunk)
                    position_ms = frames_to_ms(source.tell(), sample_rate)
            except (sf.SoundFileError, RuntimeError) as e:
                output.close()
                output_path.unlink(missing_ok=True)
                raise AudioDecodeError(f"Cannot decode {source_path}: {e}") from e

    return output_path


@contextmanager
def audio_segment(
    source_path: str | Path,
    start_ms: float,
    end_ms: float,
    temp_dir: str | Path | None = None,
) -> Iterator[Path]:
    """Extract a segment and delete it when the block exits."""
    path = extract_segment(source_path, start_ms, end_ms, temp_dir)
    try:
        yield path
    finally:
        path.unlink(missing_ok=True)


def audio_duration_seconds(path: str | Path) -> float:
    """Duration of a decodable audio file."""
    try:
        info = sf.info(str(path))
    except (sf.SoundFileError, RuntimeError, OSError) as e:
        raise AudioDecodeError(f"Cannot decode {path}: {e}") from e
    return info.frames / info.samplerate
