"""Merging full-file transcription words with their QC outcomes."""

from collections.abc import Sequence

from qc.models import QCOutcome, Transcript, Word, outcome_to_result
from stt.models import FullTranscription

TIMESTAMP_PRECISION = 3


def assemble_transcript(
    filename: str,
    transcription: FullTranscription,
    outcomes: Sequence[QCOutcome],
) -> Transcript:
    """Build the annotated transcript, keeping the transcription's word order."""
    if len(outcomes) != len(transcription.words):
        raise ValueError(
            f"Got {len(outcomes)} QC outcomes for {len(transcription.words)} words"
        )

    words = []
    for timed, outcome in zip(transcription.words, outcomes):
        word = Word(
            text=timed.text,
            start_time=round(timed.start_ms, TIMESTAMP_PRECISION),
            end_time=round(timed.end_ms, TIMESTAMP_PRECISION),
            edited=False,
        )
        word.apply_qc(outcome_to_result(outcome))
        words.append(word)

    return Transcript(filename=filename, duration=transcription.duration_seconds, words=words)
