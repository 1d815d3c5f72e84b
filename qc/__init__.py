"""Word-level transcript quality control."""

from qc.assembler import assemble_transcript
from qc.audio import audio_segment, extract_segment
from qc.models import QCFailure, QCOutcome, QCResult, Transcript, Word
from qc.pipeline import WordQCPipeline
from qc.text import is_match, normalize_text, similarity_score

__all__ = [
    "QCFailure",
    "QCOutcome",
    "QCResult",
    "Transcript",
    "Word",
    "WordQCPipeline",
    "assemble_transcript",
    "audio_segment",
    "extract_segment",
    "is_match",
    "normalize_text",
    "similarity_score",
]
