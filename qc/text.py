"""Text normalization and fuzzy similarity scoring."""

from fuzzywuzzy import fuzz


def normalize_text(text: str | None) -> str:
    """Lower-case and keep only letters, decimal digits and whitespace.

    Punctuation is dropped, not replaced, so "don't" becomes "dont".
    """
    if not text:
        return ""
    return "".join(c for c in text.lower() if c.isalpha() or c.isdecimal() or c.isspace())


def similarity_score(a: str, b: str) -> int:
    """Levenshtein ratio of two strings in [0, 100]."""
    return fuzz.ratio(a, b)


def is_match(score: float, threshold: float) -> bool:
    return score > threshold
