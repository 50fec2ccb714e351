"""Text similarity primitives used by album scoring and track pairing.

Every function here is pure, case-insensitive and returns a value in [0, 1].
"""

from __future__ import annotations

import re
from collections import Counter

from rapidfuzz import fuzz

_TOKEN_RE = re.compile(r"[^\W_]+")


def _normalize(text: str | None) -> str:
    return (text or "").strip().lower()


def tokenize(text: str | None) -> list[str]:
    """Split text into lowercase tokens on whitespace and punctuation."""
    return _TOKEN_RE.findall(_normalize(text))


def char_similarity(str_a: str | None, str_b: str | None) -> float:
    """Character overlap similarity.

    Counts characters the two strings have in common (as multisets, so
    position does not matter) and divides by the longer length.

    Args:
        str_a: First string.
        str_b: Second string.

    Returns:
        1.0 when both are empty, 0.0 when exactly one is empty.
    """
    a = _normalize(str_a)
    b = _normalize(str_b)
    if not a and not b:
        return 1.0
    if not a or not b:
        return 0.0

    common = sum((Counter(a) & Counter(b)).values())
    return common / max(len(a), len(b))


def jaccard_similarity(str_a: str | None, str_b: str | None) -> float:
    """Token set Jaccard similarity (|A & B| / |A | B|).

    Args:
        str_a: First string.
        str_b: Second string.

    Returns:
        1.0 when both have no tokens, 0.0 when exactly one has none.
    """
    tokens_a = set(tokenize(str_a))
    tokens_b = set(tokenize(str_b))
    if not tokens_a and not tokens_b:
        return 1.0
    if not tokens_a or not tokens_b:
        return 0.0
    return len(tokens_a & tokens_b) / len(tokens_a | tokens_b)


def name_similarity(str_a: str | None, str_b: str | None) -> float:
    """Similarity for artist and album names.

    Jaccard handles multi-word names and reordering; character overlap keeps
    single-word names and small spelling differences from collapsing to 0.
    """
    return max(jaccard_similarity(str_a, str_b), char_similarity(str_a, str_b))


def title_similarity(str_a: str | None, str_b: str | None) -> float:
    """Fuzzy similarity between two track titles.

    Uses a weighted combination of ratio, partial_ratio, and
    token_sort_ratio for robustness against different types of
    misspellings and reorderings.

    Args:
        str_a: First title.
        str_b: Second title.

    Returns:
        Similarity from 0.0 to 1.0 (0.0 if either title is empty).
    """
    a = " ".join(_normalize(str_a).split())
    b = " ".join(_normalize(str_b).split())
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0

    # token_sort handles word reordering, partial handles substrings,
    # ratio is the strict baseline
    ratio = fuzz.ratio(a, b)
    partial = fuzz.partial_ratio(a, b)
    token_sort = fuzz.token_sort_ratio(a, b)

    score = (ratio * 0.4) + (partial * 0.3) + (token_sort * 0.3)
    return max(0.0, min(1.0, score / 100.0))
