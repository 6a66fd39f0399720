"""N-gram term expansion shared by indexing and querying."""

from typing import List

NGRAM_MIN = 3
NGRAM_MAX = 10


def expand_term(term: str, min_size: int = NGRAM_MIN, max_size: int = NGRAM_MAX) -> List[str]:
    """
    Expand a token into itself plus its contiguous substrings.

    Substrings of length ``min_size`` through ``max_size`` are listed shortest
    first, left to right. ``"google"`` expands to ``["google", "goo", "oog",
    "ogl", "gle", "goog", ...]`` so typing part of a word still matches.
    """
    if not term:
        return []

    expansions = [term]
    length = len(term)
    for size in range(min_size, min(max_size, length) + 1):
        for start in range(length - size + 1):
            expansions.append(term[start:start + size])
    return expansions
