"""Script-aware tokenizer for titles, URLs and live query terms."""

import re
from typing import List, Optional

from .transliterate import contains_cjk, to_pinyin

SPACE_OR_PUNCTUATION = re.compile(r"[\s\-_.,!?;:'\"()\[\]{}/\\]+")

# Zero-width boundary between a non-ASCII run and an ASCII alphanumeric run
SCRIPT_BOUNDARY = re.compile(
    r'(?<=[^\x00-\x7f])(?=[A-Za-z0-9])|(?<=[A-Za-z0-9])(?=[^\x00-\x7f])'
)

TITLE_FIELD = "title"


def _split(text: str) -> List[str]:
    tokens = []
    for piece in SPACE_OR_PUNCTUATION.split(text.lower()):
        if not piece:
            continue
        tokens.extend(t for t in SCRIPT_BOUNDARY.split(piece) if t)
    return tokens


def tokenize(text, field: Optional[str] = None) -> List[str]:
    """
    Split ``text`` into lowercase tokens.

    Args:
        text: Raw text; anything that is not a non-empty string yields no tokens
        field: Name of the document field being indexed. ``"title"`` drops purely
            numeric tokens and adds the pinyin tokens of any Chinese text. Query
            terms are tokenized without a field so numbers are kept.

    Returns:
        Tokens in order of appearance, without empties
    """
    if not text or not isinstance(text, str):
        return []

    tokens = _split(text)

    if field != TITLE_FIELD:
        return tokens

    tokens = [t for t in tokens if not t.isdigit()]
    if not contains_cjk(text):
        return tokens

    merged = list(dict.fromkeys(tokens))
    seen = set(merged)
    for token in _split(to_pinyin(text)):
        if token.isdigit() or token in seen:
            continue
        seen.add(token)
        merged.append(token)
    return merged
