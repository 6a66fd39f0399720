"""Chinese to pinyin transliteration for cross-script matching."""

import re
from typing import List

from pypinyin import Style, lazy_pinyin

# Hiragana/Katakana, CJK Extension A, CJK Unified, Compatibility, half-width Katakana
CJK_CLASS = r'[\u3040-\u30ff\u3400-\u4dbf\u4e00-\u9fff\uf900-\ufaff\uff66-\uff9f]'
CJK_PATTERN = re.compile(CJK_CLASS)
CJK_RUN_PATTERN = re.compile(CJK_CLASS + '+')


def contains_cjk(text) -> bool:
    """Whether ``text`` has at least one CJK or Kana character."""
    if not text or not isinstance(text, str):
        return False
    return CJK_PATTERN.search(text) is not None


def to_pinyin(text) -> str:
    """
    Transliterate the Chinese parts of ``text`` into tone-free pinyin.

    Each contiguous CJK run becomes one word with its syllables joined
    (``"你好世界"`` -> ``"nihaoshijie"``) so that a Latin query prefix can hit it
    through n-gram expansion. Text outside CJK runs is kept and separated from
    the transliterated words by a space. Characters pypinyin cannot convert
    (e.g. Kana) pass through unchanged.
    """
    if not text or not isinstance(text, str):
        return ''

    words: List[str] = []
    last = 0
    for match in CJK_RUN_PATTERN.finditer(text):
        if match.start() > last:
            words.append(text[last:match.start()])
        words.append(''.join(lazy_pinyin(match.group(), style=Style.NORMAL)))
        last = match.end()
    if last < len(text):
        words.append(text[last:])

    return ' '.join(w.strip() for w in words if w.strip())
