"""Hanzi to pinyin transliteration of source tokens."""

from __future__ import annotations

from typing import Dict, Tuple

from pypinyin import Style, lazy_pinyin

from pintype.core.errors import EncodingError

# Full-width punctuation typed as its ASCII counterpart.
PUNCTUATION: Dict[str, str] = {
    "。": ".",
    "，": ",",
    "！": "!",
    "‘": "'",
    "’": "'",
    "；": ";",
    "：": ":",
    "“": '"',
    "”": '"',
    "、": "\\",
    "《": "<",
    "》": ">",
    "？": "?",
    "（": "(",
    "）": ")",
}

_IDEOGRAPHIC_RANGES: Tuple[Tuple[int, int], ...] = (
    (0x4E00, 0x9FFF),  # CJK unified ideographs
    (0x2E80, 0x2EFF),  # radicals supplement
    (0x31C0, 0x31EF),  # strokes
    (0x2F00, 0x2FFF),  # Kangxi radicals
    (0x3200, 0x32FF),  # enclosed CJK letters and months
    (0xF900, 0xFAFF),  # compatibility ideographs
)


def is_ideographic(char: str) -> bool:
    cp = ord(char)
    return any(lo <= cp <= hi for lo, hi in _IDEOGRAPHIC_RANGES)


def is_source_glyph(char: str) -> bool:
    """True for characters that only appear in the original text, never in what is typed."""
    return is_ideographic(char) or char in PUNCTUATION


def pinyin_of(char: str) -> str:
    """Toneless pinyin of a single ideographic character.

    Raises EncodingError when pypinyin has no reading for it.
    """
    spelled = lazy_pinyin(char, style=Style.NORMAL, errors="ignore")
    if not spelled or not spelled[0] or not spelled[0].isascii():
        raise EncodingError(char)
    return spelled[0]


def transliterate(token: str) -> Tuple[int, str]:
    """Return ``(visual_weight, rendered)`` for one source token.

    Ideographs become their pinyin and full-width punctuation its ASCII
    equivalent; both count toward the weight. Everything else passes through.
    """
    weight = 0
    rendered = []
    for char in token:
        if is_ideographic(char):
            try:
                rendered.append(pinyin_of(char))
            except EncodingError as e:
                raise EncodingError(char, token) from e
            weight += 1
        elif char in PUNCTUATION:
            rendered.append(PUNCTUATION[char])
            weight += 1
        else:
            rendered.append(char)
    return weight, "".join(rendered)
