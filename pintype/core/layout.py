"""Packing of tokens into centred display lines with pinyin annotation rows.

A display line is what the user types: the transliterated (pinyin) form of
its tokens, separated by single spaces and terminated by ``EOL_MARKER``.
When the source text contained hanzi or full-width punctuation, the line
also carries an annotation row: the original glyphs, each token padded so
it sits centred over its pinyin, drawn one row above the line.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

from pintype.core.transliteration import transliterate

logger = logging.getLogger(__name__)

EOL_MARKER = "↵"


@dataclass(frozen=True)
class Anchor:
    col: int = 0
    row: int = 0


@dataclass(frozen=True)
class DisplayLine:
    """One laid-out line of text to type."""

    rendered: str
    original: str
    annotation: Optional[str] = None
    anchor: Anchor = Anchor()

    @property
    def length(self) -> int:
        """Character count including the end-of-line marker."""
        return len(self.rendered)

    @property
    def has_annotation(self) -> bool:
        return self.annotation is not None

    @property
    def annotation_row(self) -> Optional[int]:
        return self.anchor.row - 1 if self.has_annotation else None


@dataclass(frozen=True)
class TextArea:
    """Region of the viewport the text is packed into."""

    width: int
    height: int
    top: int

    @classmethod
    def for_viewport(cls, cols: int, rows: int) -> "TextArea":
        # Row 0 is the border and row 1 the live metrics line.
        height = max(1, rows // 4)
        top = max(2, (rows - height) // 2 - rows // 6)
        return cls(width=cols // 5 * 3, height=height, top=top)


def center_token(rendered: str, original: str, weight: int) -> str:
    """Pad ``original`` so it sits centred over ``rendered``."""
    length = len(rendered)
    # a token with no transliterated glyphs already matches its rendering
    if 0 < weight < length:
        left = (length - weight) // 2
        right = length - weight - left
        return " " * left + original + " " * right
    return original


def align_annotation(
    rendered_tokens: Iterable[str],
    original_tokens: Iterable[str],
    weights: Iterable[int],
) -> str:
    return " ".join(
        center_token(rendered, original, weight)
        for rendered, original, weight in zip(rendered_tokens, original_tokens, weights)
    )


_Transliterate = Callable[[str], Tuple[int, str]]


class LineLayout:
    """Greedy line packer over a lazy token source.

    The layout owns the token iterator; a token that does not fit on one
    line is held over as the first token of the next, including across
    calls to ``pack``.
    """

    def __init__(self, tokens: Iterable[str], transliterate_fn: _Transliterate = transliterate) -> None:
        self._tokens: Iterator[str] = iter(tokens)
        self._transliterate = transliterate_fn
        self._pending: Optional[Tuple[str, int, str]] = None
        self._exhausted = False

    @property
    def exhausted(self) -> bool:
        return self._exhausted and self._pending is None

    def _next_token(self) -> Optional[Tuple[str, int, str]]:
        if self._pending is not None:
            token, self._pending = self._pending, None
            return token
        if self._exhausted:
            return None
        try:
            word = next(self._tokens)
        except StopIteration:
            self._exhausted = True
            return None
        weight, rendered = self._transliterate(word)
        return word, weight, rendered

    def pack_line(self, width: int) -> Optional[DisplayLine]:
        """Fill one line up to ``width`` columns; None when no token is left."""
        rendered = ""
        original = ""
        weights: List[int] = []
        while True:
            token = self._next_token()
            if token is None:
                break
            word, weight, text = token
            # A token wider than the line still gets a line of its own.
            if weights and len(rendered) + len(text) + 1 >= width:
                self._pending = token
                break
            rendered += text + " "
            original += word + " "
            weights.append(weight)

        if not weights:
            return None

        rendered = rendered[:-1] + EOL_MARKER
        original = original[:-1] + EOL_MARKER
        annotation = None
        if rendered != original:
            annotation = align_annotation(rendered.split(" "), original.split(" "), weights)
        return DisplayLine(rendered=rendered, original=original, annotation=annotation)

    def pack(self, width: int, max_lines: int) -> List[DisplayLine]:
        lines: List[DisplayLine] = []
        while len(lines) < max_lines:
            line = self.pack_line(width)
            if line is None:
                break
            lines.append(line)
        logger.debug("Packed %d lines at width %d", len(lines), width)
        return lines

    def layout(self, cols: int, rows: int) -> List[DisplayLine]:
        """Pack and place a new page of text for a ``cols`` x ``rows`` viewport."""
        area = TextArea.for_viewport(cols, rows)
        return place(self.pack(area.width, area.height), cols, area.top)


def place(lines: Iterable[DisplayLine], cols: int, top: int) -> List[DisplayLine]:
    """Centre each line horizontally and stack them from ``top``.

    A line with an annotation takes two rows, the annotation above it.
    """
    placed: List[DisplayLine] = []
    row = top
    for line in lines:
        if line.has_annotation:
            row += 1
        col = max(0, (cols - line.length) // 2)
        placed.append(replace(line, anchor=Anchor(col=col, row=row)))
        row += 1
    return placed
