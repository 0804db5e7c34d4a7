"""Error kinds raised by the typing engine."""

from __future__ import annotations


class PintypeError(Exception):
    """Base class for all pintype errors."""


class InputMethodError(PintypeError, ValueError):
    """An untransliterated source glyph was typed directly."""

    def __init__(self, char: str) -> None:
        super().__init__(f"please type the pinyin form, not {char!r} (turn off the Chinese input method)")
        self.char = char


class EncodingError(PintypeError, UnicodeError):
    """A source character has no transliteration."""

    def __init__(self, char: str, token: str = "") -> None:
        where = f" in {token!r}" if token else ""
        super().__init__(f"no pinyin available for {char!r}{where}")
        self.char = char
        self.token = token


class ViewportTooSmall(PintypeError, RuntimeError):
    """The terminal is smaller than the minimum usable size."""

    def __init__(self, size: tuple[int, int], minimum: tuple[int, int]) -> None:
        super().__init__(
            f"terminal is {size[0]}x{size[1]}, need at least {minimum[0]}x{minimum[1]}"
        )
        self.size = size
        self.minimum = minimum


class DivisionUndefined(PintypeError, ZeroDivisionError):
    """A metric was queried before anything was typed or timed."""
