from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Iterator, List, Optional

from pintype.core.errors import EncodingError
from pintype.core.transliteration import transliterate

logger = logging.getLogger(__name__)

TEXT_DIR = Path(__file__).resolve().parent.parent / "data" / "text"


class WordStream:
    """Finite, non-restartable sequence of tokens.

    Once exhausted it stays exhausted; ask the vocabulary for a new stream.
    """

    def __init__(self, words: List[str]) -> None:
        self._words = list(words)
        self._index = 0

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        if self._index >= len(self._words):
            raise StopIteration
        word = self._words[self._index]
        self._index += 1
        return word

    @property
    def remaining(self) -> int:
        return len(self._words) - self._index


class Vocabulary:
    def __init__(self, words: List[str], name: str = "<memory>") -> None:
        if not words:
            raise ValueError(f"{name}: no words found")
        self._words = list(words)
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def __len__(self) -> int:
        return len(self._words)

    def stream(self, rng: Optional[random.Random] = None) -> WordStream:
        """Return a fresh shuffled pass over every word."""
        words = list(self._words)
        (rng or random).shuffle(words)
        return WordStream(words)

    @classmethod
    def from_file(cls, path: Path) -> "Vocabulary":
        """Load a whitespace-separated word list.

        Every word is transliterated up front, so a text that cannot be
        rendered is rejected before any session starts.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Text file not found: {path}")
        words = path.read_text(encoding="utf-8").split()
        for word in words:
            try:
                transliterate(word)
            except EncodingError as e:
                raise EncodingError(e.char, f"{path.name}: {word}") from e
        logger.info("Loaded %d words from %s", len(words), path)
        return cls(words, name=path.name)

    @classmethod
    def resolve(cls, text: str) -> "Vocabulary":
        """Load a bundled text by name (``en``, ``zh``) or any file path."""
        bundled = TEXT_DIR / f"{text}.txt"
        if bundled.exists():
            return cls.from_file(bundled)
        return cls.from_file(Path(text).expanduser())


def bundled_texts() -> List[str]:
    return sorted(p.stem for p in TEXT_DIR.glob("*.txt"))
