from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from pintype.core.errors import InputMethodError
from pintype.core.evaluator import Evaluator
from pintype.core.layout import EOL_MARKER, DisplayLine
from pintype.core.transliteration import is_source_glyph

logger = logging.getLogger(__name__)


class SessionState(Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Cursor:
    line: int = 0
    offset: int = 0


@dataclass(frozen=True)
class LineAdvance:
    """Outcome of pressing Enter.

    ``correct`` is None when the keystroke was not applicable (line full).
    """

    correct: Optional[bool]
    completed: bool = False


class TypingSession:
    """Keystroke-by-keystroke matching against a page of display lines.

    The session owns the cursor and one input buffer per line, and reports
    every accepted keystroke to the shared ``Evaluator``. Backspace at the
    start of a line only moves the cursor to the end of the previous line;
    that line's buffer is untouched until the next backspace.
    """

    def __init__(self, lines: List[DisplayLine], evaluator: Evaluator) -> None:
        """Start a session over ``lines``; counters on ``evaluator`` are cleared."""
        if not lines:
            raise ValueError("a typing session needs at least one line")
        self._evaluator = evaluator
        self._lines: List[DisplayLine] = []
        self._buffers: List[List[str]] = []
        self._cursor = Cursor()
        self._state = SessionState.NOT_STARTED
        self.load(lines)

    @property
    def state(self) -> SessionState:
        """Current lifecycle state."""
        return self._state

    @property
    def cursor(self) -> Cursor:
        """Line index and offset of the next character to type."""
        return self._cursor

    @property
    def lines(self) -> List[DisplayLine]:
        """The laid-out lines of this text."""
        return list(self._lines)

    @property
    def buffers(self) -> List[str]:
        """Typed text of every line, in line order."""
        return ["".join(buffer) for buffer in self._buffers]

    @property
    def current_line(self) -> DisplayLine:
        """Line the cursor is on."""
        return self._lines[self._cursor.line]

    @property
    def is_complete(self) -> bool:
        """True once the last line has been finished."""
        return self._state is SessionState.COMPLETED

    def committed(self) -> int:
        """Number of characters held in all input buffers."""
        return sum(len(buffer) for buffer in self._buffers)

    def char_count(self) -> int:
        """Total characters to type, end-of-line markers included."""
        return sum(line.length for line in self._lines)

    # -- lifecycle -------------------------------------------------------

    def load(self, lines: List[DisplayLine]) -> None:
        """Replace the text (new text event) and clear all typing state."""
        if not lines:
            raise ValueError("a typing session needs at least one line")
        self._lines = list(lines)
        self.restart()

    def restart(self) -> None:
        """Go back to the start of the same text."""
        self._buffers = [[] for _ in self._lines]
        self._cursor = Cursor()
        self._state = SessionState.NOT_STARTED
        self._evaluator.reset()

    def relocate(self, lines: List[DisplayLine]) -> None:
        """Swap in re-placed copies of the same lines, keeping typing state."""
        if [line.rendered for line in lines] != [line.rendered for line in self._lines]:
            raise ValueError("relocated lines must carry the same text")
        self._lines = list(lines)

    # -- keystrokes ------------------------------------------------------

    def type_char(self, char: str) -> Optional[bool]:
        """Type one character at the cursor.

        Returns whether it matched, or None when nothing happened (session
        completed or the line is already full). Raises InputMethodError for
        hanzi and full-width punctuation without touching any state.
        """
        if self._state is SessionState.COMPLETED:
            return None
        if is_source_glyph(char):
            logger.info("Rejected untransliterated input %r", char)
            raise InputMethodError(char)

        line = self.current_line
        offset = self._cursor.offset
        if offset >= line.length:
            return None

        correct = line.rendered[offset] == char
        self._buffers[self._cursor.line].append(char)
        self._cursor = Cursor(self._cursor.line, offset + 1)
        if self._state is SessionState.NOT_STARTED:
            self._state = SessionState.RUNNING
            self._evaluator.start()
            logger.info("Session started")
        self._evaluator.record(correct)
        return correct

    def backspace(self) -> Optional[bool]:
        """Erase the last typed character on the current line.

        Returns whether the erased character had been correct, or None when
        nothing was erased (cursor moved to the previous line, or no-op).
        """
        if self._state is SessionState.COMPLETED:
            return None
        index, offset = self._cursor.line, self._cursor.offset
        if offset > 0:
            typed = self._buffers[index].pop()
            self._cursor = Cursor(index, offset - 1)
            was_correct = self._lines[index].rendered[offset - 1] == typed
            self._evaluator.undo(was_correct)
            return was_correct
        if index > 0:
            self._cursor = Cursor(index - 1, self._lines[index - 1].length)
        return None

    def advance_line(self) -> LineAdvance:
        """Type the end-of-line marker (Enter).

        A correct Enter moves to the next line; on the last line, reaching
        the end of the line completes the session.
        """
        index = self._cursor.line
        correct = self.type_char(EOL_MARKER)
        if correct is None:
            return LineAdvance(correct=None)
        if index + 1 < len(self._lines):
            if correct:
                self._cursor = Cursor(index + 1, 0)
            return LineAdvance(correct=correct)
        if self._cursor.offset == self.current_line.length:
            self._state = SessionState.COMPLETED
            self._evaluator.stop()
            logger.info("Session completed in %.1fs", self._evaluator.elapsed())
            return LineAdvance(correct=correct, completed=True)
        return LineAdvance(correct=correct)
