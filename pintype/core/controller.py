"""Event loop wiring: keys in, session + evaluator in the middle, renderer out."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Protocol, Tuple

from pintype.core.errors import InputMethodError, ViewportTooSmall
from pintype.core.evaluator import Evaluator, FinalResult, Snapshot
from pintype.core.keys import (
    BackspaceKey,
    CharKey,
    Command,
    CommandKey,
    EnterKey,
    IdleTick,
    KeyEvent,
    QuitKey,
    ResizeKey,
)
from pintype.core.layout import DisplayLine, LineLayout, TextArea, place
from pintype.core.session import SessionState, TypingSession
from pintype.core.settings import Settings
from pintype.core.words import Vocabulary

logger = logging.getLogger(__name__)


class Renderer(Protocol):
    def size(self) -> Tuple[int, int]: ...
    def resize(self, cols: int, rows: int) -> None: ...
    def draw_screen(self, lines: List[DisplayLine], buffers: List[str]) -> None: ...
    def draw_char(self, col: int, row: int, char: str, correct: bool) -> None: ...
    def erase_char(self, col: int, row: int, expected: str) -> None: ...
    def move_cursor(self, col: int, row: int) -> None: ...
    def show_snapshot(self, snapshot: Snapshot) -> None: ...
    def show_message(self, text: str) -> None: ...
    def show_results(self, result: FinalResult, char_count: int) -> None: ...
    def show_too_small(self, minimum: Tuple[int, int]) -> None: ...
    def flush(self) -> None: ...


class AudioCue(Protocol):
    def play(self) -> None: ...


def page_size(lines: List[DisplayLine]) -> Tuple[int, int]:
    """Smallest viewport (cols, rows) showing ``lines`` inside the border and above the footer."""
    cols = max((line.length for line in lines), default=0) + 2
    rows = max((line.anchor.row for line in lines), default=0) + 2
    return cols, rows


class SessionController:
    """Routes key events to the typing session and keeps the screen in sync."""

    def __init__(
        self,
        vocabulary: Vocabulary,
        renderer: Renderer,
        audio: Optional[AudioCue] = None,
        evaluator: Optional[Evaluator] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._vocabulary = vocabulary
        self._renderer = renderer
        self._audio = audio
        self._evaluator = evaluator or Evaluator()
        self._settings = settings or Settings()
        self._layout = LineLayout(vocabulary.stream())
        self._session: Optional[TypingSession] = None
        self._suspended = False
        self._result: Optional[FinalResult] = None

    @property
    def session(self) -> TypingSession:
        if self._session is None:
            raise RuntimeError("session has not been started")
        return self._session

    @property
    def evaluator(self) -> Evaluator:
        return self._evaluator

    @property
    def suspended(self) -> bool:
        """True while the terminal is below the minimum size."""
        return self._suspended

    def start(self) -> None:
        """Check the viewport and show the first page of text."""
        cols, rows = self._renderer.size()
        min_cols, min_rows = self._settings.min_size
        if cols < min_cols or rows < min_rows:
            self._renderer.resize(max(cols, min_cols), max(rows, min_rows))
            cols, rows = self._renderer.size()
            if cols < min_cols or rows < min_rows:
                raise ViewportTooSmall((cols, rows), self._settings.min_size)
        self._new_text()

    def run(self, keys: Iterable[KeyEvent]) -> None:
        self.start()
        for event in keys:
            if not self.handle(event):
                break

    def handle(self, event: KeyEvent) -> bool:
        """Process one event; False means quit."""
        if isinstance(event, QuitKey):
            return False
        if isinstance(event, ResizeKey):
            self._on_resize()
            return True
        if self._suspended:
            return True

        if isinstance(event, CommandKey):
            if event.command is Command.NEW_TEXT:
                self._new_text()
            else:
                self._restart()
            return True

        session = self.session
        if isinstance(event, (CharKey, BackspaceKey, EnterKey)) and not session.is_complete:
            try:
                if isinstance(event, CharKey):
                    accepted = self._type(event.char)
                elif isinstance(event, BackspaceKey):
                    accepted = self._backspace()
                else:
                    accepted = self._enter()
            except InputMethodError as e:
                self._renderer.show_message(str(e))
                self._place_cursor()
                self._renderer.flush()
                return True
            if accepted and self._audio is not None:
                self._audio.play()

        if session.state is SessionState.RUNNING:
            self._renderer.show_snapshot(self._evaluator.snapshot(self._evaluator.elapsed()))
            self._place_cursor()
        self._renderer.flush()
        return True

    # -- routing ---------------------------------------------------------

    def _type(self, char: str) -> bool:
        session = self.session
        line, cursor = session.current_line, session.cursor
        correct = session.type_char(char)
        if correct is None:
            return False
        self._renderer.draw_char(line.anchor.col + cursor.offset, line.anchor.row, char, correct)
        self._place_cursor()
        return True

    def _backspace(self) -> bool:
        session = self.session
        before = session.cursor
        was_correct = session.backspace()
        if was_correct is not None:
            line, cursor = session.current_line, session.cursor
            self._renderer.erase_char(
                line.anchor.col + cursor.offset, line.anchor.row, line.rendered[cursor.offset]
            )
        self._place_cursor()
        return session.cursor != before

    def _enter(self) -> bool:
        session = self.session
        line, cursor = session.current_line, session.cursor
        advance = session.advance_line()
        if advance.correct is None:
            return False
        self._renderer.draw_char(
            line.anchor.col + cursor.offset, line.anchor.row, line.rendered[-1], advance.correct
        )
        if advance.completed:
            self._result = self._evaluator.finalize(self._evaluator.elapsed())
            self._renderer.show_results(self._result, session.char_count())
        else:
            self._place_cursor()
        return True

    def _new_text(self) -> None:
        self._result = None
        cols, rows = self._renderer.size()
        lines = self._layout.layout(cols, rows)
        if not lines:
            logger.info("Word stream exhausted; reshuffling %s", self._vocabulary.name)
            self._layout = LineLayout(self._vocabulary.stream())
            lines = self._layout.layout(cols, rows)
        if self._session is None:
            self._session = TypingSession(lines, self._evaluator)
        else:
            self._session.load(lines)
        self._redraw()

    def _restart(self) -> None:
        self._result = None
        self.session.restart()
        self._redraw()

    def _on_resize(self) -> None:
        cols, rows = self._renderer.size()
        min_cols, min_rows = self._settings.min_size
        if cols < min_cols or rows < min_rows:
            self._suspended = True
            self._renderer.show_too_small(self._settings.min_size)
            self._renderer.flush()
            return
        session = self.session
        lines = place(session.lines, cols, TextArea.for_viewport(cols, rows).top)
        needed = page_size(lines)
        if needed[0] > cols or needed[1] > rows:
            # the page was packed for a wider or taller terminal
            self._suspended = True
            self._renderer.show_too_small((max(needed[0], min_cols), max(needed[1], min_rows)))
            self._renderer.flush()
            return
        self._suspended = False
        session.relocate(lines)
        if session.is_complete and self._result is not None:
            self._renderer.show_results(self._result, session.char_count())
            self._renderer.flush()
        else:
            self._redraw()

    # -- drawing ---------------------------------------------------------

    def _redraw(self) -> None:
        session = self.session
        self._renderer.draw_screen(session.lines, session.buffers)
        self._place_cursor()
        self._renderer.flush()

    def _place_cursor(self) -> None:
        session = self.session
        line, cursor = session.current_line, session.cursor
        self._renderer.move_cursor(line.anchor.col + cursor.offset, line.anchor.row)
