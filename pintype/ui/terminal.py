"""Curses implementation of the renderer, viewport and key source."""

from __future__ import annotations

import curses
import logging
import os
import sys
from typing import Iterator, List, Optional, Tuple, Union

from pintype.core.evaluator import FinalResult, Snapshot
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
from pintype.core.layout import DisplayLine
from pintype.ui.colors import Palette, init_palette, style

logger = logging.getLogger(__name__)

CTRL_N = "\x0e"
CTRL_R = "\x12"
ESC = "\x1b"

FOOTER = (("ctrl-r", " to restart, "), ("ctrl-n", " to next, "), ("ESC", " to quit"))


def decode_key(value: Union[str, int]) -> Optional[KeyEvent]:
    """Map a ``get_wch`` result to a key event; None for keys we ignore."""
    if isinstance(value, int):
        if value == curses.KEY_BACKSPACE:
            return BackspaceKey()
        if value == curses.KEY_ENTER:
            return EnterKey()
        if value == curses.KEY_RESIZE:
            return ResizeKey()
        return None
    if value in ("\n", "\r"):
        return EnterKey()
    if value in ("\x7f", "\b"):
        return BackspaceKey()
    if value == CTRL_N:
        return CommandKey(Command.NEW_TEXT)
    if value == CTRL_R:
        return CommandKey(Command.RESTART)
    if value == ESC:
        return QuitKey()
    if len(value) == 1 and value.isprintable():
        return CharKey(value)
    return None


def format_percent(value: Optional[float]) -> str:
    return "N/A" if value is None else f"{value * 100:.1f}%"


def format_speed(value: Optional[float]) -> str:
    return "N/A" if value is None else f"{value:.1f}"


class KeyReader:
    """Blocking key source; yields IdleTick when no key arrives in time."""

    def __init__(self, screen, tick_ms: int) -> None:
        self._screen = screen
        self._screen.keypad(True)
        self._screen.timeout(tick_ms)

    def __iter__(self) -> Iterator[KeyEvent]:
        while True:
            try:
                value = self._screen.get_wch()
            except curses.error:
                yield IdleTick()
                continue
            event = decode_key(value)
            if event is not None:
                yield event


class TerminalRenderer:
    """Draws the typing screen on a curses window."""

    def __init__(self, screen) -> None:
        self._screen = screen
        if not init_palette():
            logger.info("Terminal has no colour support")
        self._show_cursor(True)

    # -- viewport --------------------------------------------------------

    def size(self) -> Tuple[int, int]:
        rows, cols = self._screen.getmaxyx()
        try:
            cols_now, rows_now = os.get_terminal_size(sys.__stdout__.fileno())
        except (OSError, AttributeError, ValueError):
            return cols, rows
        if (rows_now, cols_now) != (rows, cols):
            curses.resize_term(rows_now, cols_now)
        return cols_now, rows_now

    def resize(self, cols: int, rows: int) -> None:
        """Ask the terminal emulator to resize itself (xterm window op)."""
        logger.info("Requesting terminal resize to %dx%d", cols, rows)
        sys.__stdout__.write(f"\x1b[8;{rows};{cols}t")
        sys.__stdout__.flush()
        curses.napms(100)

    # -- primitives ------------------------------------------------------

    def _put(self, col: int, row: int, text: str, attr: int = curses.A_NORMAL) -> None:
        try:
            self._screen.addstr(row, col, text, attr)
        except curses.error:
            # addstr reports an error after writing the bottom-right cell
            pass

    def _show_cursor(self, visible: bool) -> None:
        try:
            curses.curs_set(1 if visible else 0)
        except curses.error:
            logger.debug("Terminal cannot change cursor visibility")

    def _centre_col(self, width: int) -> int:
        _, cols = self._screen.getmaxyx()
        return max(0, (cols - width) // 2)

    def _clear_row(self, row: int) -> None:
        _, cols = self._screen.getmaxyx()
        self._put(1, row, " " * max(0, cols - 2))

    def _draw_border(self) -> None:
        rows, cols = self._screen.getmaxyx()
        self._put(0, 0, "-" * cols)
        self._put(0, rows - 1, "-" * cols)
        for row in range(rows):
            self._put(0, row, "|")
            self._put(cols - 1, row, "|")

    def _draw_footer(self) -> None:
        rows, _ = self._screen.getmaxyx()
        width = sum(len(key) + len(text) for key, text in FOOTER)
        col = self._centre_col(width)
        for key, text in FOOTER:
            self._put(col, rows - 1, key, style(Palette.HINT, bold=True))
            col += len(key)
            self._put(col, rows - 1, text)
            col += len(text)

    # -- renderer protocol -----------------------------------------------

    def draw_screen(self, lines: List[DisplayLine], buffers: List[str]) -> None:
        self._screen.erase()
        self._show_cursor(True)
        self._draw_border()
        for line, typed in zip(lines, buffers):
            col, row = line.anchor.col, line.anchor.row
            if line.annotation is not None:
                self._put(col, row - 1, line.annotation, style(Palette.ANNOTATION))
            self._put(col, row, line.rendered)
            for offset, char in enumerate(typed):
                self.draw_char(col + offset, row, char, line.rendered[offset] == char)
        self._draw_footer()

    def draw_char(self, col: int, row: int, char: str, correct: bool) -> None:
        pair = Palette.CORRECT if correct else Palette.WRONG
        self._put(col, row, char, style(pair, bold=True))

    def erase_char(self, col: int, row: int, expected: str) -> None:
        self._put(col, row, expected)

    def move_cursor(self, col: int, row: int) -> None:
        try:
            self._screen.move(row, col)
        except curses.error:
            logger.debug("Cursor position %d,%d is off screen", col, row)

    def show_snapshot(self, snapshot: Snapshot) -> None:
        parts = [
            ("current Accuracy: ", None),
            (format_percent(snapshot.accuracy), Palette.METRIC),
            (", current Wpm: ", None),
            (format_speed(snapshot.wpm), Palette.METRIC),
        ]
        self._clear_row(1)
        col = self._centre_col(sum(len(text) for text, _ in parts))
        for text, pair in parts:
            self._put(col, 1, text, style(pair) if pair else curses.A_NORMAL)
            col += len(text)

    def show_message(self, text: str) -> None:
        self._clear_row(1)
        self._put(self._centre_col(len(text)), 1, text, style(Palette.WRONG, bold=True))

    def show_results(self, result: FinalResult, char_count: int) -> None:
        rows, _ = self._screen.getmaxyx()
        self._screen.erase()
        self._show_cursor(False)
        self._draw_border()
        speed = f"{format_speed(result.wpm)} wpm"
        entries = [
            (f"Took {result.elapsed:.0f}s for {char_count} characters", curses.A_NORMAL),
            (f"Accuracy: {format_percent(result.real_time_accuracy)}", style(Palette.METRIC)),
            (f"Keystroke Accuracy: {format_percent(result.accuracy)}", style(Palette.RESULT)),
            (f"Speed: {speed} (words per minute)", style(Palette.CORRECT)),
        ]
        top = max(1, rows // 2 - 2)
        for index, (text, attr) in enumerate(entries):
            self._put(self._centre_col(len(text)), top + index, text, attr)
        self._draw_footer()

    def show_too_small(self, minimum: Tuple[int, int]) -> None:
        self._screen.erase()
        text = f"Terminal too small, need {minimum[0]}x{minimum[1]}"
        rows, _ = self._screen.getmaxyx()
        self._put(0, rows // 2, text, style(Palette.WRONG))

    def flush(self) -> None:
        self._screen.refresh()
