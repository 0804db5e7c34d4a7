"""Terminal colour palette for the curses UI."""

from __future__ import annotations

import curses


class Palette:
    """Curses colour-pair ids and the foreground each one maps to."""

    CORRECT = 1
    WRONG = 2
    METRIC = 3
    RESULT = 4
    HINT = 5
    ANNOTATION = 6

    FOREGROUND = {
        CORRECT: curses.COLOR_GREEN,
        WRONG: curses.COLOR_RED,
        METRIC: curses.COLOR_MAGENTA,
        RESULT: curses.COLOR_CYAN,
        HINT: curses.COLOR_BLUE,
        ANNOTATION: curses.COLOR_YELLOW,
    }


def init_palette() -> bool:
    """Register the palette's colour pairs. Returns False on a monochrome terminal."""
    if not curses.has_colors():
        return False
    curses.start_color()
    try:
        curses.use_default_colors()
        background = -1
    except curses.error:
        background = curses.COLOR_BLACK
    for pair, foreground in Palette.FOREGROUND.items():
        curses.init_pair(pair, foreground, background)
    return True


def style(pair: int, bold: bool = False) -> int:
    """Curses attribute for a palette pair, or plain text if colours are off."""
    attr = curses.A_BOLD if bold else curses.A_NORMAL
    if curses.has_colors():
        attr |= curses.color_pair(pair)
    return attr
