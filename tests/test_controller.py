"""Tests for pintype.core.controller – event routing with fake collaborators."""

from __future__ import annotations

from typing import List, Tuple

import pytest

from pintype.core.controller import SessionController, page_size
from pintype.core.errors import ViewportTooSmall
from pintype.core.evaluator import Evaluator
from pintype.core.keys import (
    BackspaceKey,
    CharKey,
    Command,
    CommandKey,
    EnterKey,
    IdleTick,
    QuitKey,
    ResizeKey,
)
from pintype.core.session import Cursor, SessionState
from pintype.core.settings import Settings
from pintype.core.words import WordStream


class FixedWords:
    """Vocabulary stand-in that always streams the same words in order."""

    name = "fixed"

    def __init__(self, words: List[str]) -> None:
        self._words = words
        self.streams = 0

    def stream(self) -> WordStream:
        self.streams += 1
        return WordStream(self._words)


class FakeRenderer:
    def __init__(self, size: Tuple[int, int] = (80, 24), grows_to=None) -> None:
        self._size = size
        self._grows_to = grows_to
        self.calls: List[tuple] = []

    def names(self) -> List[str]:
        return [call[0] for call in self.calls]

    def last(self, name: str) -> tuple:
        return [call for call in self.calls if call[0] == name][-1]

    def size(self):
        return self._size

    def resize(self, cols, rows):
        self.calls.append(("resize", cols, rows))
        if self._grows_to is not None:
            self._size = self._grows_to

    def draw_screen(self, lines, buffers):
        self.calls.append(("draw_screen", list(lines), list(buffers)))

    def draw_char(self, col, row, char, correct):
        self.calls.append(("draw_char", col, row, char, correct))

    def erase_char(self, col, row, expected):
        self.calls.append(("erase_char", col, row, expected))

    def move_cursor(self, col, row):
        self.calls.append(("move_cursor", col, row))

    def show_snapshot(self, snapshot):
        self.calls.append(("show_snapshot", snapshot))

    def show_message(self, text):
        self.calls.append(("show_message", text))

    def show_results(self, result, char_count):
        self.calls.append(("show_results", result, char_count))

    def show_too_small(self, minimum):
        self.calls.append(("show_too_small", minimum))

    def flush(self):
        self.calls.append(("flush",))


class FakeAudio:
    def __init__(self) -> None:
        self.plays = 0

    def play(self) -> None:
        self.plays += 1


@pytest.fixture()
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture()
def audio() -> FakeAudio:
    return FakeAudio()


@pytest.fixture()
def controller(renderer, audio, evaluator) -> SessionController:
    c = SessionController(FixedWords(["ab", "cd"]), renderer, audio=audio, evaluator=evaluator)
    c.start()
    return c


def _type(controller: SessionController, text: str) -> None:
    for c in text:
        controller.handle(CharKey(c))


# ---------------------------------------------------------------------------
# Start-up
# ---------------------------------------------------------------------------

class TestStart:
    def test_draws_first_page(self, controller, renderer):
        _, lines, buffers = renderer.last("draw_screen")
        assert [line.rendered for line in lines] == ["ab cd↵"]
        assert buffers == [""]
        anchor = lines[0].anchor
        assert renderer.last("move_cursor") == ("move_cursor", anchor.col, anchor.row)

    def test_too_small_raises(self, evaluator):
        renderer = FakeRenderer(size=(30, 5))
        c = SessionController(FixedWords(["ab"]), renderer, evaluator=evaluator)
        with pytest.raises(ViewportTooSmall):
            c.start()
        assert renderer.calls[0] == ("resize", 45, 6)

    def test_resize_at_start_recovers(self, evaluator):
        renderer = FakeRenderer(size=(30, 5), grows_to=(45, 6))
        c = SessionController(FixedWords(["ab"]), renderer, evaluator=evaluator)
        c.start()
        assert "draw_screen" in renderer.names()

    def test_custom_minimum(self, evaluator):
        renderer = FakeRenderer(size=(60, 10))
        settings = Settings(min_cols=100)
        c = SessionController(FixedWords(["ab"]), renderer, evaluator=evaluator, settings=settings)
        with pytest.raises(ViewportTooSmall):
            c.start()


# ---------------------------------------------------------------------------
# Typing
# ---------------------------------------------------------------------------

class TestTyping:
    def test_feedback_and_snapshot(self, controller, renderer, audio):
        anchor = controller.session.current_line.anchor
        controller.handle(CharKey("a"))
        controller.handle(CharKey("x"))
        draws = [c for c in renderer.calls if c[0] == "draw_char"]
        assert draws == [
            ("draw_char", anchor.col, anchor.row, "a", True),
            ("draw_char", anchor.col + 1, anchor.row, "x", False),
        ]
        assert renderer.last("show_snapshot")[1].accuracy == 0.5
        assert audio.plays == 2

    def test_backspace_restores_expected_char(self, controller, renderer):
        anchor = controller.session.current_line.anchor
        controller.handle(CharKey("x"))
        controller.handle(BackspaceKey())
        assert renderer.last("erase_char") == ("erase_char", anchor.col, anchor.row, "a")
        assert controller.session.cursor == Cursor(0, 0)

    def test_input_method_error_is_shown(self, controller, renderer, evaluator):
        assert controller.handle(CharKey("中")) is True
        assert "input method" in renderer.last("show_message")[1]
        assert controller.session.state is SessionState.NOT_STARTED
        assert evaluator.total_chars_typed == 0

    def test_completion_shows_results(self, controller, renderer, clock):
        _type(controller, "ab cd")
        clock.advance(60)
        controller.handle(EnterKey())
        _, result, char_count = renderer.last("show_results")
        assert char_count == 6
        assert result.elapsed == 60
        assert result.accuracy == 1.0
        assert result.real_time_accuracy == 1.0
        assert result.wpm == pytest.approx(6 / 5)
        assert controller.session.is_complete

    def test_keys_ignored_after_completion(self, controller, renderer, audio):
        _type(controller, "ab cd")
        controller.handle(EnterKey())
        plays = audio.plays
        count = len(renderer.calls)
        controller.handle(CharKey("z"))
        assert audio.plays == plays
        assert "draw_char" not in renderer.names()[count:]

    def test_idle_tick_refreshes_snapshot(self, controller, renderer, clock):
        controller.handle(CharKey("a"))
        clock.advance(12)
        controller.handle(IdleTick())
        assert renderer.last("show_snapshot")[1].wpm == pytest.approx((1 / 5) / (12 / 60))

    def test_idle_tick_before_start_draws_nothing(self, controller, renderer):
        controller.handle(IdleTick())
        assert "show_snapshot" not in renderer.names()


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

class TestCommands:
    def test_quit(self, controller):
        assert controller.handle(QuitKey()) is False

    def test_restart_keeps_text(self, controller, renderer, evaluator):
        _type(controller, "ab")
        controller.handle(CommandKey(Command.RESTART))
        _, lines, buffers = renderer.last("draw_screen")
        assert [line.rendered for line in lines] == ["ab cd↵"]
        assert buffers == [""]
        assert evaluator.total_chars_typed == 0

    def test_new_text_reshuffles_when_exhausted(self, renderer, evaluator):
        words = FixedWords(["ab", "cd"])
        c = SessionController(words, renderer, evaluator=evaluator)
        c.start()
        _type(c, "a")
        c.handle(CommandKey(Command.NEW_TEXT))
        assert words.streams == 2
        assert evaluator.total_chars_typed == 0
        assert c.session.state is SessionState.NOT_STARTED

    def test_run_stops_on_quit(self, renderer, evaluator):
        c = SessionController(FixedWords(["ab"]), renderer, evaluator=evaluator)
        c.run(iter([CharKey("a"), QuitKey(), CharKey("b")]))
        assert c.session.buffers == ["a"]


# ---------------------------------------------------------------------------
# Resize
# ---------------------------------------------------------------------------

class TestResize:
    def test_recentres_and_replays_buffers(self, controller, renderer):
        _type(controller, "ab")
        renderer._size = (100, 30)
        controller.handle(ResizeKey())
        _, lines, buffers = renderer.last("draw_screen")
        assert lines[0].anchor.col == (100 - 6) // 2
        assert buffers == ["ab"]
        assert controller.session.cursor == Cursor(0, 2)

    def test_too_small_suspends_input(self, controller, renderer):
        renderer._size = (20, 4)
        controller.handle(ResizeKey())
        assert controller.suspended
        assert renderer.last("show_too_small") == ("show_too_small", (45, 6))
        controller.handle(CharKey("a"))
        assert controller.session.buffers == [""]
        renderer._size = (80, 24)
        controller.handle(ResizeKey())
        assert not controller.suspended

    def test_shrink_that_still_fits_recentres(self, controller, renderer):
        renderer._size = (60, 20)
        controller.handle(ResizeKey())
        assert not controller.suspended
        _, lines, _ = renderer.last("draw_screen")
        assert lines[0].anchor.col == (60 - 6) // 2

    def test_shrink_below_packed_width_suspends(self, evaluator):
        renderer = FakeRenderer(size=(120, 48))
        words = FixedWords(["abcdefgh"] * 200)
        c = SessionController(words, renderer, evaluator=evaluator)
        c.start()
        widest = max(line.length for line in c.session.lines)
        assert widest > 48

        renderer._size = (50, 12)
        c.handle(ResizeKey())
        assert c.suspended
        needed = renderer.last("show_too_small")[1]
        assert needed[0] >= widest + 2
        c.handle(CharKey("a"))
        assert c.session.buffers[0] == ""

        renderer._size = (120, 48)
        c.handle(ResizeKey())
        assert not c.suspended
        for line in c.session.lines:
            assert line.anchor.col + line.length <= 119
            assert line.anchor.row < 47


class TestPageSize:
    def test_fits_lines_inside_border_and_above_footer(self, controller):
        lines = controller.session.lines
        assert page_size(lines) == (6 + 2, lines[-1].anchor.row + 2)


# ---------------------------------------------------------------------------
# Audio cue
# ---------------------------------------------------------------------------

class TestAudioCue:
    def test_rejected_and_noop_keys_are_silent(self, controller, audio):
        controller.handle(CharKey("好"))
        controller.handle(BackspaceKey())
        assert audio.plays == 0

    def test_full_line_is_silent(self, controller, audio):
        _type(controller, "ab cd!")
        plays = audio.plays
        controller.handle(CharKey("z"))
        controller.handle(EnterKey())
        assert audio.plays == plays == 6

    def test_accepted_keys_click(self, controller, audio):
        controller.handle(CharKey("a"))
        controller.handle(BackspaceKey())
        assert audio.plays == 2

    def test_backspace_to_previous_line_clicks(self, renderer, audio, evaluator):
        words = FixedWords(["abcdefghijkl", "mnopqrstuvwx", "yz"])
        renderer._size = (45, 24)
        c = SessionController(words, renderer, audio=audio, evaluator=evaluator)
        c.start()
        first = c.session.lines[0].rendered
        assert first == "abcdefghijkl mnopqrstuvwx↵"
        _type(c, first[:-1])
        c.handle(EnterKey())
        assert c.session.cursor == Cursor(1, 0)
        plays = audio.plays
        c.handle(BackspaceKey())
        assert c.session.cursor == Cursor(0, len(first))
        assert audio.plays == plays + 1
