from __future__ import annotations

from typing import List

import pytest

from pintype.core.evaluator import Evaluator
from pintype.core.layout import LineLayout, place
from pintype.core.session import TypingSession


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 100.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def evaluator(clock: FakeClock) -> Evaluator:
    return Evaluator(clock=clock)


def make_lines(words: List[str], width: int = 40, cols: int = 80):
    return place(LineLayout(words).pack(width, max_lines=10), cols, top=2)


@pytest.fixture()
def session(evaluator: Evaluator) -> TypingSession:
    """Two lines: "ab↵" and "cd↵"."""
    return TypingSession(make_lines(["ab", "cd"], width=6), evaluator)
