from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional

from pintype.core.errors import DivisionUndefined


@dataclass(frozen=True)
class Snapshot:
    """Live view shown while typing; None where a value is undefined."""

    accuracy: Optional[float]
    wpm: Optional[float]


@dataclass(frozen=True)
class FinalResult:
    elapsed: float
    real_time_accuracy: Optional[float]
    accuracy: Optional[float]
    wpm: Optional[float]


def _or_none(metric: Callable[[], float]) -> Optional[float]:
    try:
        return metric()
    except DivisionUndefined:
        return None


class Evaluator:
    """Keystroke counters and the speed/accuracy formulas built on them.

    Two families of counters are kept:
      * **lifetime** – ``total_chars_typed`` / ``total_char_errors`` count
        every keystroke ever made and are never decremented by undo.
      * **current** – ``final_chars_typed_correctly`` /
        ``final_uncorrected_errors`` describe what is on screen right now
        and are reversed by backspace.

    WPM uses five characters per word and subtracts one word per error,
    floored at 0.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._total_chars_typed = 0
        self._total_char_errors = 0
        self._final_chars_typed_correctly = 0
        self._final_uncorrected_errors = 0
        self._start_at: Optional[float] = None
        self._stop_at: Optional[float] = None

    @property
    def total_chars_typed(self) -> int:
        """Every keystroke since the last reset."""
        return self._total_chars_typed

    @property
    def total_char_errors(self) -> int:
        """Every wrong keystroke since the last reset, corrected or not."""
        return self._total_char_errors

    @property
    def final_chars_typed_correctly(self) -> int:
        """Correct characters currently on screen."""
        return self._final_chars_typed_correctly

    @property
    def final_uncorrected_errors(self) -> int:
        """Wrong characters currently on screen."""
        return self._final_uncorrected_errors

    @property
    def committed(self) -> int:
        """Characters currently on screen, correct or not."""
        return self._final_chars_typed_correctly + self._final_uncorrected_errors

    # -- events ----------------------------------------------------------

    def record(self, correct: bool) -> None:
        """Count one keystroke, correct or not."""
        self._total_chars_typed += 1
        if correct:
            self._final_chars_typed_correctly += 1
        else:
            self._total_char_errors += 1
            self._final_uncorrected_errors += 1

    def undo(self, was_correct: bool) -> None:
        """Reverse the current counters for one erased keystroke."""
        if was_correct:
            self._final_chars_typed_correctly -= 1
        else:
            self._final_uncorrected_errors -= 1

    def reset(self) -> None:
        """Clear all four counters. The clock is left alone."""
        self._total_chars_typed = 0
        self._total_char_errors = 0
        self._final_chars_typed_correctly = 0
        self._final_uncorrected_errors = 0

    # -- clock -----------------------------------------------------------

    def start(self) -> None:
        """Start the session clock."""
        self._start_at = self._clock()
        self._stop_at = None

    def stop(self) -> None:
        """Freeze the clock; later calls keep the first stop time."""
        if self._start_at is not None and self._stop_at is None:
            self._stop_at = self._clock()

    def elapsed(self) -> float:
        """Seconds since ``start``; frozen once stopped, 0 before starting."""
        if self._start_at is None:
            return 0.0
        end = self._stop_at if self._stop_at is not None else self._clock()
        return end - self._start_at

    # -- metrics ---------------------------------------------------------

    def accuracy(self) -> float:
        """Lifetime share of keystrokes that were correct, corrected mistakes included."""
        if self._total_chars_typed == 0:
            raise DivisionUndefined("accuracy of zero keystrokes")
        return (self._total_chars_typed - self._total_char_errors) / self._total_chars_typed

    def real_time_accuracy(self) -> float:
        """Share of the characters now on screen that are correct."""
        if self.committed == 0:
            raise DivisionUndefined("accuracy of zero committed characters")
        return self._final_chars_typed_correctly / self.committed

    def wpm(self, elapsed: float) -> float:
        """Lifetime net words per minute over ``elapsed`` seconds."""
        return _per_minute(self._total_chars_typed / 5.0 - self._total_char_errors, elapsed)

    def real_time_wpm(self, elapsed: float) -> float:
        """Net words per minute of what is on screen now."""
        return _per_minute(
            self._final_chars_typed_correctly / 5.0 - self._final_uncorrected_errors, elapsed
        )

    def snapshot(self, elapsed: float) -> Snapshot:
        """Live accuracy and speed for the metrics line."""
        return Snapshot(
            accuracy=_or_none(self.real_time_accuracy),
            wpm=_or_none(lambda: self.real_time_wpm(elapsed)),
        )

    def finalize(self, elapsed: float) -> FinalResult:
        """Results shown once the last line is finished."""
        return FinalResult(
            elapsed=elapsed,
            real_time_accuracy=_or_none(self.real_time_accuracy),
            accuracy=_or_none(self.accuracy),
            wpm=_or_none(lambda: self.wpm(elapsed)),
        )


def _per_minute(words: float, elapsed: float) -> float:
    if elapsed <= 0:
        raise DivisionUndefined("speed over zero elapsed time")
    return max(0.0, words) / (elapsed / 60.0)
