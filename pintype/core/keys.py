"""Key events delivered to the session controller."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class Command(Enum):
    NEW_TEXT = "new_text"
    RESTART = "restart"


@dataclass(frozen=True)
class CharKey:
    char: str


@dataclass(frozen=True)
class BackspaceKey:
    pass


@dataclass(frozen=True)
class EnterKey:
    pass


@dataclass(frozen=True)
class CommandKey:
    command: Command


@dataclass(frozen=True)
class QuitKey:
    pass


@dataclass(frozen=True)
class ResizeKey:
    pass


@dataclass(frozen=True)
class IdleTick:
    """No key arrived within the tick interval."""


KeyEvent = Union[CharKey, BackspaceKey, EnterKey, CommandKey, QuitKey, ResizeKey, IdleTick]
