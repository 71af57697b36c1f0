"""Input events delivered by the display surface."""

from __future__ import annotations

from dataclasses import dataclass

KEY_UP = "up"
KEY_DOWN = "down"
KEY_ENTER = "enter"
KEY_BACKSPACE = "backspace"
KEY_ESCAPE = "esc"


@dataclass(frozen=True)
class KeyPress:
    key: str
    ctrl: bool = False

    @property
    def is_printable(self) -> bool:
        return not self.ctrl and len(self.key) == 1 and self.key.isprintable()


@dataclass(frozen=True)
class Resize:
    width: int
    height: int


InputEvent = KeyPress | Resize
