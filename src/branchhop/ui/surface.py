"""Curses-backed display surface."""

from __future__ import annotations

import curses
import logging as py_logging
import os
from collections.abc import Iterable
from typing import Protocol

from branchhop.errors import BranchHopError, ExitCode
from branchhop.ui.events import (
    KEY_BACKSPACE,
    KEY_DOWN,
    KEY_ENTER,
    KEY_ESCAPE,
    KEY_UP,
    InputEvent,
    KeyPress,
    Resize,
)
from branchhop.ui.render import Color, DrawInstruction, Style

logger = py_logging.getLogger(__name__)

ESCAPE_DELAY_MS = "25"

_NAMED_CURSES_KEYS = {
    curses.KEY_UP: KEY_UP,
    curses.KEY_DOWN: KEY_DOWN,
    curses.KEY_ENTER: KEY_ENTER,
    curses.KEY_BACKSPACE: KEY_BACKSPACE,
}
_NAMED_CHARS = {
    "\n": KEY_ENTER,
    "\r": KEY_ENTER,
    "\x7f": KEY_BACKSPACE,
    "\x08": KEY_BACKSPACE,
    "\x1b": KEY_ESCAPE,
}
_COLOR_PAIRS = {
    Color.GREEN: (1, curses.COLOR_GREEN),
    Color.GREY: (2, curses.COLOR_WHITE),
    Color.RED: (3, curses.COLOR_RED),
    Color.OUTLINE: (4, curses.COLOR_GREEN),
}


class DisplaySurface(Protocol):
    def size(self) -> tuple[int, int]: ...

    def clear(self) -> None: ...

    def draw(self, instructions: Iterable[DrawInstruction]) -> None: ...

    def read_event(self, timeout_seconds: float) -> InputEvent | None: ...


def translate_key(key: int | str, size: tuple[int, int] | None = None) -> InputEvent | None:
    """Map a raw ``get_wch`` result onto an input event.

    ``size`` is the (width, height) reported after a resize key.
    """
    if isinstance(key, int):
        if key == curses.KEY_RESIZE:
            width, height = size or (0, 0)
            return Resize(width=width, height=height)
        named = _NAMED_CURSES_KEYS.get(key)
        return KeyPress(named) if named else None
    if key in _NAMED_CHARS:
        return KeyPress(_NAMED_CHARS[key])
    code = ord(key)
    if 1 <= code <= 26:
        return KeyPress(chr(code + ord("a") - 1), ctrl=True)
    if key.isprintable():
        return KeyPress(key)
    return None


def style_attributes(style: Style, colors: dict[Color, int]) -> int:
    attr = curses.A_NORMAL
    if style.fg is not None:
        attr |= colors.get(style.fg, curses.A_NORMAL)
    if style.bold:
        attr |= curses.A_BOLD
    if style.dim:
        attr |= curses.A_DIM
    if style.strike:
        # curses exposes no strikethrough attribute.
        attr |= curses.A_UNDERLINE
    return attr


class CursesSurface:
    """Owns the terminal while open: raw mode, hidden cursor, no echo."""

    def __init__(self) -> None:
        self._screen: curses.window | None = None
        self._colors: dict[Color, int] = {}

    def open(self) -> CursesSurface:
        os.environ.setdefault("ESCDELAY", ESCAPE_DELAY_MS)
        try:
            screen = curses.initscr()
        except curses.error as exc:
            raise BranchHopError(
                "Terminal does not support interactive mode.",
                code=ExitCode.TERMINAL_ERROR,
                hint="Run branchhop from an interactive terminal.",
            ) from exc
        curses.noecho()
        curses.raw()
        screen.keypad(True)
        try:
            curses.curs_set(0)
        except curses.error:
            pass
        self._screen = screen
        self._colors = self._init_colors()
        logger.debug("Opened curses surface size=%s", self.size())
        return self

    def close(self) -> None:
        if self._screen is None:
            return
        self._screen.keypad(False)
        try:
            curses.curs_set(1)
        except curses.error:
            pass
        curses.noraw()
        curses.echo()
        curses.endwin()
        self._screen = None

    def __enter__(self) -> CursesSurface:
        return self.open()

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _init_colors(self) -> dict[Color, int]:
        if not curses.has_colors():
            return {}
        curses.start_color()
        curses.use_default_colors()
        colors: dict[Color, int] = {}
        for color, (pair, foreground) in _COLOR_PAIRS.items():
            curses.init_pair(pair, foreground, -1)
            colors[color] = curses.color_pair(pair)
        return colors

    @property
    def screen(self) -> curses.window:
        if self._screen is None:
            raise BranchHopError("Display surface is not open.", code=ExitCode.TERMINAL_ERROR)
        return self._screen

    def size(self) -> tuple[int, int]:
        height, width = self.screen.getmaxyx()
        return width, height

    def clear(self) -> None:
        self.screen.erase()

    def _write(self, instruction: DrawInstruction) -> None:
        height, width = self.screen.getmaxyx()
        x, y = instruction.x, instruction.y
        if y < 0 or y >= height or x < 0 or x >= width:
            return
        text = instruction.text[: width - x - 1] if y == height - 1 else instruction.text[: width - x]
        if not text:
            return
        try:
            self.screen.addstr(y, x, text, style_attributes(instruction.style, self._colors))
        except curses.error:
            return

    def draw(self, instructions: Iterable[DrawInstruction]) -> None:
        for instruction in instructions:
            self._write(instruction)
        self.screen.refresh()

    def read_event(self, timeout_seconds: float) -> InputEvent | None:
        self.screen.timeout(int(timeout_seconds * 1000))
        try:
            key = self.screen.get_wch()
        except curses.error:
            return None
        if key == curses.KEY_RESIZE:
            curses.update_lines_cols()
            return translate_key(key, self.size())
        return translate_key(key)
