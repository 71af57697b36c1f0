"""Browsing/searching input state machine."""

from __future__ import annotations

import logging as py_logging
from dataclasses import dataclass
from enum import Enum

from branchhop.errors import BranchHopError, user_facing_error
from branchhop.git.repository import BranchRepository
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
from branchhop.ui.state import Direction, SelectionState

logger = py_logging.getLogger(__name__)

_MOVE_KEYS = {
    "k": Direction.NEXT,
    KEY_UP: Direction.NEXT,
    "j": Direction.PREVIOUS,
    KEY_DOWN: Direction.PREVIOUS,
}
_CHECKOUT_KEYS = frozenset({"l", KEY_ENTER})
_QUIT_KEYS = frozenset({"q", KEY_ESCAPE})
_SEARCH_KEY = "/"
_SCOPE_KEY = "r"


class Mode(str, Enum):
    BROWSING = "browsing"
    SEARCHING = "searching"


@dataclass(frozen=True)
class Outcome:
    redraw: bool = False
    quit: bool = False


_IDLE = Outcome()
_REDRAW = Outcome(redraw=True)
_QUIT = Outcome(quit=True)


def _is_interrupt(event: KeyPress) -> bool:
    return event.ctrl and event.key.lower() == "c"


class InputController:
    """Applies input events to a ``SelectionState``.

    Movement and actions are only recognized while browsing; while searching,
    every printable key edits the search string.
    """

    def __init__(
        self,
        state: SelectionState,
        repository: BranchRepository,
        *,
        redraw_on_timeout: bool = False,
    ) -> None:
        self.state = state
        self.repository = repository
        self.mode = Mode.BROWSING
        self.redraw_on_timeout = redraw_on_timeout

    @property
    def searching(self) -> bool:
        return self.mode == Mode.SEARCHING

    def handle(self, event: InputEvent | None) -> Outcome:
        if event is None:
            return _REDRAW if self.redraw_on_timeout else _IDLE
        if isinstance(event, Resize):
            return _REDRAW
        if _is_interrupt(event):
            return _QUIT
        if self.searching:
            return self._handle_search_key(event)
        return self._handle_browse_key(event)

    def _handle_search_key(self, event: KeyPress) -> Outcome:
        if event.key == KEY_ESCAPE:
            self.state.search_string = ""
            self.mode = Mode.BROWSING
        elif event.key == KEY_ENTER:
            self.mode = Mode.BROWSING
        elif event.key == KEY_BACKSPACE:
            self.state.search_string = self.state.search_string[:-1]
        elif event.is_printable:
            self.state.search_string += event.key
        else:
            return _IDLE
        self.state.apply_filter()
        return _REDRAW

    def _handle_browse_key(self, event: KeyPress) -> Outcome:
        if event.ctrl:
            return _IDLE
        key = event.key
        if key in _QUIT_KEYS:
            return _QUIT
        if key in _MOVE_KEYS:
            if not self.state.visible_items:
                return _IDLE
            self.state.move_selection(_MOVE_KEYS[key])
            return _REDRAW
        if key in _CHECKOUT_KEYS:
            return self._checkout_selected()
        if key == _SEARCH_KEY:
            self.mode = Mode.SEARCHING
            return _REDRAW
        if key == _SCOPE_KEY:
            scope = self.state.cycle_scope()
            logger.debug("Branch scope changed scope=%s", scope.value)
            self.state.refresh(self.repository)
            return _REDRAW
        return _IDLE

    def _checkout_selected(self) -> Outcome:
        item = self.state.selected_item()
        if item is None:
            return _IDLE
        try:
            self.repository.checkout(item.name, remote=item.is_remote)
        except BranchHopError as exc:
            logger.warning("Checkout failed branch=%s error=%s", item.name, exc)
            self.state.status_message = user_facing_error(exc.message, hint=exc.hint)
        else:
            self.state.status_message = ""
        return _REDRAW
