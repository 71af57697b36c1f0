"""Projection of the selection state onto positioned, styled text."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from branchhop.config import DEFAULT_BRANCH_NAME_LENGTH, DEFAULT_SUMMARY_LENGTH
from branchhop.models import SHORT_ID_LENGTH, BranchStatus
from branchhop.ui.state import SelectionState

PADDING = 2
ELLIPSIS = "..."
NO_BRANCHES_TEXT = "> No branches found"
NO_UPSTREAM_TEXT = " [no upstream]"
GONE_TEXT = " [gone]"
DEBUG_BUBBLE_WIDTH = 24


class Color(str, Enum):
    GREEN = "green"
    GREY = "grey"
    RED = "red"
    OUTLINE = "outline"


@dataclass(frozen=True)
class Style:
    fg: Color | None = None
    bold: bool = False
    dim: bool = False
    strike: bool = False


PLAIN = Style()
MUTED = Style(fg=Color.GREY, dim=True)
ERROR = Style(fg=Color.RED, bold=True)
OUTLINE = Style(fg=Color.OUTLINE)


@dataclass(frozen=True)
class DrawInstruction:
    x: int
    y: int
    text: str
    style: Style = PLAIN


@dataclass(frozen=True)
class RenderOptions:
    summary_length: int = DEFAULT_SUMMARY_LENGTH
    branch_name_length: int = DEFAULT_BRANCH_NAME_LENGTH
    searching: bool = False
    debug: bool = False


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + ELLIPSIS


def name_column_width(items: list[BranchStatus], limit: int) -> int:
    width = 0
    for item in items:
        if len(item.name) > limit:
            return limit + len(ELLIPSIS)
        width = max(width, len(item.name))
    return width


def quoted_summary(summary: str, limit: int) -> str:
    return f"'{truncate(summary, limit)}'"


def row_slots(height: int) -> int:
    """Number of rows available to the branch list, at least one."""
    return max(height - PADDING * 2, 1)


def list_bottom(height: int) -> int:
    return height - 1 - PADDING


def scroll_offset(selected_index: int, shown: int) -> int:
    """First drawn index, shifted just enough to keep the selection on screen."""
    return max(selected_index - shown + 1, 0)


def _branch_row(
    item: BranchStatus,
    *,
    y: int,
    selected: bool,
    name_width: int,
    options: RenderOptions,
) -> list[DrawInstruction]:
    marker = ">" if selected else " "
    name = truncate(item.name, options.branch_name_length)
    summary = quoted_summary(item.summary, options.summary_length)
    summary_width = options.summary_length + len(ELLIPSIS) + 3
    text = f"{marker} {item.short_id():<{SHORT_ID_LENGTH}} {name:<{name_width}}  {summary:<{summary_width}}"
    style = Style(
        fg=Color.GREEN if item.is_current else None,
        bold=selected,
        strike=item.is_gone,
    )

    row = [DrawInstruction(PADDING, y, text, style)]
    cursor_x = PADDING + len(text)
    if not item.has_upstream:
        row.append(DrawInstruction(cursor_x, y, NO_UPSTREAM_TEXT, MUTED))
        cursor_x += len(NO_UPSTREAM_TEXT)
    if item.is_gone:
        row.append(DrawInstruction(cursor_x, y, GONE_TEXT, MUTED))
    return row


def project_branches(
    state: SelectionState,
    width: int,
    height: int,
    options: RenderOptions,
) -> list[DrawInstruction]:
    """Lay out the branch list bottom-up, scrolled so the selection stays drawn."""
    del width
    items = state.visible_items
    bottom = list_bottom(height)
    if not items:
        return [DrawInstruction(PADDING, bottom, NO_BRANCHES_TEXT, MUTED)]

    slots = row_slots(height)
    shown = len(items) if len(items) <= slots else slots - 1
    offset = scroll_offset(state.selected_index, shown)
    name_width = name_column_width(items, options.branch_name_length)

    instructions: list[DrawInstruction] = []
    for index, item in enumerate(items[offset : offset + shown], start=offset):
        instructions.extend(
            _branch_row(
                item,
                y=bottom - (index - offset),
                selected=index == state.selected_index,
                name_width=name_width,
                options=options,
            )
        )
    if shown < len(items):
        instructions.append(
            DrawInstruction(
                PADDING + 2,
                bottom - shown,
                f"... {len(items) - shown} truncated",
                MUTED,
            )
        )
    return instructions


def project_search(state: SelectionState, height: int, options: RenderOptions) -> list[DrawInstruction]:
    if not options.searching and not state.search_string:
        return []
    return [DrawInstruction(PADDING, height - PADDING, f"/ {state.search_string}")]


def project_status(state: SelectionState) -> list[DrawInstruction]:
    if not state.status_message:
        return []
    return [DrawInstruction(PADDING, 0, " ".join(state.status_message.split()), ERROR)]


def text_bubble(x: int, y: int, lines: list[str]) -> list[DrawInstruction]:
    """Box ``lines`` with a heavy outline whose top-left corner is at (x, y)."""
    inner = max((len(line) for line in lines), default=0) + 1
    bottom = y + len(lines) + 1
    bar = "━" * inner
    instructions = [
        DrawInstruction(x, y, f"┏{bar}┓", OUTLINE),
        DrawInstruction(x, bottom, f"┗{bar}┛", OUTLINE),
    ]
    for offset, line in enumerate(lines, start=1):
        instructions.append(DrawInstruction(x, y + offset, "┃", OUTLINE))
        instructions.append(DrawInstruction(x + 1, y + offset, line, Style(bold=True)))
        instructions.append(DrawInstruction(x + inner + 1, y + offset, "┃", OUTLINE))
    return instructions


def project_debug(
    state: SelectionState,
    width: int,
    height: int,
    options: RenderOptions,
) -> list[DrawInstruction]:
    lines = [
        f"Renders:    {state.renders}",
        f"Size:       ({width}, {height})",
        f"Sum len:    {options.summary_length}",
        f"Branch len: {options.branch_name_length}",
        f"Scope:      {state.branch_scope.label}",
    ]
    x = max(width - DEBUG_BUBBLE_WIDTH - PADDING, 0)
    y = max(height - 1 - PADDING - len(lines) - 1, 0)
    return text_bubble(x, y, lines)


def project(
    state: SelectionState,
    width: int,
    height: int,
    options: RenderOptions | None = None,
) -> list[DrawInstruction]:
    opts = options or RenderOptions()
    instructions = project_branches(state, width, height, opts)
    instructions.extend(project_search(state, height, opts))
    instructions.extend(project_status(state))
    if opts.debug:
        instructions.extend(project_debug(state, width, height, opts))
    return instructions
