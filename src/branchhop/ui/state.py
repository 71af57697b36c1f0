"""Selection and filter state for the branch list."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from branchhop.git.repository import BranchRepository
from branchhop.git.resolver import resolve
from branchhop.models import BranchScope, BranchStatus, next_scope


class Direction(str, Enum):
    NEXT = "next"
    PREVIOUS = "previous"


def matches_search(branch: BranchStatus, search: str) -> bool:
    if not search:
        return True
    return search.lower() in branch.name.lower()


def filter_branches(items: Iterable[BranchStatus], search: str) -> list[BranchStatus]:
    return [item for item in items if matches_search(item, search)]


@dataclass
class SelectionState:
    branch_scope: BranchScope = BranchScope.LOCAL
    search_string: str = ""
    selected_index: int = 0
    all_items: list[BranchStatus] = field(default_factory=list)
    visible_items: list[BranchStatus] = field(default_factory=list)
    status_message: str = ""
    renders: int = 0

    def refresh(self, repository: BranchRepository) -> None:
        self.all_items = resolve(repository, self.branch_scope)
        self.apply_filter()

    def apply_filter(self) -> None:
        self.visible_items = filter_branches(self.all_items, self.search_string)
        self.clamp_selection()

    def clamp_selection(self) -> None:
        if not self.visible_items:
            self.selected_index = 0
            return
        last = len(self.visible_items) - 1
        if self.selected_index > last:
            self.selected_index = last
        elif self.selected_index < 0:
            self.selected_index = 0

    def move_selection(self, direction: Direction) -> None:
        count = len(self.visible_items)
        if count == 0:
            return
        step = 1 if direction == Direction.NEXT else -1
        self.selected_index = (self.selected_index + step) % count

    def cycle_scope(self) -> BranchScope:
        self.branch_scope = next_scope(self.branch_scope)
        return self.branch_scope

    def selected_item(self) -> BranchStatus | None:
        if not self.visible_items:
            return None
        return self.visible_items[self.selected_index]
