"""Branch listing domain models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

SHORT_ID_LENGTH = 7


class BranchScope(str, Enum):
    LOCAL = "local"
    REMOTE = "remote"
    LOCAL_AND_REMOTE = "local-and-remote"

    @property
    def label(self) -> str:
        return {
            BranchScope.LOCAL: "local",
            BranchScope.REMOTE: "remote",
            BranchScope.LOCAL_AND_REMOTE: "local+remote",
        }[self]


_SCOPE_CYCLE = {
    BranchScope.LOCAL: BranchScope.LOCAL_AND_REMOTE,
    BranchScope.LOCAL_AND_REMOTE: BranchScope.REMOTE,
    BranchScope.REMOTE: BranchScope.LOCAL,
}


def next_scope(scope: BranchScope) -> BranchScope:
    return _SCOPE_CYCLE[scope]


@dataclass(frozen=True)
class RawBranchRef:
    """A branch ref as enumerated by the repository, before any lookups."""

    name: str
    refname: str
    is_remote: bool = False
    is_head: bool = False


@dataclass(frozen=True)
class BranchStatus:
    name: str
    commit_id: str = ""
    summary: str = ""
    is_current: bool = False
    has_upstream: bool = False
    is_gone: bool = False
    is_remote: bool = False

    def short_id(self) -> str:
        return self.commit_id[:SHORT_ID_LENGTH]
