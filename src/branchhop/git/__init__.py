"""Git repository access and branch status resolution."""

from .repository import BranchRepository, GitRepository
from .resolver import resolve, resolve_branch

__all__ = [
    "BranchRepository",
    "GitRepository",
    "resolve",
    "resolve_branch",
]
