from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import pytest

from branchhop.errors import BranchHopError, GitCommandError, RefNotFoundError
from branchhop.models import BranchScope, RawBranchRef


@pytest.hookimpl(trylast=True)
def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    del config
    for item in items:
        path = Path(str(getattr(item, "path", item.fspath)))

        if "integration" in path.parts:
            item.add_marker(pytest.mark.integration)

        if "property" in path.parts:
            item.add_marker(pytest.mark.property)


@dataclass
class FakeRepository:
    """In-memory stand-in for the git repository collaborator."""

    local: list[RawBranchRef] = field(default_factory=list)
    remote: list[RawBranchRef] = field(default_factory=list)
    commits: dict[str, tuple[str, str]] = field(default_factory=dict)
    tracking: dict[str, tuple[str, str]] = field(default_factory=dict)
    upstreams: dict[str, str] = field(default_factory=dict)
    list_error: Exception | None = None
    checkout_error: BranchHopError | None = None
    checkouts: list[tuple[str, bool]] = field(default_factory=list)
    list_calls: list[BranchScope] = field(default_factory=list)

    def add_branch(
        self,
        name: str,
        *,
        remote: bool = False,
        head: bool = False,
        commit: tuple[str, str] | None = None,
        tracking: bool = False,
        upstream: str = "none",
    ) -> RawBranchRef:
        namespace = "refs/remotes/" if remote else "refs/heads/"
        ref = RawBranchRef(name=name, refname=f"{namespace}{name}", is_remote=remote, is_head=head)
        (self.remote if remote else self.local).append(ref)
        if commit is not None:
            self.commits[ref.refname] = commit
        if tracking:
            self.tracking[name] = ("origin", f"refs/heads/{name}")
        self.upstreams[name] = upstream
        return ref

    def list_branches(self, scope: BranchScope) -> list[RawBranchRef]:
        self.list_calls.append(scope)
        if self.list_error is not None:
            raise self.list_error
        if scope == BranchScope.LOCAL:
            return list(self.local)
        if scope == BranchScope.REMOTE:
            return list(self.remote)
        return [*self.local, *self.remote]

    def resolve_commit(self, ref: RawBranchRef) -> tuple[str, str]:
        try:
            return self.commits[ref.refname]
        except KeyError:
            raise GitCommandError(f"bad object {ref.refname}") from None

    def get_tracking_config(self, branch_name: str) -> tuple[str, str] | None:
        return self.tracking.get(branch_name)

    def resolve_upstream(self, branch_name: str) -> str:
        state = self.upstreams.get(branch_name, "none")
        if state == "ok":
            return f"refs/remotes/origin/{branch_name}"
        if state == "gone":
            raise RefNotFoundError(f"Upstream ref not found: refs/remotes/origin/{branch_name}")
        if state == "error":
            raise GitCommandError("config is corrupt")
        raise GitCommandError(f"No upstream configured for {branch_name}")

    def checkout(self, branch_name: str, *, remote: bool = False) -> None:
        if self.checkout_error is not None:
            raise self.checkout_error
        self.checkouts.append((branch_name, remote))
        target = branch_name.split("/", 1)[1] if remote else branch_name
        self.local = [
            RawBranchRef(name=ref.name, refname=ref.refname, is_head=ref.name == target)
            for ref in self.local
        ]


@pytest.fixture
def fake_repo() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def sample_repo(fake_repo: FakeRepository) -> FakeRepository:
    fake_repo.add_branch(
        "main",
        head=True,
        commit=("a" * 40, "Initial commit"),
        tracking=True,
        upstream="ok",
    )
    fake_repo.add_branch("feature-x", commit=("b" * 40, "Add feature x"))
    fake_repo.add_branch(
        "old-feature",
        commit=("c" * 40, "Old work"),
        tracking=True,
        upstream="gone",
    )
    fake_repo.add_branch("origin/main", remote=True, commit=("a" * 40, "Initial commit"))
    return fake_repo
