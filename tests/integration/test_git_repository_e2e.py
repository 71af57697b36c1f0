from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path

import pytest

from branchhop.errors import ExitCode, GitCommandError
from branchhop.git.repository import GitRepository
from branchhop.git.resolver import resolve
from branchhop.models import BranchScope

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")

_IDENTITY = ["-c", "user.name=Branch Hop", "-c", "user.email=hop@example.invalid", "-c", "commit.gpgsign=false"]


def _git(repo: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", "-C", str(repo), *_IDENTITY, *args],
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def _git_raw(repo: Path, *args: bytes) -> None:
    identity = [os.fsencode(arg) for arg in _IDENTITY]
    subprocess.run([b"git", b"-C", os.fsencode(repo), *identity, *args], capture_output=True, check=True)


@pytest.fixture
def work_tree(tmp_path: Path) -> Path:
    repo = tmp_path / "work"
    repo.mkdir()
    _git(repo, "init", "-q")
    _git(repo, "symbolic-ref", "HEAD", "refs/heads/main")
    _git(repo, "commit", "-q", "--allow-empty", "-m", "Initial commit")
    _git(repo, "remote", "add", "origin", str(tmp_path / "origin.git"))

    head = _git(repo, "rev-parse", "HEAD")
    _git(repo, "update-ref", "refs/remotes/origin/main", head)
    _git(repo, "update-ref", "refs/remotes/origin/feature-y", head)
    _git(repo, "symbolic-ref", "refs/remotes/origin/HEAD", "refs/remotes/origin/main")
    _git(repo, "branch", "--set-upstream-to=origin/main", "main")

    _git(repo, "branch", "feature-x")
    _git(repo, "branch", "old-feature")
    _git(repo, "config", "branch.old-feature.remote", "origin")
    _git(repo, "config", "branch.old-feature.merge", "refs/heads/old-feature")
    return repo


def test_resolves_head_upstream_and_gone_state(work_tree: Path) -> None:
    repo = GitRepository.open(work_tree)

    items = {item.name: item for item in resolve(repo, BranchScope.LOCAL)}

    assert sorted(items) == ["feature-x", "main", "old-feature"]
    main = items["main"]
    assert main.is_current is True
    assert main.has_upstream is True
    assert main.is_gone is False
    assert main.summary == "Initial commit"
    assert len(main.commit_id) == 40
    assert items["feature-x"].has_upstream is False
    assert items["feature-x"].is_gone is False
    assert items["old-feature"].is_gone is True
    assert items["old-feature"].has_upstream is False


def test_remote_scope_skips_symbolic_head(work_tree: Path) -> None:
    repo = GitRepository.open(work_tree)

    names = [item.name for item in resolve(repo, BranchScope.REMOTE)]

    assert names == ["origin/feature-y", "origin/main"]


def test_checkout_switches_current_branch(work_tree: Path) -> None:
    repo = GitRepository.open(work_tree)

    repo.checkout("feature-x")

    assert _git(work_tree, "symbolic-ref", "--short", "HEAD") == "feature-x"


def test_checkout_of_remote_branch_creates_tracking_branch(work_tree: Path) -> None:
    repo = GitRepository.open(work_tree)

    repo.checkout("origin/feature-y", remote=True)

    assert _git(work_tree, "symbolic-ref", "--short", "HEAD") == "feature-y"
    assert _git(work_tree, "config", "--get", "branch.feature-y.merge") == "refs/heads/feature-y"


def test_checkout_of_missing_branch_fails_without_switching(work_tree: Path) -> None:
    repo = GitRepository.open(work_tree)

    with pytest.raises(GitCommandError) as exc:
        repo.checkout("does-not-exist")

    assert exc.value.code == ExitCode.CHECKOUT_ERROR
    assert _git(work_tree, "symbolic-ref", "--short", "HEAD") == "main"


def test_non_utf8_branch_name_does_not_empty_the_listing(work_tree: Path) -> None:
    _git_raw(work_tree, b"update-ref", b"refs/heads/caf\xe9", b"HEAD")
    repo = GitRepository.open(work_tree)

    names = [item.name for item in resolve(repo, BranchScope.LOCAL)]

    assert "caf�" in names
    assert "main" in names


def test_non_utf8_commit_subject_keeps_checked_out_branch(work_tree: Path) -> None:
    _git(work_tree, "switch", "-q", "-c", "latin")
    _git_raw(work_tree, b"commit", b"-q", b"--allow-empty", b"-m", b"caf\xe9 fix")
    repo = GitRepository.open(work_tree)

    items = {item.name: item for item in resolve(repo, BranchScope.LOCAL)}

    latin = items["latin"]
    assert latin.is_current is True
    assert latin.summary == "caf� fix"
    assert len(latin.commit_id) == 40
