"""Git-backed repository collaborator."""

from __future__ import annotations

import logging as py_logging
import subprocess
from pathlib import Path
from typing import Protocol

from branchhop.errors import BranchHopError, ExitCode, GitCommandError, RefNotFoundError
from branchhop.models import BranchScope, RawBranchRef

logger = py_logging.getLogger(__name__)

LOCAL_NAMESPACE = "refs/heads/"
REMOTE_NAMESPACE = "refs/remotes/"

_SCOPE_NAMESPACES = {
    BranchScope.LOCAL: (LOCAL_NAMESPACE,),
    BranchScope.REMOTE: (REMOTE_NAMESPACE,),
    BranchScope.LOCAL_AND_REMOTE: (LOCAL_NAMESPACE, REMOTE_NAMESPACE),
}
_REF_FORMAT = "%(refname)%00%(symref)%00%(HEAD)"
_COMMIT_FORMAT = "%H%x00%s"


class BranchRepository(Protocol):
    """Capabilities the branch resolver and the input handler rely on."""

    def list_branches(self, scope: BranchScope) -> list[RawBranchRef]: ...

    def resolve_commit(self, ref: RawBranchRef) -> tuple[str, str]: ...

    def get_tracking_config(self, branch_name: str) -> tuple[str, str] | None: ...

    def resolve_upstream(self, branch_name: str) -> str: ...

    def checkout(self, branch_name: str, *, remote: bool = False) -> None: ...


def _run_git(repo: Path, args: list[str], runner: callable) -> subprocess.CompletedProcess:
    cmd = ["git", "-C", str(repo), *args]
    # Ref names and commit subjects are raw bytes.
    return runner(cmd, capture_output=True, text=True, encoding="utf-8", errors="replace", check=False)


def _stderr(result: subprocess.CompletedProcess) -> str:
    return (result.stderr or "").strip()


def _parse_ref_line(line: str) -> RawBranchRef | None:
    refname, _, rest = line.partition("\x00")
    symref, _, head_marker = rest.partition("\x00")
    if refname.startswith(LOCAL_NAMESPACE):
        return RawBranchRef(
            name=refname[len(LOCAL_NAMESPACE) :],
            refname=refname,
            is_head=head_marker.strip() == "*",
        )
    if refname.startswith(REMOTE_NAMESPACE):
        if symref:
            # origin/HEAD and friends point at another remote branch.
            return None
        return RawBranchRef(name=refname[len(REMOTE_NAMESPACE) :], refname=refname, is_remote=True)
    return None


def _local_name(remote_branch: str) -> str:
    if "/" not in remote_branch:
        raise GitCommandError(
            f"Invalid remote branch format: {remote_branch}",
            code=ExitCode.CHECKOUT_ERROR,
            hint="Use branch names like origin/feature-x.",
        )
    return remote_branch.split("/", 1)[1]


class GitRepository:
    def __init__(self, path: str | Path, runner: callable = subprocess.run) -> None:
        self.path = Path(path)
        self._runner = runner

    @classmethod
    def open(cls, path: str | Path, runner: callable = subprocess.run) -> GitRepository:
        repo = Path(path).expanduser()
        if not repo.is_dir():
            raise BranchHopError(
                f"Directory does not exist: {repo}",
                code=ExitCode.GIT_ERROR,
                hint="Pass an existing repository path with --directory.",
            )
        inside = _run_git(repo, ["rev-parse", "--is-inside-work-tree"], runner)
        if inside.returncode != 0 or inside.stdout.strip() != "true":
            logger.error("Repository is not accessible repo=%s stderr=%s", repo, _stderr(inside))
            raise BranchHopError(
                f"Not a git repository: {repo}",
                code=ExitCode.GIT_ERROR,
                hint="Check the path and ensure it is a valid Git working tree.",
            )
        logger.debug("Opened repository repo=%s", repo)
        return cls(repo, runner=runner)

    def _git(self, args: list[str]) -> subprocess.CompletedProcess:
        return _run_git(self.path, args, self._runner)

    def list_branches(self, scope: BranchScope) -> list[RawBranchRef]:
        refs: list[RawBranchRef] = []
        for namespace in _SCOPE_NAMESPACES[scope]:
            listing = self._git(["for-each-ref", f"--format={_REF_FORMAT}", namespace])
            if listing.returncode != 0:
                raise GitCommandError(
                    f"Failed to list branches under {namespace}",
                    hint=_stderr(listing) or "Run `git branch -a` manually to inspect repository state.",
                )
            for line in listing.stdout.splitlines():
                ref = _parse_ref_line(line)
                if ref is not None:
                    refs.append(ref)
        logger.debug("Listed %s branch refs scope=%s repo=%s", len(refs), scope.value, self.path)
        return refs

    def resolve_commit(self, ref: RawBranchRef) -> tuple[str, str]:
        result = self._git(["log", "-1", f"--format={_COMMIT_FORMAT}", ref.refname, "--"])
        commit_id, _, summary = result.stdout.rstrip("\n").partition("\x00")
        if result.returncode != 0 or not commit_id:
            raise GitCommandError(
                f"Failed to resolve commit for {ref.refname}",
                hint=_stderr(result),
            )
        return commit_id, summary

    def _config_value(self, key: str) -> str | None:
        result = self._git(["config", "--get", key])
        if result.returncode == 1:
            return None
        if result.returncode != 0:
            raise GitCommandError(f"Failed to read config key {key}", hint=_stderr(result))
        return result.stdout.strip() or None

    def get_tracking_config(self, branch_name: str) -> tuple[str, str] | None:
        remote = self._config_value(f"branch.{branch_name}.remote")
        merge = self._config_value(f"branch.{branch_name}.merge")
        if remote is None or merge is None:
            return None
        return remote, merge

    def resolve_upstream(self, branch_name: str) -> str:
        """Return the full ref name of the branch's upstream.

        Raises ``RefNotFoundError`` when tracking is configured but the
        upstream ref does not exist, ``GitCommandError`` for anything else.
        """
        refname = f"{LOCAL_NAMESPACE}{branch_name}"
        listing = self._git(["for-each-ref", "--format=%(refname)%00%(upstream)", refname])
        if listing.returncode != 0:
            raise GitCommandError(f"Failed to read upstream of {branch_name}", hint=_stderr(listing))
        upstream = ""
        for line in listing.stdout.splitlines():
            name, _, value = line.partition("\x00")
            if name == refname:
                upstream = value.strip()
                break
        if not upstream:
            raise GitCommandError(f"No upstream configured for {branch_name}")

        exists = self._git(["show-ref", "--verify", "--quiet", upstream])
        if exists.returncode == 0:
            return upstream
        if exists.returncode == 1:
            raise RefNotFoundError(f"Upstream ref not found: {upstream}")
        raise GitCommandError(f"Failed to verify upstream {upstream}", hint=_stderr(exists))

    def _materialize_remote_branch(self, remote_branch: str) -> str:
        local_branch = _local_name(remote_branch)
        exists = self._git(["branch", "--list", local_branch])
        if exists.returncode != 0:
            raise GitCommandError(
                "Failed to check local branch existence.",
                code=ExitCode.CHECKOUT_ERROR,
                hint=_stderr(exists) or "Inspect repository branch state.",
            )
        if exists.stdout.strip():
            logger.debug("Local branch already exists repo=%s branch=%s", self.path, local_branch)
            return local_branch

        create = self._git(["branch", "--track", local_branch, remote_branch])
        if create.returncode != 0:
            logger.error(
                "Failed to create tracking branch repo=%s remote=%s stderr=%s",
                self.path,
                remote_branch,
                _stderr(create),
            )
            raise GitCommandError(
                f"Failed to create a local branch for {remote_branch}",
                code=ExitCode.CHECKOUT_ERROR,
                hint=_stderr(create) or "Check remote branch existence.",
            )
        logger.debug("Created local tracking branch repo=%s branch=%s", self.path, local_branch)
        return local_branch

    def checkout(self, branch_name: str, *, remote: bool = False) -> None:
        target = self._materialize_remote_branch(branch_name) if remote else branch_name
        logger.debug("Switching branch repo=%s branch=%s", self.path, target)
        result = self._git(["switch", "--no-guess", target])
        if result.returncode != 0:
            logger.error("Checkout failed repo=%s branch=%s stderr=%s", self.path, target, _stderr(result))
            raise GitCommandError(
                f"Failed to check out {target}",
                code=ExitCode.CHECKOUT_ERROR,
                hint=_stderr(result) or "Commit or stash local changes first.",
            )
        logger.info("Checked out branch repo=%s branch=%s", self.path, target)
