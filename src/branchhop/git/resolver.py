"""Branch status resolution.

Turns the raw refs a repository enumerates into ``BranchStatus`` snapshots.
Every per-branch lookup is best effort: a failing commit or tracking lookup
degrades that one entry and never the listing as a whole.
"""

from __future__ import annotations

import logging as py_logging

from branchhop.errors import BranchHopError, RefNotFoundError
from branchhop.git.repository import BranchRepository
from branchhop.models import BranchScope, BranchStatus, RawBranchRef

logger = py_logging.getLogger(__name__)


def _commit_fields(repository: BranchRepository, ref: RawBranchRef) -> tuple[str, str]:
    try:
        return repository.resolve_commit(ref)
    except BranchHopError as exc:
        logger.debug("Commit lookup failed ref=%s error=%s", ref.refname, exc)
    except Exception:
        logger.exception("Unexpected commit lookup failure ref=%s", ref.refname)
    return "", ""


def _tracking_configured(repository: BranchRepository, name: str) -> bool:
    try:
        return repository.get_tracking_config(name) is not None
    except BranchHopError as exc:
        logger.debug("Tracking config lookup failed branch=%s error=%s", name, exc)
    except Exception:
        logger.exception("Unexpected tracking config failure branch=%s", name)
    return False


def _tracking_fields(repository: BranchRepository, name: str) -> tuple[bool, bool]:
    """Return ``(has_upstream, is_gone)`` for a branch.

    A resolvable upstream always counts as tracked; the tracking config only
    decides whether a missing upstream means the branch is gone.
    """
    try:
        repository.resolve_upstream(name)
    except RefNotFoundError:
        return False, _tracking_configured(repository, name)
    except BranchHopError:
        return False, False
    except Exception:
        logger.exception("Unexpected upstream lookup failure branch=%s", name)
        return False, False
    return True, False


def resolve_branch(repository: BranchRepository, ref: RawBranchRef) -> BranchStatus:
    commit_id, summary = _commit_fields(repository, ref)
    has_upstream, is_gone = _tracking_fields(repository, ref.name)
    return BranchStatus(
        name=ref.name,
        commit_id=commit_id,
        summary=summary,
        is_current=ref.is_head,
        has_upstream=has_upstream,
        is_gone=is_gone,
        is_remote=ref.is_remote,
    )


def resolve(repository: BranchRepository, scope: BranchScope) -> list[BranchStatus]:
    try:
        refs = repository.list_branches(scope)
    except (BranchHopError, OSError, UnicodeError) as exc:
        logger.warning("Branch enumeration failed scope=%s error=%s", scope.value, exc)
        return []

    statuses = [resolve_branch(repository, ref) for ref in refs]
    logger.debug("Resolved %s branches scope=%s", len(statuses), scope.value)
    return statuses
