"""XDG config loading."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Literal, cast

from pydantic import BaseModel, ConfigDict, Field

if sys.version_info >= (3, 11):
    import tomllib
else:  # pragma: no cover
    import tomli as tomllib

from branchhop.logging import LOG_LEVELS, normalize_level
from branchhop.models import BranchScope

DEFAULT_CONFIG_PATH = Path("~/.config/branchhop/config.toml").expanduser()
DEFAULT_SUMMARY_LENGTH = 72
DEFAULT_BRANCH_NAME_LENGTH = 42
DEFAULT_SCOPE: Literal["local", "remote", "local-and-remote"] = "local"
DEFAULT_POLL_TIMEOUT_SECONDS = 10.0
MAX_POLL_TIMEOUT_SECONDS = 60.0

_VALID_SCOPES = {scope.value for scope in BranchScope}

ScopeName = Literal["local", "remote", "local-and-remote"]


class AppConfig(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    summary_length: int = Field(default=DEFAULT_SUMMARY_LENGTH, ge=1)
    branch_name_length: int = Field(default=DEFAULT_BRANCH_NAME_LENGTH, ge=1)
    default_scope: ScopeName = DEFAULT_SCOPE
    poll_timeout_seconds: float = Field(
        default=DEFAULT_POLL_TIMEOUT_SECONDS,
        gt=0,
        le=MAX_POLL_TIMEOUT_SECONDS,
    )
    debug: bool = False
    log_level: str = "INFO"

    @property
    def scope(self) -> BranchScope:
        return BranchScope(self.default_scope)


def get_config_path(path: str | Path | None = None) -> Path:
    if path is None:
        return DEFAULT_CONFIG_PATH
    return Path(path).expanduser()


def _positive_int(value: object) -> int | None:
    # bool is an int subclass; reject it explicitly.
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value if value >= 1 else None


def _sanitize(raw: dict[str, object]) -> AppConfig:
    cfg = AppConfig()

    summary_length = _positive_int(raw.get("summary_length"))
    if summary_length is not None:
        cfg.summary_length = summary_length

    branch_name_length = _positive_int(raw.get("branch_name_length"))
    if branch_name_length is not None:
        cfg.branch_name_length = branch_name_length

    default_scope = raw.get("default_scope", cfg.default_scope)
    if isinstance(default_scope, str) and default_scope in _VALID_SCOPES:
        cfg.default_scope = cast(ScopeName, default_scope)

    poll_timeout = raw.get("poll_timeout_seconds", cfg.poll_timeout_seconds)
    if (
        isinstance(poll_timeout, (int, float))
        and not isinstance(poll_timeout, bool)
        and 0 < poll_timeout <= MAX_POLL_TIMEOUT_SECONDS
    ):
        cfg.poll_timeout_seconds = float(poll_timeout)

    debug = raw.get("debug", cfg.debug)
    if isinstance(debug, bool):
        cfg.debug = debug

    log_level = raw.get("log_level", cfg.log_level)
    if isinstance(log_level, str) and normalize_level(log_level) in LOG_LEVELS:
        cfg.log_level = normalize_level(log_level)

    return cfg


def load_config(path: str | Path | None = None) -> AppConfig:
    resolved = get_config_path(path)
    if not resolved.exists():
        return AppConfig()
    try:
        with resolved.open("rb") as handle:
            raw = tomllib.load(handle)
    except (tomllib.TOMLDecodeError, OSError):
        return AppConfig()
    if not isinstance(raw, dict):
        return AppConfig()
    return _sanitize(raw)
