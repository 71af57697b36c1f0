"""Public CLI contract and entrypoint."""

from __future__ import annotations

import argparse
import logging as py_logging
import sys
from collections.abc import Callable, Sequence
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from .config import AppConfig, load_config
from .errors import BranchHopError, ExitCode, user_facing_error
from .git.repository import BranchRepository, GitRepository
from .logging import LOG_LEVELS, configure_logging, default_log_path, normalize_level
from .models import BranchScope

_VALID_SCOPES = tuple(scope.value for scope in BranchScope)

SessionRunner = Callable[[BranchRepository, AppConfig], int | None]


def _package_version() -> str:
    try:
        return version("branchhop")
    except PackageNotFoundError:
        return "0.0.0"


def _positive_int(flag: str) -> Callable[[str], int]:
    def parse(value: str) -> int:
        try:
            number = int(value)
        except ValueError as exc:
            raise argparse.ArgumentTypeError(f"{flag} must be an integer") from exc
        if number < 1:
            raise argparse.ArgumentTypeError(f"{flag} must be at least 1")
        return number

    return parse


def _log_level_type(value: str) -> str:
    normalized = normalize_level(value)
    if normalized not in LOG_LEVELS:
        accepted = "DEBUG, INFO, WARN, ERROR"
        raise argparse.ArgumentTypeError(f"--log-level must be one of: {accepted}")
    return normalized


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="branchhop",
        description="Browse git branches and switch the working tree to one of them.",
    )
    parser.add_argument("-d", "--directory", type=Path, default=Path("."), help="Path to repository")
    parser.add_argument(
        "-s",
        "--summary-length",
        type=_positive_int("--summary-length"),
        default=None,
        help="Latest commit summary max length",
    )
    parser.add_argument(
        "-b",
        "--branch-name-length",
        type=_positive_int("--branch-name-length"),
        default=None,
        help="Branch name max length",
    )
    parser.add_argument("-D", "--debug", action="store_true", help="Render debug info")
    parser.add_argument("--scope", choices=_VALID_SCOPES, default=None, help="Initial branch scope")
    parser.add_argument("--config", type=Path, default=None)
    parser.add_argument("--log-level", type=_log_level_type, default=None)
    parser.add_argument("--log-file", type=Path, default=None)
    parser.add_argument("--version", action="version", version=f"%(prog)s {_package_version()}")
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    return parser.parse_args(argv)


def resolve_config(namespace: argparse.Namespace) -> AppConfig:
    """Overlay command-line flags on the persisted config."""
    config = load_config(namespace.config)
    if namespace.summary_length is not None:
        config.summary_length = namespace.summary_length
    if namespace.branch_name_length is not None:
        config.branch_name_length = namespace.branch_name_length
    if namespace.scope is not None:
        config.default_scope = namespace.scope
    if namespace.log_level is not None:
        config.log_level = namespace.log_level
    if namespace.debug:
        config.debug = True
    return config


def launch_tui(repository: BranchRepository, config: AppConfig) -> int:
    from branchhop.ui.app import run_session

    return run_session(repository, config)


def main(
    argv: Sequence[str] | None = None,
    *,
    session_runner: SessionRunner | None = None,
    repository_opener: Callable[[Path], BranchRepository] | None = None,
) -> int:
    log_path = default_log_path()
    logger = configure_logging(log_file=log_path)
    try:
        namespace = parse_args(argv)
    except SystemExit as exc:
        if exc.code not in (None, 0):
            logger.warning("Argument parsing failed with exit code %s", exc.code)
        return int(exc.code or 0)

    if namespace.log_file is not None:
        log_path = namespace.log_file.expanduser()

    try:
        config = resolve_config(namespace)
        level = config.log_level
        logger = configure_logging(level=level, log_file=log_path)
        opener = repository_opener or GitRepository.open
        repository = opener(namespace.directory)

        runner = session_runner or launch_tui
        logger.debug("Starting branch session directory=%s", namespace.directory)
        # The terminal belongs to the session until it returns.
        configure_logging(level=level, log_file=log_path, console=False)
        try:
            result = runner(repository, config)
        finally:
            configure_logging(level=level, log_file=log_path)
        if isinstance(result, int):
            return result
        return int(ExitCode.SUCCESS)
    except BranchHopError as exc:
        logger.error(
            "Handled BranchHopError (code=%s): %s",
            int(exc.code),
            exc.message,
            exc_info=logger.isEnabledFor(py_logging.DEBUG),
        )
        print(user_facing_error(exc.message, hint=exc.hint), file=sys.stderr)
        return int(exc.code)
    except Exception:
        logger.exception("Unhandled exception in CLI entrypoint")
        try:
            hint = f"Inspect logs: {log_path}"
            print(user_facing_error("Unexpected runtime failure", hint=hint), file=sys.stderr)
        except Exception:
            pass
        return int(ExitCode.RUNTIME_ERROR)


def run(argv: Sequence[str] | None = None) -> int:
    return main(argv)
