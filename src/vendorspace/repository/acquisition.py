"""
Repository acquisition.

Ensures a usable git working directory exists at the target path: clone it,
adopt an existing clean clone, or reject the path with a precise error.
"""
from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from ..errors import (
    DirectoryAlreadyExists,
    DirtyWorkingTree,
    GitClone,
    GitQueryFailed,
    InvalidGitRepo,
    PathIsFile,
    ShellError,
)
from ..logger import get_logger
from ..shell import ShellExecutor, ShellScript

log = get_logger(__name__)


class RepositoryState(str, Enum):
    """What currently occupies a repository's target path."""

    ABSENT = "absent"
    OCCUPIED_BY_FILE = "occupied_by_file"
    OCCUPIED_BY_CLEAN_GIT_REPO = "occupied_by_clean_git_repo"
    OCCUPIED_BY_DIRTY_OR_INVALID_GIT_REPO = "occupied_by_dirty_or_invalid_git_repo"


class AcquisitionOutcome(str, Enum):
    CLONED = "cloned"
    ADOPTED = "adopted"


def _run_git_query(
    name: str, path: Path, query: str, script: ShellScript, executor: ShellExecutor
) -> bool:
    result = executor.run(script)
    if result.os_error is not None:
        raise GitQueryFailed(name, path, query, ShellError(os_error=result.os_error))
    return result.ok


def _is_valid_git_repo(name: str, path: Path, executor: ShellExecutor) -> bool:
    if not (path / ".git").is_dir():
        return False
    script = ShellScript(quiet=True).command("git", "-C", path, "status")
    return _run_git_query(name, path, "status", script, executor)


def _has_uncommitted_changes(name: str, path: Path, executor: ShellExecutor) -> bool:
    """Staged or unstaged changes to tracked files, relative to HEAD."""
    script = ShellScript(quiet=True).command(
        "git", "-C", path, "diff-index", "--quiet", "HEAD", "--"
    )
    return not _run_git_query(name, path, "diff-index", script, executor)


def inspect_repository(path: Path, executor: Optional[ShellExecutor] = None) -> RepositoryState:
    """Classify ``path`` without modifying anything."""
    executor = executor or ShellExecutor.from_settings()
    if not path.exists():
        return RepositoryState.ABSENT
    if not path.is_dir():
        return RepositoryState.OCCUPIED_BY_FILE
    name = path.name
    if not _is_valid_git_repo(name, path, executor):
        return RepositoryState.OCCUPIED_BY_DIRTY_OR_INVALID_GIT_REPO
    if _has_uncommitted_changes(name, path, executor):
        return RepositoryState.OCCUPIED_BY_DIRTY_OR_INVALID_GIT_REPO
    return RepositoryState.OCCUPIED_BY_CLEAN_GIT_REPO


def acquire_repository(
    name: str,
    path: Path,
    url: str,
    allow_existing: bool,
    executor: Optional[ShellExecutor] = None,
) -> AcquisitionOutcome:
    """
    Make ``path`` a usable git working directory for repository ``name``.

    A regular file at ``path`` is rejected regardless of policy. An existing
    directory is only inspected when ``allow_existing`` is set, and is adopted
    when it is a git repository without uncommitted changes. Otherwise
    ``url`` is cloned into ``path``.

    Raises:
        PathIsFile, DirectoryAlreadyExists, InvalidGitRepo, DirtyWorkingTree,
        GitQueryFailed, GitClone
    """
    executor = executor or ShellExecutor.from_settings()

    if path.exists() and not path.is_dir():
        raise PathIsFile(name, path)

    if path.is_dir():
        if not allow_existing:
            raise DirectoryAlreadyExists(name, path)
        if not _is_valid_git_repo(name, path, executor):
            raise InvalidGitRepo(name, path)
        if _has_uncommitted_changes(name, path, executor):
            raise DirtyWorkingTree(name, path)
        log.info("repository_adopted", repo=name, path=str(path))
        return AcquisitionOutcome.ADOPTED

    log.info("repository_cloning", repo=name, url=url, path=str(path))
    result = executor.run(ShellScript().command("git", "clone", "--", url, path))
    try:
        result.check()
    except ShellError as exc:
        raise GitClone(name, path, url, exc) from exc
    log.info("repository_cloned", repo=name, path=str(path))
    return AcquisitionOutcome.CLONED
