"""
Error taxonomy for vendor-space.

Every failure is a subclass of :class:`VendorSpaceError` carrying structured
fields and an :class:`ErrorKind`, so callers can branch on the kind of
failure instead of parsing messages.
"""
from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional


class ErrorKind(str, Enum):
    CONFIGURATION = "configuration"
    PATH_CONFLICT = "path_conflict"
    POLICY_VIOLATION = "policy_violation"
    REPOSITORY_VALIDITY = "repository_validity"
    EXTERNAL_TOOL = "external_tool"


class VendorSpaceError(Exception):
    """Base class for all vendor-space failures."""

    kind: ErrorKind


class ConfigError(VendorSpaceError):
    """The provided configuration was missing or invalid."""

    kind = ErrorKind.CONFIGURATION

    def __init__(self, message: str) -> None:
        super().__init__(f"The provided configuration was invalid: {message}")
        self.message = message


class ShellError(VendorSpaceError):
    """A shell script exited non-zero or could not be started."""

    kind = ErrorKind.EXTERNAL_TOOL

    def __init__(
        self,
        returncode: Optional[int] = None,
        os_error: Optional[OSError] = None,
    ) -> None:
        if os_error is not None:
            message = f"failed to run command due to IO error: {os_error}"
        else:
            message = f"command exited with unexpected exit code {returncode}"
        super().__init__(message)
        self.returncode = returncode
        self.os_error = os_error


class RepositoryError(VendorSpaceError):
    """Failure while acquiring or vendoring one repository."""

    def __init__(self, repo: str, path: Path, message: str) -> None:
        super().__init__(f"[{repo}] {message}")
        self.repo = repo
        self.path = path


class PathIsFile(RepositoryError):
    kind = ErrorKind.PATH_CONFLICT

    def __init__(self, repo: str, path: Path) -> None:
        super().__init__(repo, path, f"{path} exists and is a file, not a directory")


class DirectoryAlreadyExists(RepositoryError):
    kind = ErrorKind.POLICY_VIOLATION

    def __init__(self, repo: str, path: Path) -> None:
        super().__init__(
            repo,
            path,
            f"{path} already exists; enable allow_existing to reuse it",
        )


class InvalidGitRepo(RepositoryError):
    kind = ErrorKind.REPOSITORY_VALIDITY

    def __init__(self, repo: str, path: Path) -> None:
        super().__init__(repo, path, f"{path} is not a valid git repository")


class DirtyWorkingTree(RepositoryError):
    kind = ErrorKind.REPOSITORY_VALIDITY

    def __init__(self, repo: str, path: Path) -> None:
        super().__init__(repo, path, f"{path} has uncommitted changes")


class GitClone(RepositoryError):
    kind = ErrorKind.EXTERNAL_TOOL

    def __init__(self, repo: str, path: Path, url: str, cause: ShellError) -> None:
        super().__init__(repo, path, f"failed to clone {url} into {path}: {cause}")
        self.url = url
        self.cause = cause


class VendorStepFailed(RepositoryError):
    kind = ErrorKind.EXTERNAL_TOOL

    def __init__(
        self,
        repo: str,
        path: Path,
        branch: str,
        step: str,
        cause: ShellError,
    ) -> None:
        super().__init__(
            repo,
            path,
            f"{step} failed on branch {branch!r} in {path}: {cause}",
        )
        self.branch = branch
        self.step = step
        self.cause = cause


class RootCreationFailed(VendorSpaceError):
    kind = ErrorKind.EXTERNAL_TOOL

    def __init__(self, path: Path, cause: ShellError) -> None:
        super().__init__(f"failed to create vendor space root {path}: {cause}")
        self.path = path
        self.cause = cause


class GitQueryFailed(RepositoryError):
    """A git query against an existing directory could not be run at all."""

    kind = ErrorKind.EXTERNAL_TOOL

    def __init__(self, repo: str, path: Path, query: str, cause: ShellError) -> None:
        super().__init__(repo, path, f"could not run git {query} in {path}: {cause}")
        self.query = query
        self.cause = cause
