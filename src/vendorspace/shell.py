"""
Shell script building and execution.

Scripts are immutable values assembled from individually quoted commands and
run through a single :class:`ShellExecutor` entry point. Strict mode is a
property of the executor; scripts only declare whether they want it.
"""
from __future__ import annotations

import shlex
import subprocess
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional, Tuple, Union

from .errors import ShellError
from .logger import get_logger
from .settings import AppSettings, settings

log = get_logger(__name__)

PathLike = Union[str, Path]


@dataclass(frozen=True)
class ShellScript:
    """Ordered list of shell-safe command lines."""

    lines: Tuple[str, ...] = ()
    strict: bool = True
    cwd: Optional[Path] = None
    quiet: bool = False

    def command(self, *argv: PathLike, stdout: Optional[PathLike] = None) -> "ShellScript":
        """Append a command whose arguments are each shell-quoted."""
        return self._append(shlex.join(str(arg) for arg in argv), stdout)

    def fragment(self, text: str, stdout: Optional[PathLike] = None) -> "ShellScript":
        """
        Append a trusted shell snippet verbatim.

        Used for operator-configured commands such as the vendoring tool,
        which may legitimately contain several words and flags.
        """
        if not text.strip():
            raise ValueError("Shell fragment must not be empty.")
        return self._append(text.strip(), stdout)

    def in_directory(self, cwd: PathLike) -> "ShellScript":
        return replace(self, cwd=Path(cwd))

    def _append(self, line: str, stdout: Optional[PathLike]) -> "ShellScript":
        if stdout is not None:
            line = f"{line} 1> {shlex.quote(str(stdout))}"
        return replace(self, lines=self.lines + (line,))

    def render(self, strict_prefix: str = "") -> str:
        parts = []
        if self.strict and strict_prefix:
            parts.append(strict_prefix)
        parts.extend(self.lines)
        return "\n".join(parts)


@dataclass(frozen=True)
class ShellResult:
    returncode: Optional[int]
    os_error: Optional[OSError] = None

    @property
    def ok(self) -> bool:
        return self.os_error is None and self.returncode == 0

    def check(self) -> None:
        """Raise :class:`ShellError` unless the script exited with 0."""
        if not self.ok:
            raise ShellError(returncode=self.returncode, os_error=self.os_error)


class ShellExecutor:
    """Runs :class:`ShellScript` values synchronously with inherited stdio."""

    def __init__(self, shell: str = "bash", strict_prefix: str = "set -euxo pipefail") -> None:
        self.shell = shell
        self.strict_prefix = strict_prefix

    @classmethod
    def from_settings(cls, app_settings: Optional[AppSettings] = None) -> "ShellExecutor":
        source = app_settings or settings
        return cls(shell=source.shell, strict_prefix=source.strict_prefix)

    def run(self, script: ShellScript) -> ShellResult:
        text = script.render(self.strict_prefix)
        cwd = str(script.cwd) if script.cwd is not None else None
        log.debug("shell_script_started", cwd=cwd, script=text)
        output = subprocess.DEVNULL if script.quiet else None
        try:
            completed = subprocess.run(
                [self.shell, "-c", text],
                cwd=cwd,
                stdout=output,
                stderr=output,
                check=False,
            )
        except OSError as exc:
            log.error("shell_script_not_started", cwd=cwd, error=str(exc))
            return ShellResult(returncode=None, os_error=exc)

        if completed.returncode != 0:
            log.debug("shell_script_failed", cwd=cwd, returncode=completed.returncode)
        return ShellResult(returncode=completed.returncode)
