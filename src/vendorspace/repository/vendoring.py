"""
Branch vendoring sequence.

Vendors every configured branch of an acquired repository into a shared
vendor directory and leaves the working tree on the primary branch.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from ..errors import ShellError, VendorStepFailed
from ..logger import get_logger
from ..settings import AppSettings, settings
from ..shell import ShellExecutor, ShellScript

log = get_logger(__name__)


@dataclass
class VendorResult:
    path: Path
    primary_branch: str
    artifacts: List[Path] = field(default_factory=list)
    active_config: Optional[Path] = None


class BranchVendoringSequencer:
    """Builds and runs the per-branch vendoring scripts for one repository."""

    def __init__(
        self,
        executor: Optional[ShellExecutor] = None,
        app_settings: Optional[AppSettings] = None,
    ) -> None:
        self.settings = app_settings or settings
        self.executor = executor or ShellExecutor.from_settings(self.settings)

    def artifact_path(self, branch: str) -> Path:
        """Artifact location relative to the repository root."""
        return Path(self.settings.artifact_dir) / f"{branch}{self.settings.artifact_suffix}"

    def active_config_path(self) -> Path:
        return Path(self.settings.artifact_dir) / self.settings.active_config_name

    def primary_script(self, path: Path, branch: str) -> ShellScript:
        artifact = self.artifact_path(branch)
        return (
            ShellScript(cwd=path)
            .command("mkdir", "-p", self.settings.artifact_dir)
            .command("git", "checkout", branch, "--")
            .command("git", "pull")
            .fragment(self.settings.vendor_command, stdout=artifact)
            .command("cp", artifact, self.active_config_path())
        )

    def secondary_script(self, path: Path, branch: str) -> ShellScript:
        incremental = f"{self.settings.vendor_command} {self.settings.vendor_incremental_flag}"
        return (
            ShellScript(cwd=path)
            .command("git", "checkout", branch, "--")
            .command("git", "pull")
            .fragment(incremental, stdout=self.artifact_path(branch))
        )

    def restore_script(self, path: Path, branch: str) -> ShellScript:
        return ShellScript(cwd=path).command("git", "checkout", branch, "--")

    def _run(self, script: ShellScript, repo: str, path: Path, branch: str, step: str) -> None:
        result = self.executor.run(script)
        try:
            result.check()
        except ShellError as exc:
            log.error("vendor_step_failed", repo=repo, branch=branch, step=step, error=str(exc))
            raise VendorStepFailed(repo, path, branch, step, exc) from exc

    def vendor(
        self,
        repo: str,
        path: Path,
        branches: Sequence[str],
        on_branch: Optional[Callable[[str], None]] = None,
    ) -> VendorResult:
        """
        Vendor ``branches`` in order, then check out the first one again.

        The first branch is vendored in full mode and its manifest becomes the
        active configuration. Later branches run in incremental mode so the
        vendored sources of earlier branches are kept. The first failing
        branch aborts the sequence and the working tree stays on whichever
        branch that script had reached.
        """
        if not branches:
            raise ValueError("At least one branch must be provided for vendoring.")
        primary = branches[0]
        result = VendorResult(path=path, primary_branch=primary)

        if on_branch:
            on_branch(primary)
        self._run(self.primary_script(path, primary), repo, path, primary, "full vendor")
        result.artifacts.append(path / self.artifact_path(primary))
        result.active_config = path / self.active_config_path()
        log.info("branch_vendored", repo=repo, branch=primary, mode="full")

        for branch in branches[1:]:
            if on_branch:
                on_branch(branch)
            self._run(self.secondary_script(path, branch), repo, path, branch, "incremental vendor")
            result.artifacts.append(path / self.artifact_path(branch))
            log.info("branch_vendored", repo=repo, branch=branch, mode="incremental")

        self._run(self.restore_script(path, primary), repo, path, primary, "checkout")
        log.info("primary_branch_restored", repo=repo, branch=primary)
        return result
