"""
Vendor space orchestration.

Creates the vendor space root and runs acquisition followed by branch
vendoring for each configured repository, one repository at a time.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional

from ..config import RepoConfig, VendorSpace
from ..errors import RootCreationFailed, ShellError, VendorSpaceError
from ..logger import get_logger
from ..repository import (
    AcquisitionOutcome,
    BranchVendoringSequencer,
    VendorResult,
    acquire_repository,
)
from ..settings import AppSettings, settings
from ..shell import ShellExecutor, ShellScript

log = get_logger(__name__)


@dataclass
class OrchestratorCallbacks:
    stage: Optional[Callable[[str, RepoConfig], None]] = None
    branch: Optional[Callable[[RepoConfig, str], None]] = None


@dataclass
class RepositoryReport:
    repo: RepoConfig
    outcome: AcquisitionOutcome
    vendoring: VendorResult


@dataclass
class VendorSpaceReport:
    repositories: List[RepositoryReport] = field(default_factory=list)


class VendorSpaceOrchestrator:
    """Drives acquisition and vendoring across every repository of a vendor space."""

    def __init__(
        self,
        executor: Optional[ShellExecutor] = None,
        app_settings: Optional[AppSettings] = None,
    ) -> None:
        self.settings = app_settings or settings
        self.executor = executor or ShellExecutor.from_settings(self.settings)
        self.sequencer = BranchVendoringSequencer(self.executor, self.settings)

    def prepare_root(self, space: VendorSpace) -> None:
        result = self.executor.run(ShellScript().command("mkdir", "-p", space.root))
        try:
            result.check()
        except ShellError as exc:
            raise RootCreationFailed(space.root, exc) from exc
        log.info("vendor_space_root_ready", root=str(space.root))

    def process_repository(
        self,
        space: VendorSpace,
        repo: RepoConfig,
        callbacks: Optional[OrchestratorCallbacks] = None,
    ) -> RepositoryReport:
        cb = callbacks or OrchestratorCallbacks()
        path = space.repo_path(repo)

        if cb.stage:
            cb.stage("acquire_started", repo)
        outcome = acquire_repository(
            repo.name,
            path,
            repo.url,
            repo.allow_existing,
            executor=self.executor,
        )
        if cb.stage:
            cb.stage("acquire_completed", repo)

        if cb.stage:
            cb.stage("vendor_started", repo)
        on_branch = (lambda branch: cb.branch(repo, branch)) if cb.branch else None
        vendoring = self.sequencer.vendor(repo.name, path, repo.branches, on_branch=on_branch)
        if cb.stage:
            cb.stage("vendor_completed", repo)

        return RepositoryReport(repo=repo, outcome=outcome, vendoring=vendoring)

    def run(
        self,
        space: VendorSpace,
        callbacks: Optional[OrchestratorCallbacks] = None,
    ) -> VendorSpaceReport:
        """
        Process every repository in order, stopping at the first failure.

        The failing repository's error propagates unchanged; repositories
        after it are not attempted.
        """
        self.prepare_root(space)
        report = VendorSpaceReport()
        for repo in space.repos:
            try:
                report.repositories.append(self.process_repository(space, repo, callbacks))
            except VendorSpaceError as exc:
                log.error(
                    "repository_failed",
                    repo=repo.name,
                    kind=exc.kind.value,
                    error=str(exc),
                )
                raise
            log.info("repository_completed", repo=repo.name)
        log.info("vendor_space_completed", root=str(space.root), repos=len(report.repositories))
        return report


__all__ = [
    "OrchestratorCallbacks",
    "RepositoryReport",
    "VendorSpaceOrchestrator",
    "VendorSpaceReport",
]
