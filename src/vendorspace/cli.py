"""
Command line interface for building vendor spaces.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import CliOptions, RepoConfig, load_config
from .errors import VendorSpaceError
from .logger import configure_logging, get_logger, parse_level, redirect_logging_to_file
from .repository import inspect_repository
from .services import OrchestratorCallbacks, VendorSpaceOrchestrator
from .settings import settings
from .shell import ShellExecutor
from .version import get_version

app = typer.Typer(
    name="vendor-space",
    help="Clone repositories and vendor their dependencies for several branches.",
)
configure_logging(enable_console=False)
log = get_logger(__name__)
console = Console()

_STAGE_MESSAGES = {
    "acquire_started": "acquiring repository",
    "acquire_completed": "repository ready",
    "vendor_started": "vendoring branches",
    "vendor_completed": "vendoring complete",
}

ConfigOption = typer.Option(
    None,
    "--config",
    "-c",
    help="Path to the config file. Defaults to the nearest vendor-space.toml "
    "in the root directory or one of its parents.",
)
RootOption = typer.Option(
    None,
    "--root",
    "-r",
    help="Directory within which the vendor space is created. Defaults to the "
    "value in the config file, which defaults to the config file's directory.",
)
AllowExistingOption = typer.Option(
    False,
    "--allow-existing",
    "-a",
    help="Allow reuse of any existing repository, overriding the config file.",
)
BlockExistingOption = typer.Option(
    False,
    "--block-existing",
    "-b",
    help="Refuse to reuse any existing repository, overriding the config file.",
)


def _setup_logging(verbose: bool, log_file: Optional[Path]) -> None:
    level = logging.DEBUG if verbose else parse_level(settings.log_level)
    if log_file:
        redirect_logging_to_file(log_file, level=level)
    else:
        configure_logging(level=level, console_level=level if verbose else logging.WARNING)


def _fail(exc: VendorSpaceError) -> None:
    typer.echo(f"error: {exc}", err=True)
    raise typer.Exit(code=1)


@app.command()
def sync(
    config: Optional[str] = ConfigOption,
    root: Optional[str] = RootOption,
    allow_existing: bool = AllowExistingOption,
    block_existing: bool = BlockExistingOption,
    log_file: Optional[Path] = typer.Option(
        None,
        "--log",
        help="Write detailed logs to this file instead of the console.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Clone every configured repository and vendor each of its branches."""
    _setup_logging(verbose, log_file)
    options = CliOptions(
        config=config,
        root=root,
        allow_existing=allow_existing,
        block_existing=block_existing,
    )

    def on_stage(stage: str, repo: RepoConfig) -> None:
        message = _STAGE_MESSAGES.get(stage, stage)
        console.print(f"[bold]{escape(repo.name)}[/bold]: {message}")

    def on_branch(repo: RepoConfig, branch: str) -> None:
        console.print(f"[bold]{escape(repo.name)}[/bold]: vendoring branch {escape(branch)}")

    try:
        space = load_config(options)
        report = VendorSpaceOrchestrator().run(
            space,
            callbacks=OrchestratorCallbacks(stage=on_stage, branch=on_branch),
        )
    except VendorSpaceError as exc:
        _fail(exc)
        return

    for entry in report.repositories:
        typer.echo(
            f"- {entry.repo.name} ({entry.outcome.value}) -> {entry.vendoring.path} "
            f"branches=[{', '.join(entry.repo.branches)}]"
        )


@app.command()
def status(
    config: Optional[str] = ConfigOption,
    root: Optional[str] = RootOption,
    allow_existing: bool = AllowExistingOption,
    block_existing: bool = BlockExistingOption,
) -> None:
    """Show what currently occupies each repository path, without changing anything."""
    options = CliOptions(
        config=config,
        root=root,
        allow_existing=allow_existing,
        block_existing=block_existing,
    )
    try:
        space = load_config(options)
        executor = ShellExecutor.from_settings()
        rows = [
            (repo, inspect_repository(space.repo_path(repo), executor))
            for repo in space.repos
        ]
    except VendorSpaceError as exc:
        _fail(exc)
        return

    table = Table(title=f"Vendor space: {space.root}")
    table.add_column("Repository")
    table.add_column("State")
    table.add_column("Branches")
    table.add_column("Allow existing")
    for repo, state in rows:
        table.add_row(
            escape(repo.name),
            state.value,
            escape(", ".join(repo.branches)),
            "yes" if repo.allow_existing else "no",
        )
    console.print(table)


@app.command()
def version() -> None:
    """Print the installed vendor-space version."""
    typer.echo(get_version())


if __name__ == "__main__":  # pragma: no cover
    app()
