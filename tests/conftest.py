import shlex
import shutil
import subprocess
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from vendorspace.shell import ShellExecutor, ShellResult, ShellScript


class RecordingExecutor(ShellExecutor):
    """Executor that records scripts instead of running them.

    ``failures`` maps a substring to an exit code; the first script with a
    line containing that substring returns the code instead of 0.
    """

    def __init__(self, failures: Optional[Dict[str, int]] = None) -> None:
        super().__init__()
        self.failures = failures or {}
        self.scripts: List[ShellScript] = []

    def run(self, script: ShellScript) -> ShellResult:
        self.scripts.append(script)
        for needle, code in self.failures.items():
            if any(needle in line for line in script.lines):
                return ShellResult(returncode=code)
        return ShellResult(returncode=0)

    @property
    def lines(self) -> List[str]:
        return [line for script in self.scripts for line in script.lines]

    def checkouts(self) -> List[str]:
        branches = []
        for line in self.lines:
            argv = shlex.split(line)
            if argv[:2] == ["git", "checkout"]:
                branches.append(argv[2])
        return branches


@pytest.fixture
def recorder() -> RecordingExecutor:
    return RecordingExecutor()


requires_git = pytest.mark.skipif(
    shutil.which("git") is None or shutil.which("bash") is None,
    reason="git and bash are required",
)


def git(*args: str, cwd: Path) -> str:
    completed = subprocess.run(
        [
            "git",
            "-c", "user.name=Vendor Space Tests",
            "-c", "user.email=tests@example.com",
            "-c", "commit.gpgsign=false",
            *args,
        ],
        cwd=cwd,
        check=True,
        capture_output=True,
        text=True,
    )
    return completed.stdout.strip()


def current_branch(path: Path) -> str:
    return git("rev-parse", "--abbrev-ref", "HEAD", cwd=path)


@pytest.fixture
def upstream(tmp_path: Path) -> Path:
    """A local repository with ``main`` and ``dev`` branches to clone from."""
    source = tmp_path / "upstream"
    source.mkdir()
    git("init", cwd=source)
    git("symbolic-ref", "HEAD", "refs/heads/main", cwd=source)
    (source / "Cargo.toml").write_text('[package]\nname = "demo"\n')
    git("add", "Cargo.toml", cwd=source)
    git("commit", "-m", "initial", cwd=source)
    git("branch", "dev", cwd=source)
    return source
