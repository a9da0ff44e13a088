from pathlib import Path

import pytest
from typer.testing import CliRunner

from conftest import current_branch, requires_git
from vendorspace.cli import app
from vendorspace.settings import settings

runner = CliRunner()


def _write_config(directory: Path, url: str = "https://x/foo.git") -> Path:
    config_path = directory / "vendor-space.toml"
    config_path.write_text(
        f'root = "space"\n\n[foo]\nurl = "{url}"\nbranches = ["main"]\n'
    )
    return config_path


def test_version_command() -> None:
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert result.output.strip()


def test_conflicting_flags_exit_non_zero(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path)
    result = runner.invoke(app, ["sync", "--config", str(config_path), "-a", "-b"])
    assert result.exit_code == 1
    assert "May not both allow and block existing" in result.output


def test_missing_config_exits_non_zero(tmp_path: Path) -> None:
    result = runner.invoke(app, ["status", "--config", str(tmp_path / "missing.toml")])
    assert result.exit_code == 1
    assert "config file not found" in result.output


def test_status_lists_repository_state(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path)
    result = runner.invoke(app, ["status", "--config", str(config_path)])
    assert result.exit_code == 0, result.output
    assert "foo" in result.output
    assert "absent" in result.output


@requires_git
def test_sync_builds_vendor_space(
    tmp_path: Path, upstream: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(settings, "vendor_command", "echo vendored")
    config_path = _write_config(tmp_path, url=str(upstream))

    result = runner.invoke(app, ["sync", "--config", str(config_path)])

    assert result.exit_code == 0, result.output
    repo_path = tmp_path / "space" / "foo"
    assert "foo (cloned)" in result.output
    assert current_branch(repo_path) == "main"
    assert (repo_path / ".cargo" / "main.config.toml").read_text() == "vendored\n"

    blocked = runner.invoke(app, ["sync", "--config", str(config_path)])
    assert blocked.exit_code == 1
    assert "already exists" in blocked.output

    adopted = runner.invoke(app, ["sync", "--config", str(config_path), "--allow-existing"])
    assert adopted.exit_code == 0, adopted.output
    assert "foo (adopted)" in adopted.output
