import shutil
from pathlib import Path

import pytest

from vendorspace.errors import ErrorKind, ShellError
from vendorspace.shell import ShellExecutor, ShellResult, ShellScript

requires_bash = pytest.mark.skipif(shutil.which("bash") is None, reason="bash is required")


def test_command_quotes_each_argument() -> None:
    script = ShellScript().command("git", "clone", "https://x/foo.git", Path("/tmp/with space"))
    assert script.lines == ("git clone https://x/foo.git '/tmp/with space'",)


def test_builder_returns_new_scripts() -> None:
    base = ShellScript()
    extended = base.command("true")
    assert base.lines == ()
    assert extended.lines == ("true",)


def test_fragment_is_kept_verbatim_with_redirect() -> None:
    script = ShellScript().fragment("cargo vendor --versioned-dirs", stdout=".cargo/main.config.toml")
    assert script.lines == ("cargo vendor --versioned-dirs 1> .cargo/main.config.toml",)


def test_empty_fragment_rejected() -> None:
    with pytest.raises(ValueError):
        ShellScript().fragment("   ")


def test_render_applies_prefix_only_when_strict() -> None:
    strict = ShellScript().command("true")
    relaxed = ShellScript(strict=False).command("true")
    assert strict.render("set -euxo pipefail") == "set -euxo pipefail\ntrue"
    assert relaxed.render("set -euxo pipefail") == "true"


def test_result_check_raises_with_exit_code() -> None:
    assert ShellResult(returncode=0).ok
    with pytest.raises(ShellError) as excinfo:
        ShellResult(returncode=2).check()
    assert excinfo.value.returncode == 2
    assert excinfo.value.kind is ErrorKind.EXTERNAL_TOOL


@requires_bash
def test_executor_reports_exit_code() -> None:
    result = ShellExecutor().run(ShellScript().fragment("exit 3"))
    assert result.returncode == 3
    assert not result.ok


@requires_bash
def test_strict_mode_stops_at_first_failure(tmp_path: Path) -> None:
    executor = ShellExecutor()
    script = ShellScript(cwd=tmp_path).command("false").command("touch", "marker")

    assert not executor.run(script).ok
    assert not (tmp_path / "marker").exists()

    relaxed = ShellScript(strict=False, cwd=tmp_path).command("false").command("touch", "marker")
    assert executor.run(relaxed).ok
    assert (tmp_path / "marker").exists()


@requires_bash
def test_strict_mode_rejects_unset_variables(tmp_path: Path) -> None:
    script = ShellScript(cwd=tmp_path).fragment("echo $VENDOR_SPACE_SURELY_UNSET")
    assert ShellExecutor().run(script).returncode != 0


@requires_bash
def test_stdout_redirect_runs_in_cwd(tmp_path: Path) -> None:
    script = ShellScript(cwd=tmp_path).fragment("echo hello", stdout="out.txt")
    assert ShellExecutor().run(script).ok
    assert (tmp_path / "out.txt").read_text() == "hello\n"


def test_missing_shell_is_an_io_failure(tmp_path: Path) -> None:
    executor = ShellExecutor(shell=str(tmp_path / "no-such-shell"))
    result = executor.run(ShellScript().command("true"))
    assert result.returncode is None
    assert isinstance(result.os_error, OSError)
    with pytest.raises(ShellError) as excinfo:
        result.check()
    assert excinfo.value.os_error is result.os_error


@requires_bash
def test_missing_cwd_is_an_io_failure(tmp_path: Path) -> None:
    script = ShellScript(cwd=tmp_path / "gone").fragment("echo hello", stdout="out.txt")
    result = ShellExecutor().run(script)
    assert result.returncode is None
    assert isinstance(result.os_error, FileNotFoundError)
    assert not (tmp_path / "out.txt").exists()
