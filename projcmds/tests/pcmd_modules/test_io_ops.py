"""Tests for I/O boundary module."""
from __future__ import annotations

import os
import subprocess
from typing import TYPE_CHECKING

import click
from returns.io import IOFailure, IOSuccess
from returns.unsafe import unsafe_perform_io

from projcmds.pcmd_modules.errors import RegistryError
from projcmds.pcmd_modules.io_ops import (
    default_data_dir,
    edit_text,
    get_process_environment,
    load_hook,
    prompt_choice,
    prompt_text,
    read_file,
    run_shell_command,
    spawn_process,
    write_file_atomic,
    write_stderr,
    write_stdout,
)
from projcmds.pcmd_modules.types import ShellResult

if TYPE_CHECKING:
    from pathlib import Path

    import pytest

# --- read_file ---


def test_read_file_success(tmp_path: Path) -> None:
    """read_file returns IOSuccess with file contents."""
    test_file = tmp_path / "test.txt"
    test_file.write_text("hello world")
    result = read_file(test_file)
    assert isinstance(result, IOSuccess)
    assert unsafe_perform_io(result.unwrap()) == "hello world"


def test_read_file_not_found(tmp_path: Path) -> None:
    """read_file returns IOFailure when file does not exist."""
    result = read_file(tmp_path / "nonexistent.txt")
    assert isinstance(result, IOFailure)
    error = unsafe_perform_io(result.failure())
    assert isinstance(error, RegistryError)
    assert error.error_type == "FileNotFoundError"
    assert "nonexistent.txt" in error.message


def test_read_file_is_a_directory(tmp_path: Path) -> None:
    """read_file returns IOFailure when path is a directory."""
    result = read_file(tmp_path)
    assert isinstance(result, IOFailure)
    error = unsafe_perform_io(result.failure())
    assert error.error_type == "IsADirectoryError"


# --- write_file_atomic ---


def test_write_file_atomic_creates_parents(tmp_path: Path) -> None:
    """Missing parent directories are created."""
    target = tmp_path / "a" / "b" / "store.json"
    result = write_file_atomic(target, "[]\n")
    assert isinstance(result, IOSuccess)
    assert target.read_text() == "[]\n"


def test_write_file_atomic_replaces_content(tmp_path: Path) -> None:
    """Existing content is replaced and no temp file is left."""
    target = tmp_path / "store.json"
    target.write_text("old content that is longer")
    write_file_atomic(target, "new")
    assert target.read_text() == "new"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["store.json"]


def test_write_file_atomic_failure_when_parent_is_file(
    tmp_path: Path,
) -> None:
    """A parent path that is a file yields IOFailure."""
    blocker = tmp_path / "blocker"
    blocker.write_text("x")
    result = write_file_atomic(blocker / "store.json", "[]")
    assert isinstance(result, IOFailure)
    error = unsafe_perform_io(result.failure())
    assert error.operation == "io_ops.write_file_atomic"


# --- environment and data dir ---


def test_get_process_environment_is_a_copy(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Mutating the returned mapping does not touch os.environ."""
    monkeypatch.setenv("PROJCMDS_TEST_VAR", "value")
    env = unsafe_perform_io(get_process_environment().unwrap())
    assert env["PROJCMDS_TEST_VAR"] == "value"
    env["PROJCMDS_ONLY_IN_COPY"] = "1"
    assert "PROJCMDS_ONLY_IN_COPY" not in os.environ


def test_default_data_dir_honors_xdg(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    """XDG_DATA_HOME decides the base directory when set."""
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
    assert default_data_dir() == tmp_path / "projcmds"


def test_default_data_dir_fallback(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Without XDG_DATA_HOME the data dir is under ~/.local/share."""
    monkeypatch.delenv("XDG_DATA_HOME", raising=False)
    data_dir = default_data_dir()
    assert data_dir.parts[-3:] == (".local", "share", "projcmds")


# --- run_shell_command ---


def test_run_shell_command_success(tmp_path: Path) -> None:
    """Shell output, return code and cwd are captured."""
    result = run_shell_command("pwd", cwd=tmp_path)
    assert isinstance(result, IOSuccess)
    shell_result = unsafe_perform_io(result.unwrap())
    assert isinstance(shell_result, ShellResult)
    assert shell_result.return_code == 0
    assert shell_result.stdout.strip() == str(tmp_path)


def test_run_shell_command_uses_given_env() -> None:
    """The env mapping is the child's whole environment."""
    result = run_shell_command(
        "echo $PROJCMDS_X",
        env={"PROJCMDS_X": "from-env", "PATH": os.environ["PATH"]},
    )
    shell_result = unsafe_perform_io(result.unwrap())
    assert shell_result.stdout.strip() == "from-env"


def test_run_shell_command_nonzero_is_success() -> None:
    """Nonzero exit codes are results, not failures."""
    result = run_shell_command("exit 3")
    assert isinstance(result, IOSuccess)
    assert unsafe_perform_io(result.unwrap()).return_code == 3


def test_run_shell_command_has_no_time_limit(mocker) -> None:  # type: ignore[no-untyped-def]
    """Commands run to completion; no timeout is passed."""
    run = mocker.patch(
        "subprocess.run",
        return_value=subprocess.CompletedProcess("sleep 5", 0, "", ""),
    )
    result = run_shell_command("sleep 5")
    assert isinstance(result, IOSuccess)
    assert "timeout" not in run.call_args.kwargs


def test_run_shell_command_missing_cwd(tmp_path: Path) -> None:
    """A missing working directory yields IOFailure."""
    result = run_shell_command("true", cwd=tmp_path / "missing")
    assert isinstance(result, IOFailure)
    error = unsafe_perform_io(result.failure())
    assert error.error_type == "FileNotFoundError"


# --- spawn_process ---


def test_spawn_process_returns_handle(mocker) -> None:  # type: ignore[no-untyped-def]
    """spawn_process starts Popen with shell and discards silent output."""
    fake = mocker.MagicMock(pid=1234)
    popen = mocker.patch("subprocess.Popen", return_value=fake)
    result = spawn_process("serve", silent=True)
    assert isinstance(result, IOSuccess)
    assert unsafe_perform_io(result.unwrap()) is fake
    kwargs = popen.call_args.kwargs
    assert kwargs["shell"] is True
    assert kwargs["stdout"] == subprocess.DEVNULL
    assert kwargs["stderr"] == subprocess.DEVNULL


def test_spawn_process_inherits_output_when_not_silent(mocker) -> None:  # type: ignore[no-untyped-def]
    """Non-silent processes keep the terminal's output streams."""
    popen = mocker.patch(
        "subprocess.Popen", return_value=mocker.MagicMock(pid=1),
    )
    spawn_process("serve")
    assert popen.call_args.kwargs["stdout"] is None


def test_spawn_process_os_error(mocker) -> None:  # type: ignore[no-untyped-def]
    """OSError from Popen becomes IOFailure."""
    mocker.patch("subprocess.Popen", side_effect=OSError("no shell"))
    result = spawn_process("serve")
    assert isinstance(result, IOFailure)
    error = unsafe_perform_io(result.failure())
    assert error.operation == "io_ops.spawn_process"


# --- load_hook ---


def test_load_hook_resolves_callable() -> None:
    """A module:attribute reference resolves to the callable."""
    result = load_hook("os.path:join")
    assert isinstance(result, IOSuccess)
    assert unsafe_perform_io(result.unwrap()) is os.path.join


def test_load_hook_resolves_dotted_attribute() -> None:
    """Dotted attribute paths are followed."""
    result = load_hook("os:path.basename")
    assert unsafe_perform_io(result.unwrap()) is os.path.basename


def test_load_hook_missing_module() -> None:
    """Unknown modules yield HookLoadError."""
    result = load_hook("projcmds_no_such_module:run")
    assert isinstance(result, IOFailure)
    error = unsafe_perform_io(result.failure())
    assert error.error_type == "HookLoadError"


def test_load_hook_missing_attribute() -> None:
    """Unknown attributes yield HookLoadError."""
    result = load_hook("os:no_such_function")
    assert isinstance(result, IOFailure)
    assert unsafe_perform_io(result.failure()).error_type == "HookLoadError"


def test_load_hook_not_callable() -> None:
    """Non-callable targets yield HookLoadError."""
    result = load_hook("os:sep")
    assert isinstance(result, IOFailure)
    error = unsafe_perform_io(result.failure())
    assert "not callable" in error.message


# --- interactive helpers ---


def test_edit_text_returns_saved_text(mocker) -> None:  # type: ignore[no-untyped-def]
    """Saved editor text is returned."""
    mocker.patch("click.edit", return_value='{"name": "x"}')
    result = edit_text("{}")
    assert unsafe_perform_io(result.unwrap()) == '{"name": "x"}'


def test_edit_text_abort_returns_none(mocker) -> None:  # type: ignore[no-untyped-def]
    """Closing the editor without saving returns IOSuccess(None)."""
    mocker.patch("click.edit", return_value=None)
    result = edit_text("{}")
    assert isinstance(result, IOSuccess)
    assert unsafe_perform_io(result.unwrap()) is None


def test_edit_text_editor_failure(mocker) -> None:  # type: ignore[no-untyped-def]
    """An editor that cannot start yields EditorError."""
    mocker.patch(
        "click.edit",
        side_effect=click.ClickException("Editing failed"),
    )
    result = edit_text("{}")
    assert isinstance(result, IOFailure)
    assert unsafe_perform_io(result.failure()).error_type == "EditorError"


def test_prompt_choice_returns_pick(mocker) -> None:  # type: ignore[no-untyped-def]
    """The chosen value is returned as a string."""
    prompt = mocker.patch("click.prompt", return_value="test")
    result = prompt_choice("Command", ["build", "test"])
    assert unsafe_perform_io(result.unwrap()) == "test"
    choice = prompt.call_args.kwargs["type"]
    assert isinstance(choice, click.Choice)
    assert list(choice.choices) == ["build", "test"]


def test_prompt_choice_abort_returns_none(mocker) -> None:  # type: ignore[no-untyped-def]
    """An aborted prompt returns IOSuccess(None)."""
    mocker.patch("click.prompt", side_effect=click.Abort())
    result = prompt_choice("Command", ["build"])
    assert isinstance(result, IOSuccess)
    assert unsafe_perform_io(result.unwrap()) is None


def test_prompt_text_abort_is_failure(mocker) -> None:  # type: ignore[no-untyped-def]
    """An aborted free-text prompt yields PromptAborted."""
    mocker.patch("click.prompt", side_effect=click.Abort())
    result = prompt_text("Argument")
    assert isinstance(result, IOFailure)
    assert unsafe_perform_io(result.failure()).error_type == "PromptAborted"


def test_prompt_text_returns_answer(mocker) -> None:  # type: ignore[no-untyped-def]
    """The typed answer is returned."""
    mocker.patch("click.prompt", return_value="--verbose")
    result = prompt_text("Argument")
    assert unsafe_perform_io(result.unwrap()) == "--verbose"


# --- output ---


def test_write_stdout_and_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    """Messages reach the right stream."""
    assert isinstance(write_stdout("out\n"), IOSuccess)
    assert isinstance(write_stderr("err\n"), IOSuccess)
    captured = capsys.readouterr()
    assert captured.out == "out\n"
    assert captured.err == "err\n"
