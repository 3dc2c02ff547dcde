"""I/O boundary module -- ALL external I/O goes through here.

This is the single mock point for the entire test suite.
Registry, store and dispatch code never touch the filesystem,
processes or the terminal directly; they call io_ops functions.
"""
from __future__ import annotations

import importlib
import logging
import os
import subprocess
import sys
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

import click
from returns.io import IOFailure, IOResult, IOSuccess

from projcmds.pcmd_modules.errors import RegistryError
from projcmds.pcmd_modules.types import ShellResult

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

_logger = logging.getLogger("projcmds.io_ops")

_APP_DIR_NAME = "projcmds"


def read_file(path: Path) -> IOResult[str, RegistryError]:
    """Read file contents. Returns IOResult, never raises."""
    try:
        return IOSuccess(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return IOFailure(
            RegistryError(
                operation="io_ops.read_file",
                error_type="FileNotFoundError",
                message=f"File not found: {path}",
                context={"path": str(path)},
            ),
        )
    except PermissionError:
        return IOFailure(
            RegistryError(
                operation="io_ops.read_file",
                error_type="PermissionError",
                message=f"Permission denied: {path}",
                context={"path": str(path)},
            ),
        )
    except (OSError, UnicodeDecodeError) as exc:
        return IOFailure(
            RegistryError(
                operation="io_ops.read_file",
                error_type=type(exc).__name__,
                message=f"Error reading {path}: {exc}",
                context={"path": str(path)},
            ),
        )


def write_file_atomic(
    path: Path,
    content: str,
) -> IOResult[None, RegistryError]:
    """Replace a file's content in one step.

    Writes to a temp file in the target directory, then renames
    it over the target, so readers never see a partial file.
    Creates missing parent directories.
    """
    tmp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
        Path(tmp_name).replace(path)
    except PermissionError:
        _discard_temp(tmp_name)
        return IOFailure(
            RegistryError(
                operation="io_ops.write_file_atomic",
                error_type="PermissionError",
                message=f"Permission denied: {path}",
                context={"path": str(path)},
            ),
        )
    except OSError as exc:
        _discard_temp(tmp_name)
        return IOFailure(
            RegistryError(
                operation="io_ops.write_file_atomic",
                error_type=type(exc).__name__,
                message=f"OS error writing {path}: {exc}",
                context={"path": str(path)},
            ),
        )
    _logger.debug("Wrote %s (%d bytes)", path, len(content))
    return IOSuccess(None)


def _discard_temp(tmp_name: str | None) -> None:
    """Remove a leftover temp file after a failed write."""
    if tmp_name is None:
        return
    try:
        Path(tmp_name).unlink()
    except OSError:
        pass


def get_process_environment() -> IOResult[dict[str, str], RegistryError]:
    """Return a copy of the ambient process environment.

    The copy is detached: callers may extend it for one
    dispatch without leaking into os.environ.
    """
    return IOSuccess(dict(os.environ))


def default_data_dir() -> Path:
    """Engine-private data directory, outside any project tree.

    Honors XDG_DATA_HOME, falling back to ~/.local/share.
    """
    xdg = os.environ.get("XDG_DATA_HOME")
    base = Path(xdg) if xdg else Path.home() / ".local" / "share"
    return base / _APP_DIR_NAME


def run_shell_command(
    command: str,
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> IOResult[ShellResult, RegistryError]:
    """Execute shell command. Returns IOResult, never raises.

    Uses shell=True intentionally -- command bodies are opaque
    strings meant for the user's shell. Nonzero exit codes are
    valid results, not errors. The calling backend decides the
    policy for nonzero return codes.
    """
    try:
        result = subprocess.run(  # noqa: S602
            command,
            shell=True,
            capture_output=True,
            text=True,
            cwd=cwd,
            env=dict(env) if env is not None else None,
            check=False,
        )
    except FileNotFoundError:
        return IOFailure(
            RegistryError(
                operation="io_ops.run_shell_command",
                error_type="FileNotFoundError",
                message=f"Working directory or shell not found: {cwd}",
                context={"command": command, "cwd": str(cwd)},
            ),
        )
    except OSError as exc:
        return IOFailure(
            RegistryError(
                operation="io_ops.run_shell_command",
                error_type=type(exc).__name__,
                message=f"OS error running command: {exc}",
                context={"command": command},
            ),
        )
    else:
        return IOSuccess(
            ShellResult(
                return_code=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
                command=command,
            ),
        )


def spawn_process(
    command: str,
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
    silent: bool = False,
) -> IOResult[subprocess.Popen[bytes], RegistryError]:
    """Start a shell command without waiting for it.

    The child inherits the terminal unless silent, in which case
    its output is discarded. Returns the Popen handle.
    """
    sink = subprocess.DEVNULL if silent else None
    try:
        process = subprocess.Popen(  # noqa: S602
            command,
            shell=True,
            cwd=cwd,
            env=dict(env) if env is not None else None,
            stdin=subprocess.DEVNULL,
            stdout=sink,
            stderr=sink,
            start_new_session=True,
        )
    except OSError as exc:
        return IOFailure(
            RegistryError(
                operation="io_ops.spawn_process",
                error_type=type(exc).__name__,
                message=f"Could not start command: {exc}",
                context={"command": command, "cwd": str(cwd)},
            ),
        )
    _logger.debug("Spawned pid %s: %s", process.pid, command)
    return IOSuccess(process)


def load_hook(
    reference: str,
) -> IOResult[Callable[[], object], RegistryError]:
    """Import a hook callable from a 'module:attribute' reference."""
    module_name, _, attr_path = reference.partition(":")
    try:
        target: object = importlib.import_module(module_name)
        for part in attr_path.split("."):
            target = getattr(target, part)
    except (ImportError, AttributeError) as exc:
        return IOFailure(
            RegistryError(
                operation="io_ops.load_hook",
                error_type="HookLoadError",
                message=f"Cannot load hook '{reference}': {exc}",
                context={"hook": reference},
            ),
        )
    if not callable(target):
        return IOFailure(
            RegistryError(
                operation="io_ops.load_hook",
                error_type="HookLoadError",
                message=f"Hook '{reference}' is not callable",
                context={"hook": reference},
            ),
        )
    return IOSuccess(target)


def edit_text(
    text: str,
    *,
    extension: str = ".json",
) -> IOResult[str | None, RegistryError]:
    """Open text in the user's editor.

    Returns IOSuccess(None) when the editor is closed without
    saving, which callers treat as an abort.
    """
    try:
        edited = click.edit(text, extension=extension, require_save=True)
    except click.ClickException as exc:
        return IOFailure(
            RegistryError(
                operation="io_ops.edit_text",
                error_type="EditorError",
                message=f"Editor failed: {exc.format_message()}",
                context={},
            ),
        )
    return IOSuccess(edited)


def prompt_choice(
    label: str,
    choices: Sequence[str],
) -> IOResult[str | None, RegistryError]:
    """Ask the user to pick one of the choices.

    Returns IOSuccess(None) when the prompt is aborted.
    """
    try:
        picked = click.prompt(
            label,
            type=click.Choice(list(choices)),
            show_choices=True,
        )
    except click.Abort:
        return IOSuccess(None)
    return IOSuccess(str(picked))


def prompt_text(label: str) -> IOResult[str, RegistryError]:
    """Ask the user for free-form text."""
    try:
        answer = click.prompt(label, default="", show_default=False)
    except click.Abort:
        return IOFailure(
            RegistryError(
                operation="io_ops.prompt_text",
                error_type="PromptAborted",
                message=f"Prompt '{label}' was aborted",
                context={"label": label},
            ),
        )
    return IOSuccess(str(answer))


def write_stdout(
    message: str,
) -> IOResult[None, RegistryError]:
    """Write message to stdout. Returns IOResult, never raises."""
    try:
        sys.stdout.write(message)
    except OSError as exc:
        return IOFailure(
            RegistryError(
                operation="io_ops.write_stdout",
                error_type="StdoutWriteError",
                message=f"Failed to write to stdout: {exc}",
                context={"original_message": message},
            ),
        )
    return IOSuccess(None)


def write_stderr(
    message: str,
) -> IOResult[None, RegistryError]:
    """Write message to stderr (fail-open reporting).

    Returns IOSuccess(None) or IOFailure on error.
    """
    try:
        sys.stderr.write(message)
    except OSError as exc:
        return IOFailure(
            RegistryError(
                operation="io_ops.write_stderr",
                error_type="StderrWriteError",
                message=f"Failed to write to stderr: {exc}",
                context={"original_message": message},
            ),
        )
    return IOSuccess(None)
