"""Built-in execution backends.

compile  -- runs the command line to completion in the shell.
terminal -- starts the command line and returns at once.
meta     -- dispatches other commands by name, in order.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from returns.io import IOFailure, IOResult, IOSuccess
from returns.unsafe import unsafe_perform_io

from projcmds.pcmd_modules import io_ops
from projcmds.pcmd_modules.engine.types import CommandType
from projcmds.pcmd_modules.errors import RegistryError
from projcmds.pcmd_modules.steps.resolve_environment import (
    environment_mapping,
)

if TYPE_CHECKING:
    import subprocess

    from projcmds.pcmd_modules.engine.types import Backend, Invocation
    from projcmds.pcmd_modules.types import ShellResult

_logger = logging.getLogger("projcmds.backends")


class CompileBackend:
    """Synchronous shell run with captured output.

    Output is echoed after the command finishes unless the
    definition is silent. A nonzero exit is a failure.
    """

    synchronous = True

    def run(
        self,
        invocation: Invocation,
    ) -> IOResult[None, RegistryError]:
        result = io_ops.run_shell_command(
            invocation.command_line,
            cwd=invocation.cwd,
            env=environment_mapping(invocation.environment),
        )

        def _handle_result(
            shell_result: ShellResult,
        ) -> IOResult[None, RegistryError]:
            if not invocation.definition.silent:
                if shell_result.stdout:
                    io_ops.write_stdout(shell_result.stdout)
                if shell_result.stderr:
                    io_ops.write_stderr(shell_result.stderr)
            if shell_result.return_code != 0:
                return IOFailure(
                    RegistryError(
                        operation="backends.compile",
                        error_type="CommandFailed",
                        message=(
                            f"'{invocation.definition.name}' exited"
                            f" with code {shell_result.return_code}"
                        ),
                        context={
                            "command": shell_result.command,
                            "return_code": shell_result.return_code,
                            "stderr": shell_result.stderr,
                        },
                    ),
                )
            return IOSuccess(None)

        return result.bind(_handle_result)


class TerminalBackend:
    """Asynchronous run, one live process per command name.

    Before a name is dispatched again, its previous handle is
    polled, which reaps that process if it has exited. A still
    running process is then dropped from tracking without being
    waited on and keeps running on its own. Handles live as long
    as the backend instance, which is one CLI invocation.
    """

    synchronous = False

    def __init__(self) -> None:
        self._processes: dict[str, subprocess.Popen[bytes]] = {}

    def process_for(self, name: str) -> subprocess.Popen[bytes] | None:
        """Return the last process started for a command name."""
        return self._processes.get(name)

    def run(
        self,
        invocation: Invocation,
    ) -> IOResult[None, RegistryError]:
        name = invocation.definition.name
        previous = self._processes.get(name)
        if previous is not None and previous.poll() is None:
            _logger.warning(
                "'%s' is already running (pid %s); starting another",
                name,
                previous.pid,
            )

        spawn_result = io_ops.spawn_process(
            invocation.command_line,
            cwd=invocation.cwd,
            env=environment_mapping(invocation.environment),
            silent=invocation.definition.silent,
        )
        if isinstance(spawn_result, IOFailure):
            return spawn_result
        self._processes[name] = unsafe_perform_io(spawn_result.unwrap())
        return IOSuccess(None)


class MetaBackend:
    """Runs each listed command name through the dispatcher.

    Steps run in order and stop at the first failure. A step
    with a synchronous backend finishes before the next starts;
    asynchronous steps are only started. Cycles are not detected.
    """

    synchronous = True

    def run(
        self,
        invocation: Invocation,
    ) -> IOResult[None, RegistryError]:
        from projcmds.pcmd_modules.commands.dispatch import (  # noqa: PLC0415
            run_command,
        )

        ctx = invocation.context
        if ctx is None:
            return IOFailure(
                RegistryError(
                    operation="backends.meta",
                    error_type="MissingContextError",
                    message=(
                        f"Meta command '{invocation.definition.name}'"
                        " needs a dispatch context"
                    ),
                    context={"name": invocation.definition.name},
                ),
            )

        for name in invocation.commands:
            _logger.debug(
                "Meta '%s' step: %s", invocation.definition.name, name,
            )
            step_result = run_command(name, ctx)
            if isinstance(step_result, IOFailure):
                return step_result
        return IOSuccess(None)


def default_backends() -> dict[str, Backend]:
    """Fresh backend table with the built-in types.

    The returned dict is the caller's to extend.
    """
    return {
        CommandType.COMPILE: CompileBackend(),
        CommandType.TERMINAL: TerminalBackend(),
        CommandType.META: MetaBackend(),
    }
