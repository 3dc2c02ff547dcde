"""Public API types for execution backends.

Backend authors implement the Backend protocol and register an
instance under a type name in the backend table. The dispatcher
hands each backend a fully prepared Invocation.
"""
from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from pathlib import Path

    from returns.io import IOResult

    from projcmds.pcmd_modules.commands.types import CommandRegistry
    from projcmds.pcmd_modules.errors import RegistryError
    from projcmds.pcmd_modules.types import (
        CommandDefinition,
        RegistryConfig,
    )

ArgumentProvider = Callable[[], "IOResult[str, RegistryError]"]


class CommandType:
    """Names of the built-in backend types."""

    COMPILE = "compile"
    TERMINAL = "terminal"
    META = "meta"


@dataclass(frozen=True)
class DispatchContext:
    """Everything a dispatch needs, built once by the caller.

    argument_provider supplies the %a value. When None, the
    dispatcher prompts for it, and only if a template uses %a.
    """

    root_dir: Path
    registry: CommandRegistry
    backends: Mapping[str, Backend]
    config: RegistryConfig
    invoking_file: Path | None = None
    argument_provider: ArgumentProvider | None = None


@dataclass(frozen=True)
class Invocation:
    """One prepared run of a definition.

    commands holds each template expanded on its own;
    command_line is those joined with the configured separator.
    environment is the resolved KEY=value list for this run only.
    """

    definition: CommandDefinition
    root_dir: Path
    cwd: Path
    commands: tuple[str, ...]
    command_line: str
    environment: tuple[str, ...] = field(default_factory=tuple)
    context: DispatchContext | None = None


class Backend(Protocol):
    """Execution strategy for one command type.

    synchronous backends return only once their side effects are
    complete; asynchronous ones hand off and return immediately.
    Failures are returned as-is to the dispatch caller.
    """

    synchronous: bool

    def run(
        self,
        invocation: Invocation,
    ) -> IOResult[None, RegistryError]:
        """Execute the invocation."""
        ...
