"""Command dispatch -- central entry point for running a command.

Looks the command up in the merged registry, resolves its
backend, environment and expanded body, fires its hook, then
hands the prepared Invocation to the backend. Expansion and
environment failures stop the dispatch before the hook or the
backend runs. Backend results are returned untouched.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from returns.io import IOFailure, IOResult, IOSuccess
from returns.unsafe import unsafe_perform_io

from projcmds.pcmd_modules import io_ops
from projcmds.pcmd_modules.engine.types import Invocation
from projcmds.pcmd_modules.errors import RegistryError
from projcmds.pcmd_modules.steps.expand_template import (
    constant,
    expand_each,
    lazy_once,
)
from projcmds.pcmd_modules.steps.resolve_environment import (
    resolve_environment,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from projcmds.pcmd_modules.engine.types import (
        Backend,
        DispatchContext,
    )
    from projcmds.pcmd_modules.steps.expand_template import (
        SubstitutionProvider,
    )
    from projcmds.pcmd_modules.types import CommandDefinition

_logger = logging.getLogger("projcmds.dispatch")


def resolve_backend(
    type_name: str,
    backends: Mapping[str, Backend],
) -> IOResult[Backend, RegistryError]:
    """Map a command type to its backend.

    Returns IOFailure with the available types for unknown names.
    """
    backend = backends.get(type_name)
    if backend is not None:
        return IOSuccess(backend)
    available = sorted(backends)
    return IOFailure(
        RegistryError(
            operation="dispatch",
            error_type="UnknownTypeError",
            message=(
                f"Unknown command type '{type_name}'."
                f" Available: {available}"
            ),
            context={"type": type_name, "available": available},
        ),
    )


def _prompt_argument() -> IOResult[str, RegistryError]:
    return io_ops.prompt_text("Argument")


def build_providers(
    ctx: DispatchContext,
) -> dict[str, SubstitutionProvider]:
    """Substitution providers for one dispatch.

    %f and %F come from the invoking file (empty without one),
    %d is the root directory, %a is asked for at most once.
    """
    invoking = ctx.invoking_file
    return {
        "f": constant(invoking.name if invoking else ""),
        "F": constant(str(invoking) if invoking else ""),
        "d": constant(str(ctx.root_dir)),
        "a": lazy_once(ctx.argument_provider or _prompt_argument),
    }


def _run_hook(reference: str) -> IOResult[None, RegistryError]:
    load_result = io_ops.load_hook(reference)
    if isinstance(load_result, IOFailure):
        return load_result
    hook = unsafe_perform_io(load_result.unwrap())
    _logger.debug("Running hook %s", reference)
    hook()
    return IOSuccess(None)


def prepare_invocation(
    definition: CommandDefinition,
    ctx: DispatchContext,
) -> IOResult[Invocation, RegistryError]:
    """Resolve environment and expand the body of a definition."""
    env_result = resolve_environment(
        definition, ctx.root_dir, ctx.config,
    )
    if isinstance(env_result, IOFailure):
        return env_result
    environment = unsafe_perform_io(env_result.unwrap())

    expand_result = expand_each(
        definition.templates(), build_providers(ctx),
    )
    if isinstance(expand_result, IOFailure):
        return expand_result
    commands = unsafe_perform_io(expand_result.unwrap())

    cwd = (
        ctx.root_dir / definition.workdir
        if definition.workdir
        else ctx.root_dir
    )
    return IOSuccess(
        Invocation(
            definition=definition,
            root_dir=ctx.root_dir,
            cwd=cwd,
            commands=commands,
            command_line=ctx.config.command_separator.join(commands),
            environment=environment,
            context=ctx,
        ),
    )


def dispatch_definition(
    definition: CommandDefinition,
    ctx: DispatchContext,
) -> IOResult[None, RegistryError]:
    """Run one definition through its backend."""
    backend_result = resolve_backend(definition.type, ctx.backends)
    if isinstance(backend_result, IOFailure):
        return backend_result
    backend = unsafe_perform_io(backend_result.unwrap())

    prepared = prepare_invocation(definition, ctx)
    if isinstance(prepared, IOFailure):
        return prepared
    invocation = unsafe_perform_io(prepared.unwrap())

    if definition.hook:
        hook_result = _run_hook(definition.hook)
        if isinstance(hook_result, IOFailure):
            return hook_result

    _logger.info(
        "Dispatching '%s' via %s in %s",
        definition.name,
        definition.type,
        invocation.cwd,
    )
    return backend.run(invocation)


def run_command(
    name: str,
    ctx: DispatchContext,
) -> IOResult[None, RegistryError]:
    """Dispatch a command by name.

    Unknown names return IOFailure with the available names.
    Meta commands call back into this function for each step;
    there is no cycle detection, so a meta command that reaches
    itself recurses until Python's recursion limit. Avoiding
    such chains is the caller's responsibility.
    """
    definition = ctx.registry.find(name)
    if definition is None:
        available = ctx.registry.names()
        return IOFailure(
            RegistryError(
                operation="dispatch",
                error_type="CommandNotFoundError",
                message=(
                    f"Unknown command '{name}'."
                    f" Available: {available}"
                ),
                context={"command_name": name, "available": available},
            ),
        )
    return dispatch_definition(definition, ctx)
