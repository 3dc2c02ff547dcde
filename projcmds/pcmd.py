"""Per-project command registry CLI.

Stores named commands for a project in two layers, a shared
project file and a private local file, and runs them through
pluggable backends.

Usage:
    uv run projcmds/pcmd.py list                 # Merged names with their layer
    uv run projcmds/pcmd.py run build            # Run one command
    uv run projcmds/pcmd.py run                  # Pick a command interactively
    uv run projcmds/pcmd.py run lint --file src/app.py
    uv run projcmds/pcmd.py add                  # Define a command in $EDITOR
    uv run projcmds/pcmd.py add --toggle-layer   # ...in the non-default layer
    uv run projcmds/pcmd.py edit build
    uv run projcmds/pcmd.py delete build

Examples:
    # Keep personal commands local by default
    PROJCMDS_DEFAULT_LAYER=local projcmds add

    # Let commands see the project's .env file
    projcmds --env-file run serve
"""
from __future__ import annotations

import sys
from pathlib import Path

# When run as a script, add the project root to sys.path so that
# absolute imports like "from projcmds.pcmd_modules..." resolve correctly.
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import json  # noqa: E402
from dataclasses import dataclass  # noqa: E402
from typing import TYPE_CHECKING, NoReturn  # noqa: E402

import click  # noqa: E402
from returns.io import IOFailure  # noqa: E402
from returns.unsafe import unsafe_perform_io  # noqa: E402

from projcmds.pcmd_modules import io_ops  # noqa: E402
from projcmds.pcmd_modules.commands import (  # noqa: E402
    add_command,
    delete_command,
    load_registry,
    run_command,
    update_command,
)
from projcmds.pcmd_modules.engine import (  # noqa: E402
    DispatchContext,
    default_backends,
)
from projcmds.pcmd_modules.log_setup import setup_logging  # noqa: E402
from projcmds.pcmd_modules.steps import (  # noqa: E402
    choose_command,
    edit_definition,
)
from projcmds.pcmd_modules.steps.edit_definition import (  # noqa: E402
    definition_template,
)
from projcmds.pcmd_modules.steps.expand_template import (  # noqa: E402
    constant,
    lazy_once,
)
from projcmds.pcmd_modules.types import (  # noqa: E402
    RegistryConfig,
    select_layer,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from returns.io import IOResult

    from projcmds.pcmd_modules.commands.types import CommandRegistry
    from projcmds.pcmd_modules.engine.types import Backend
    from projcmds.pcmd_modules.errors import RegistryError
    from projcmds.pcmd_modules.types import Layer


@dataclass(frozen=True)
class Session:
    """Settings shared by every subcommand of one CLI call."""

    root_dir: Path
    config: RegistryConfig
    backends: Mapping[str, Backend]

    def target_layer(self, *, toggle: bool) -> Layer:
        """Layer a mutating subcommand writes to."""
        return select_layer(
            toggle=toggle, default_layer=self.config.default_layer,
        )


def _fail(err: RegistryError) -> NoReturn:
    io_ops.write_stderr(f"Error: {err.message}\n")
    sys.exit(1)


def _abort() -> NoReturn:
    io_ops.write_stderr("Aborted.\n")
    sys.exit(1)


def _unwrap(result: IOResult[object, RegistryError]) -> object:
    if isinstance(result, IOFailure):
        _fail(unsafe_perform_io(result.failure()))
    return unsafe_perform_io(result.unwrap())


def _load(session: Session) -> CommandRegistry:
    result = load_registry(session.root_dir, "both", session.config)
    if isinstance(result, IOFailure):
        _fail(unsafe_perform_io(result.failure()))
    return unsafe_perform_io(result.unwrap())


_toggle_option = click.option(
    "-t",
    "--toggle-layer",
    "toggle",
    is_flag=True,
    help="Write to the layer that is not the default one",
)


@click.group()
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    help="Project root directory (default: current directory)",
)
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    envvar="PROJCMDS_DATA_DIR",
    help="Private data directory for local commands and logs",
)
@click.option(
    "--default-layer",
    type=click.Choice(["project", "local"]),
    default="project",
    envvar="PROJCMDS_DEFAULT_LAYER",
    show_default=True,
    help="Layer that add/edit/delete write to without --toggle-layer",
)
@click.option(
    "--env-file/--no-env-file",
    "read_env_file",
    default=False,
    envvar="PROJCMDS_READ_ENV_FILE",
    help="Load the root directory's .env file into commands",
)
@click.option("-v", "--verbose", is_flag=True, help="Debug output")
@click.pass_context
def main(
    ctx: click.Context,
    *,
    root: Path,
    data_dir: Path | None,
    default_layer: Layer,
    read_env_file: bool,
    verbose: bool,
) -> None:
    """Manage and run per-project commands."""
    config = RegistryConfig(
        data_dir=data_dir or io_ops.default_data_dir(),
        read_env_file=read_env_file,
        default_layer=default_layer,
    )
    setup_logging(config.data_dir, verbose=verbose)
    ctx.obj = Session(
        root_dir=root.expanduser().absolute(),
        config=config,
        backends=default_backends(),
    )


@main.command("list")
@click.pass_obj
def list_cmd(session: Session) -> None:
    """List merged commands, local first, with their layer."""
    registry = _load(session)
    if not registry.merged():
        io_ops.write_stdout("No commands defined.\n")
        return
    for definition in registry.merged():
        layer = registry.layer_of(definition)
        shadowed = registry.find(definition.name) is not definition
        suffix = " (shadowed)" if shadowed else ""
        io_ops.write_stdout(
            f"{definition.name}\t{definition.type}\t{layer}{suffix}\n",
        )


@main.command()
@click.argument("name")
@click.pass_obj
def show(session: Session, name: str) -> None:
    """Print the stored record of a command."""
    definition = _load(session).find(name)
    if definition is None:
        io_ops.write_stderr(f"Error: Unknown command '{name}'\n")
        sys.exit(1)
    io_ops.write_stdout(json.dumps(definition.to_record(), indent=2) + "\n")


@main.command()
@click.argument("name", required=False)
@click.option(
    "--file",
    "invoking_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="File the command is run for (%f, %F)",
)
@click.option(
    "--arg",
    "argument",
    default=None,
    help="Value for %a (prompted for when needed otherwise)",
)
@click.pass_obj
def run(
    session: Session,
    name: str | None,
    invoking_file: Path | None,
    argument: str | None,
) -> None:
    """Run a command by name, or pick one interactively."""
    registry = _load(session)
    if name is None:
        picked = _unwrap(choose_command(registry.names()))
        if picked is None:
            _abort()
        name = str(picked)

    argument_provider = (
        constant(argument)
        if argument is not None
        else lazy_once(lambda: io_ops.prompt_text("Argument"))
    )
    dispatch_ctx = DispatchContext(
        root_dir=session.root_dir,
        registry=registry,
        backends=session.backends,
        config=session.config,
        invoking_file=(
            invoking_file.expanduser().absolute()
            if invoking_file
            else None
        ),
        argument_provider=argument_provider,
    )
    _unwrap(run_command(name, dispatch_ctx))


@main.command()
@_toggle_option
@click.pass_obj
def add(session: Session, *, toggle: bool) -> None:
    """Define a new command in the editor."""
    registry = _load(session)
    edited = _unwrap(
        edit_definition(definition_template(), session.backends.keys()),
    )
    if edited is None:
        _abort()
    layer = session.target_layer(toggle=toggle)
    _unwrap(
        add_command(
            registry,
            session.root_dir,
            edited,
            layer,
            backend_types=session.backends.keys(),
            config=session.config,
        ),
    )
    io_ops.write_stdout(f"Added to {layer} commands.\n")


@main.command()
@click.argument("name")
@_toggle_option
@click.pass_obj
def edit(session: Session, name: str, *, toggle: bool) -> None:
    """Edit a command; an unknown name starts a new one."""
    registry = _load(session)
    existing = registry.find(name)
    initial = existing if existing is not None else definition_template(name)
    edited = _unwrap(
        edit_definition(initial, session.backends.keys()),
    )
    if edited is None:
        _abort()
    layer = session.target_layer(toggle=toggle)
    _unwrap(
        update_command(
            registry,
            session.root_dir,
            name,
            edited,
            layer,
            backend_types=session.backends.keys(),
            config=session.config,
        ),
    )
    io_ops.write_stdout(f"Saved to {layer} commands.\n")


@main.command()
@click.argument("name")
@_toggle_option
@click.pass_obj
def delete(session: Session, name: str, *, toggle: bool) -> None:
    """Delete a command from the selected layer."""
    registry = _load(session)
    layer = session.target_layer(toggle=toggle)
    if name not in [d.name for d in registry.entries(layer)]:
        io_ops.write_stdout(f"No {layer} command named '{name}'.\n")
        return
    _unwrap(
        delete_command(
            registry, session.root_dir, name, layer, config=session.config,
        ),
    )
    io_ops.write_stdout(f"Deleted '{name}' from {layer} commands.\n")


if __name__ == "__main__":  # pragma: no cover
    main()
