"""Layered command registry: load, add, update, delete.

Every mutation validates first, then rewrites the backing file
of each layer it touched, and returns the NEW registry. A
failed validation or uniqueness check writes nothing.

Mutations persist the in-memory layer as loaded. Callers that
loaded a single layer must not mutate the other one, or its
file is rewritten from an empty view.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from returns.io import IOFailure, IOResult, IOSuccess
from returns.result import Failure
from returns.unsafe import unsafe_perform_io

from projcmds.pcmd_modules.commands.store import read_layer, write_layer
from projcmds.pcmd_modules.commands.types import CommandRegistry
from projcmds.pcmd_modules.errors import RegistryError
from projcmds.pcmd_modules.steps.validate_definition import (
    validate_definition,
)

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable, Mapping
    from pathlib import Path

    from projcmds.pcmd_modules.types import (
        CommandDefinition,
        Layer,
        LoadScope,
        RegistryConfig,
    )

_logger = logging.getLogger("projcmds.registry")


def load_registry(
    root_dir: Path,
    scope: LoadScope,
    config: RegistryConfig,
) -> IOResult[CommandRegistry, RegistryError]:
    """Load the requested layer(s) of a root directory.

    scope is "project", "local" or "both". Layers outside the
    scope are empty in the returned registry.
    """
    layers: tuple[Layer, ...] = (
        ("project", "local") if scope == "both" else (scope,)
    )
    registry = CommandRegistry()
    for layer in layers:
        read_result = read_layer(root_dir, layer, config)
        if isinstance(read_result, IOFailure):
            return read_result
        registry = registry.with_entries(
            layer, unsafe_perform_io(read_result.unwrap()),
        )
    _logger.debug(
        "Loaded %s registry for %s: %d commands",
        scope,
        root_dir,
        len(registry.merged()),
    )
    return IOSuccess(registry)


def _check_unique(
    registry: CommandRegistry,
    name: str,
) -> IOResult[None, RegistryError]:
    existing = registry.find(name)
    if existing is None:
        return IOSuccess(None)
    return IOFailure(
        RegistryError(
            operation="registry.add",
            error_type="DuplicateNameError",
            message=f"A command named '{name}' already exists",
            context={
                "name": name,
                "layer": registry.layer_of(existing),
            },
        ),
    )


def _remove_first(
    entries: Iterable[CommandDefinition],
    target: CommandDefinition,
) -> tuple[CommandDefinition, ...]:
    """Drop the first entry structurally equal to target."""
    kept: list[CommandDefinition] = []
    removed = False
    for entry in entries:
        if not removed and entry == target:
            removed = True
            continue
        kept.append(entry)
    return tuple(kept)


def _persist(
    registry: CommandRegistry,
    root_dir: Path,
    layers: Iterable[Layer],
    config: RegistryConfig,
) -> IOResult[CommandRegistry, RegistryError]:
    for layer in layers:
        write_result = write_layer(
            root_dir, layer, registry.entries(layer), config,
        )
        if isinstance(write_result, IOFailure):
            return write_result
        _logger.info(
            "Saved %d %s commands for %s",
            len(registry.entries(layer)),
            layer,
            root_dir,
        )
    return IOSuccess(registry)


def add_command(
    registry: CommandRegistry,
    root_dir: Path,
    definition: CommandDefinition | Mapping[str, object],
    layer: Layer,
    *,
    backend_types: Collection[str],
    config: RegistryConfig,
) -> IOResult[CommandRegistry, RegistryError]:
    """Validate and prepend a definition to a layer, then persist it.

    Names are unique across both layers: a name already present
    in either layer is a DuplicateNameError.
    """
    validated = validate_definition(definition, backend_types)
    if isinstance(validated, Failure):
        return IOFailure(validated.failure())
    new_definition = validated.unwrap()

    unique = _check_unique(registry, new_definition.name)
    if isinstance(unique, IOFailure):
        return unique

    updated = registry.with_entries(
        layer, (new_definition, *registry.entries(layer)),
    )
    return _persist(updated, root_dir, (layer,), config)


def update_command(
    registry: CommandRegistry,
    root_dir: Path,
    existing_name: str,
    definition: CommandDefinition | Mapping[str, object],
    layer: Layer,
    *,
    backend_types: Collection[str],
    config: RegistryConfig,
) -> IOResult[CommandRegistry, RegistryError]:
    """Replace the command named existing_name with definition.

    When no command has that name this behaves exactly like
    add_command. Otherwise the old entry is removed from
    whichever layer holds it and the new one is added to layer;
    uniqueness is checked after the removal, so keeping the same
    name is allowed. Both touched layers are persisted.
    """
    old = registry.find(existing_name)
    if old is None:
        return add_command(
            registry,
            root_dir,
            definition,
            layer,
            backend_types=backend_types,
            config=config,
        )

    validated = validate_definition(definition, backend_types)
    if isinstance(validated, Failure):
        return IOFailure(validated.failure())
    new_definition = validated.unwrap()

    # find() only returns stored entries, so layer_of always matches
    owner = registry.layer_of(old) or layer
    removed = registry.with_entries(
        owner, _remove_first(registry.entries(owner), old),
    )

    unique = _check_unique(removed, new_definition.name)
    if isinstance(unique, IOFailure):
        return unique

    updated = removed.with_entries(
        layer, (new_definition, *removed.entries(layer)),
    )
    touched: tuple[Layer, ...] = (
        (owner,) if owner == layer else (owner, layer)
    )
    return _persist(updated, root_dir, touched, config)


def delete_command(
    registry: CommandRegistry,
    root_dir: Path,
    name: str,
    layer: Layer,
    *,
    config: RegistryConfig,
) -> IOResult[CommandRegistry, RegistryError]:
    """Remove the command with that name from a layer.

    Deleting a name the layer does not hold is a no-op and
    writes nothing.
    """
    entries = registry.entries(layer)
    target = next(
        (entry for entry in entries if entry.name == name), None,
    )
    if target is None:
        _logger.debug("No %s command named %s to delete", layer, name)
        return IOSuccess(registry)

    updated = registry.with_entries(layer, _remove_first(entries, target))
    return _persist(updated, root_dir, (layer,), config)
