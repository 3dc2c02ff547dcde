"""Backing stores for the project and local layers.

Each layer is one JSON array of sparse records. Reading is
lenient: a file that does not parse, or records that fail shape
validation, are dropped silently (logged at debug level). Writes
always replace the whole file.
"""
from __future__ import annotations

import hashlib
import json
import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError
from returns.io import IOFailure, IOResult, IOSuccess
from returns.unsafe import unsafe_perform_io

from projcmds.pcmd_modules import io_ops
from projcmds.pcmd_modules.types import CommandDefinition

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from projcmds.pcmd_modules.errors import RegistryError
    from projcmds.pcmd_modules.types import Layer, RegistryConfig

_logger = logging.getLogger("projcmds.store")


def project_store_path(root_dir: Path, config: RegistryConfig) -> Path:
    """Project-layer file, inside the root directory."""
    return root_dir / config.project_file_name


def local_store_path(root_dir: Path, config: RegistryConfig) -> Path:
    """Local-layer file, keyed by a digest of the absolute root path."""
    absolute = str(root_dir.expanduser().absolute())
    digest = hashlib.sha256(absolute.encode("utf-8")).hexdigest()
    return config.local_dir / f"{digest}.json"


def store_path(
    root_dir: Path,
    layer: Layer,
    config: RegistryConfig,
) -> Path:
    """Backing file for a layer of the given root directory."""
    if layer == "local":
        return local_store_path(root_dir, config)
    return project_store_path(root_dir, config)


def parse_definitions(text: str) -> tuple[CommandDefinition, ...]:
    """Parse store text into definitions, never failing."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        _logger.debug("Ignoring unparseable store content: %s", exc)
        return ()
    if not isinstance(data, list):
        _logger.debug(
            "Ignoring store content: expected a list, got %s",
            type(data).__name__,
        )
        return ()

    definitions: list[CommandDefinition] = []
    for index, record in enumerate(data):
        try:
            definitions.append(CommandDefinition.model_validate(record))
        except ValidationError as exc:
            _logger.debug(
                "Skipping invalid record %d: %s",
                index,
                exc.errors()[0]["msg"] if exc.errors() else exc,
            )
    return tuple(definitions)


def serialize_definitions(
    definitions: Iterable[CommandDefinition],
) -> str:
    """Render definitions as the canonical store text."""
    records = [definition.to_record() for definition in definitions]
    return json.dumps(records, indent=2) + "\n"


def read_layer(
    root_dir: Path,
    layer: Layer,
    config: RegistryConfig,
) -> IOResult[tuple[CommandDefinition, ...], RegistryError]:
    """Read one layer. A missing or undecodable file is an empty layer."""
    path = store_path(root_dir, layer, config)
    read_result = io_ops.read_file(path)
    if isinstance(read_result, IOFailure):
        err = unsafe_perform_io(read_result.failure())
        if err.error_type == "FileNotFoundError":
            return IOSuccess(())
        if err.error_type == "UnicodeDecodeError":
            _logger.debug("Ignoring undecodable store file %s", path)
            return IOSuccess(())
        return IOFailure(err)

    definitions = parse_definitions(unsafe_perform_io(read_result.unwrap()))
    _logger.debug(
        "Read %d %s definitions from %s",
        len(definitions),
        layer,
        path,
    )
    return IOSuccess(definitions)


def write_layer(
    root_dir: Path,
    layer: Layer,
    definitions: Iterable[CommandDefinition],
    config: RegistryConfig,
) -> IOResult[None, RegistryError]:
    """Rewrite one layer's backing file in full."""
    path = store_path(root_dir, layer, config)
    return io_ops.write_file_atomic(path, serialize_definitions(definitions))
