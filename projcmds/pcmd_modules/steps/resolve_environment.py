"""Environment resolution for a single dispatch.

Builds the ordered KEY=value entries a dispatched command sees:
the ambient process environment, then the root directory's env
file (when reading is enabled), then the definition's inline
entries. Later entries shadow earlier ones. The result is a
fresh value; os.environ is never modified.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from returns.io import IOFailure, IOResult, IOSuccess
from returns.unsafe import unsafe_perform_io

from projcmds.pcmd_modules import io_ops
from projcmds.pcmd_modules.steps.parse_env_file import (
    parse_env_lines,
    parse_env_text,
)

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from projcmds.pcmd_modules.errors import RegistryError
    from projcmds.pcmd_modules.types import (
        CommandDefinition,
        RegistryConfig,
    )

_logger = logging.getLogger("projcmds.environment")


def read_env_file_pairs(
    root_dir: Path,
    config: RegistryConfig,
) -> IOResult[list[tuple[str, str]], RegistryError]:
    """Read and parse the root directory's env file.

    A missing or undecodable file yields no pairs. Other read
    errors are returned as IOFailure.
    """
    path = root_dir / config.env_file_name
    read_result = io_ops.read_file(path)
    if isinstance(read_result, IOFailure):
        err = unsafe_perform_io(read_result.failure())
        if err.error_type == "FileNotFoundError":
            _logger.debug("No env file at %s", path)
            return IOSuccess([])
        if err.error_type == "UnicodeDecodeError":
            _logger.debug("Ignoring undecodable env file %s", path)
            return IOSuccess([])
        return IOFailure(err)

    text = unsafe_perform_io(read_result.unwrap())
    pairs = parse_env_text(text)
    _logger.debug("Loaded %d entries from %s", len(pairs), path)
    return IOSuccess(pairs)


def resolve_environment(
    definition: CommandDefinition,
    root_dir: Path,
    config: RegistryConfig,
) -> IOResult[tuple[str, ...], RegistryError]:
    """Return the final ordered KEY=value entries for one dispatch."""
    ambient_result = io_ops.get_process_environment()
    if isinstance(ambient_result, IOFailure):
        return ambient_result
    ambient = unsafe_perform_io(ambient_result.unwrap())
    entries = [f"{key}={value}" for key, value in ambient.items()]

    if config.read_env_file:
        file_result = read_env_file_pairs(root_dir, config)
        if isinstance(file_result, IOFailure):
            return file_result
        pairs = unsafe_perform_io(file_result.unwrap())
        entries.extend(f"{key}={value}" for key, value in pairs)

    if definition.environment:
        entries.extend(
            f"{key}={value}"
            for key, value in parse_env_lines(definition.environment)
        )

    return IOSuccess(tuple(entries))


def environment_mapping(entries: Iterable[str]) -> dict[str, str]:
    """Collapse KEY=value entries into a mapping, last occurrence wins."""
    mapping: dict[str, str] = {}
    for entry in entries:
        key, sep, value = entry.partition("=")
        if sep:
            mapping[key] = value
    return mapping
