"""Commands package -- layered registry, stores and dispatch.

Public API for command infrastructure: the in-memory registry
view, loading and CRUD over both layers, the backing store
format, and dispatch by name.
"""
from __future__ import annotations

from projcmds.pcmd_modules.commands.dispatch import (
    dispatch_definition,
    run_command,
)
from projcmds.pcmd_modules.commands.registry import (
    add_command,
    delete_command,
    load_registry,
    update_command,
)
from projcmds.pcmd_modules.commands.store import (
    parse_definitions,
    read_layer,
    serialize_definitions,
    store_path,
    write_layer,
)
from projcmds.pcmd_modules.commands.types import CommandRegistry

__all__ = [
    "CommandRegistry",
    "add_command",
    "delete_command",
    "dispatch_definition",
    "load_registry",
    "parse_definitions",
    "read_layer",
    "run_command",
    "serialize_definitions",
    "store_path",
    "update_command",
    "write_layer",
]
