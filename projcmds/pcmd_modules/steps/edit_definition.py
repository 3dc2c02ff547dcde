"""Interactive editing of a definition in the user's editor.

The definition is rendered as JSON, edited, and the saved text
is validated like any other add or update. Closing the editor
without saving aborts.
"""
from __future__ import annotations

import json
from typing import TYPE_CHECKING

from returns.io import IOFailure, IOResult, IOSuccess
from returns.result import Failure, Result
from returns.unsafe import unsafe_perform_io

from projcmds.pcmd_modules import io_ops
from projcmds.pcmd_modules.engine.types import CommandType
from projcmds.pcmd_modules.errors import RegistryError
from projcmds.pcmd_modules.steps.validate_definition import (
    validate_definition,
)
from projcmds.pcmd_modules.types import CommandDefinition

if TYPE_CHECKING:
    from collections.abc import Collection, Mapping


def definition_template(name: str = "") -> dict[str, object]:
    """A blank record showing every field, for new definitions."""
    return {
        "name": name,
        "command": "",
        "type": CommandType.COMPILE,
        "workdir": None,
        "environment": None,
        "hook": None,
        "silent": False,
    }


def render_definition(
    initial: CommandDefinition | Mapping[str, object],
) -> str:
    """Render a definition or template record as editable JSON."""
    if isinstance(initial, CommandDefinition):
        record: Mapping[str, object] = initial.model_dump(mode="json")
    else:
        record = initial
    return json.dumps(record, indent=2) + "\n"


def parse_definition_text(
    text: str,
    backend_types: Collection[str],
) -> Result[CommandDefinition, RegistryError]:
    """Parse and validate edited text (pure function)."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        return Failure(
            RegistryError(
                operation="edit_definition",
                error_type="ValidationError",
                message=f"Edited text is not valid JSON: {exc}",
                context={"line": exc.lineno, "column": exc.colno},
            ),
        )
    if not isinstance(data, dict):
        return Failure(
            RegistryError(
                operation="edit_definition",
                error_type="ValidationError",
                message="Edited text must be a single JSON object",
                context={"got": type(data).__name__},
            ),
        )
    return validate_definition(data, backend_types)


def edit_definition(
    initial: CommandDefinition | Mapping[str, object],
    backend_types: Collection[str],
) -> IOResult[CommandDefinition | None, RegistryError]:
    """Let the user edit a definition.

    Returns IOSuccess(definition) once the saved text validates,
    IOSuccess(None) when the user aborted, or IOFailure when the
    editor failed or the text is invalid.
    """
    edit_result = io_ops.edit_text(render_definition(initial))
    if isinstance(edit_result, IOFailure):
        return edit_result
    text = unsafe_perform_io(edit_result.unwrap())
    if text is None:
        return IOSuccess(None)

    parsed = parse_definition_text(text, backend_types)
    if isinstance(parsed, Failure):
        return IOFailure(parsed.failure())
    return IOSuccess(parsed.unwrap())
