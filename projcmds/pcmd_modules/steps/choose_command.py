"""Interactive selection of a command name."""
from __future__ import annotations

from typing import TYPE_CHECKING

from returns.io import IOFailure, IOResult

from projcmds.pcmd_modules import io_ops
from projcmds.pcmd_modules.errors import RegistryError

if TYPE_CHECKING:
    from collections.abc import Sequence


def choose_command(
    names: Sequence[str],
) -> IOResult[str | None, RegistryError]:
    """Ask the user to pick one of the merged command names.

    Returns IOSuccess(None) when the user aborts. An empty
    registry is an IOFailure, since there is nothing to pick.
    """
    if not names:
        return IOFailure(
            RegistryError(
                operation="choose_command",
                error_type="CommandNotFoundError",
                message="No commands are defined for this project",
                context={},
            ),
        )
    # shadowed project entries share a name with a local one
    unique_names = list(dict.fromkeys(names))
    return io_ops.prompt_choice("Command", unique_names)
