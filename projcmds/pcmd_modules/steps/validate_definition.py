"""Definition validation against the model and the backend table."""
from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import ValidationError
from returns.result import Failure, Result, Success

from projcmds.pcmd_modules.errors import RegistryError
from projcmds.pcmd_modules.types import CommandDefinition

if TYPE_CHECKING:
    from collections.abc import Collection, Mapping


def _format_validation_error(exc: ValidationError) -> list[str]:
    problems: list[str] = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err["loc"]) or "record"
        problems.append(f"{location}: {err['msg']}")
    return problems


def build_definition(
    raw: Mapping[str, object],
) -> Result[CommandDefinition, RegistryError]:
    """Construct a CommandDefinition from a plain record (pure function).

    Checks field presence and shapes only. Returns
    Success(definition) or Failure(RegistryError).
    """
    try:
        definition = CommandDefinition.model_validate(raw)
    except ValidationError as exc:
        problems = _format_validation_error(exc)
        return Failure(
            RegistryError(
                operation="validate_definition",
                error_type="ValidationError",
                message=(
                    "Invalid command definition: "
                    + "; ".join(problems)
                ),
                context={"problems": problems},
            ),
        )
    return Success(definition)


def check_type(
    definition: CommandDefinition,
    backend_types: Collection[str],
) -> Result[CommandDefinition, RegistryError]:
    """Ensure the definition's type names a registered backend."""
    if definition.type in backend_types:
        return Success(definition)
    available = sorted(backend_types)
    return Failure(
        RegistryError(
            operation="validate_definition",
            error_type="UnknownTypeError",
            message=(
                f"Unknown command type '{definition.type}'"
                f" for '{definition.name}'. Available: {available}"
            ),
            context={
                "name": definition.name,
                "type": definition.type,
                "available": available,
            },
        ),
    )


def validate_definition(
    raw: CommandDefinition | Mapping[str, object],
    backend_types: Collection[str],
) -> Result[CommandDefinition, RegistryError]:
    """Fully validate a definition (pure function).

    Accepts an already constructed CommandDefinition or a plain
    record. Shape problems and unknown types both fail.
    """
    if isinstance(raw, CommandDefinition):
        return check_type(raw, backend_types)

    def _check(
        definition: CommandDefinition,
    ) -> Result[CommandDefinition, RegistryError]:
        return check_type(definition, backend_types)

    return build_definition(raw).bind(_check)
