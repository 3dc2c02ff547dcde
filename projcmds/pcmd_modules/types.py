"""Shared type definitions for the projcmds engine."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    StrictBool,
    StrictStr,
    field_validator,
)

Layer = Literal["project", "local"]
LoadScope = Literal["project", "local", "both"]

LAYERS: tuple[Layer, ...] = ("project", "local")

DEFAULT_PROJECT_FILE_NAME = ".projcmds.json"
DEFAULT_ENV_FILE_NAME = ".env"
DEFAULT_COMMAND_SEPARATOR = " && "


class CommandDefinition(BaseModel):
    """One named, typed command record.

    Shape validation happens on construction. Whether ``type``
    names a registered backend is checked separately against the
    backend table (see steps.validate_definition), because the
    table is configured by the caller, not by the model.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: StrictStr
    command: StrictStr | tuple[StrictStr, ...]
    type: StrictStr
    workdir: StrictStr | None = None
    environment: tuple[StrictStr, ...] | None = None
    hook: StrictStr | None = None
    silent: StrictBool = False

    @field_validator("name", "type")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            msg = "must not be empty"
            raise ValueError(msg)
        return value

    @field_validator("command")
    @classmethod
    def _command_not_empty(
        cls,
        value: str | tuple[str, ...],
    ) -> str | tuple[str, ...]:
        entries = (value,) if isinstance(value, str) else value
        if not entries or any(not e.strip() for e in entries):
            msg = (
                "must be a non-empty template or a list"
                " of non-empty templates"
            )
            raise ValueError(msg)
        return value

    @field_validator("workdir")
    @classmethod
    def _workdir_relative(cls, value: str | None) -> str | None:
        if value is not None and PurePath(value).is_absolute():
            msg = "must be a path relative to the root directory"
            raise ValueError(msg)
        return value

    @field_validator("hook")
    @classmethod
    def _hook_reference(cls, value: str | None) -> str | None:
        if value is None:
            return value
        module, sep, attr = value.partition(":")
        if not sep or not module.strip() or not attr.strip():
            msg = "must be an import reference like 'package.module:function'"
            raise ValueError(msg)
        return value

    def templates(self) -> tuple[str, ...]:
        """Return the command body as a tuple of templates."""
        if isinstance(self.command, str):
            return (self.command,)
        return self.command

    def to_record(self) -> dict[str, object]:
        """Return the sparse canonical record for storage.

        Fields holding their default (None, False) are omitted.
        """
        return self.model_dump(mode="json", exclude_defaults=True)


@dataclass(frozen=True)
class ShellResult:
    """Result of a shell command execution."""

    return_code: int
    stdout: str
    stderr: str
    command: str


@dataclass(frozen=True)
class RegistryConfig:
    """Effective configuration for one registry session.

    Built once by the caller (normally the CLI) and passed down.
    Nothing in the engine reads configuration from globals.
    """

    data_dir: Path
    project_file_name: str = DEFAULT_PROJECT_FILE_NAME
    env_file_name: str = DEFAULT_ENV_FILE_NAME
    read_env_file: bool = False
    default_layer: Layer = "project"
    command_separator: str = DEFAULT_COMMAND_SEPARATOR

    @property
    def local_dir(self) -> Path:
        """Directory holding every local-layer file."""
        return self.data_dir / "local"


def select_layer(*, toggle: bool, default_layer: Layer) -> Layer:
    """Resolve the target layer of a mutating operation.

    The toggle flips the configured default: with a project
    default the toggle selects local, with a local default it
    selects project.
    """
    if default_layer == "project":
        return "local" if toggle else "project"
    return "project" if toggle else "local"
