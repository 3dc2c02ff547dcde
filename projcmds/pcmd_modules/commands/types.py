"""In-memory registry view for the two storage layers."""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from projcmds.pcmd_modules.types import CommandDefinition, Layer


@dataclass(frozen=True)
class CommandRegistry:
    """Merged view over the project and local layers.

    Immutable: operations return a NEW registry. The merged
    order is local entries followed by project entries, so a
    first-match lookup lets local shadow project.
    """

    project: tuple[CommandDefinition, ...] = ()
    local: tuple[CommandDefinition, ...] = ()

    def entries(self, layer: Layer) -> tuple[CommandDefinition, ...]:
        """Return one layer's entries in stored order."""
        return self.local if layer == "local" else self.project

    def merged(self) -> tuple[CommandDefinition, ...]:
        """Return all entries, local first."""
        return (*self.local, *self.project)

    def find(self, name: str) -> CommandDefinition | None:
        """First-match lookup by exact name. Returns None if absent."""
        for definition in self.merged():
            if definition.name == name:
                return definition
        return None

    def names(self) -> list[str]:
        """Names of all merged entries, in merge order."""
        return [definition.name for definition in self.merged()]

    def layer_of(self, definition: CommandDefinition) -> Layer | None:
        """Return the layer holding an entry equal to definition."""
        if definition in self.local:
            return "local"
        if definition in self.project:
            return "project"
        return None

    def with_entries(
        self,
        layer: Layer,
        entries: Iterable[CommandDefinition],
    ) -> CommandRegistry:
        """Return new registry with one layer replaced."""
        if layer == "local":
            return replace(self, local=tuple(entries))
        return replace(self, project=tuple(entries))
