"""Shared test fixtures for the projcmds test suite."""
from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from projcmds.pcmd_modules.types import CommandDefinition, RegistryConfig

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def registry_config(tmp_path: Path) -> RegistryConfig:
    """Return a RegistryConfig whose data dir lives under tmp_path."""
    return RegistryConfig(data_dir=tmp_path / "data")


@pytest.fixture
def root_dir(tmp_path: Path) -> Path:
    """Return an existing, empty project root directory."""
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def build_definition() -> CommandDefinition:
    """Return a minimal compile-type definition."""
    return CommandDefinition(name="build", command="make", type="compile")
