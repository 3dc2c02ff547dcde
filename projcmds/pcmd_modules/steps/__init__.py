"""Step implementations for the projcmds engine."""
# --- Parsing and expansion (pure) ---
from projcmds.pcmd_modules.steps.expand_template import (
    expand_each,
    expand_template,
    expand_templates,
)
from projcmds.pcmd_modules.steps.parse_env_file import (
    parse_env_line,
    parse_env_lines,
    parse_env_text,
)
from projcmds.pcmd_modules.steps.validate_definition import (
    validate_definition,
)

# --- I/O-backed steps ---
from projcmds.pcmd_modules.steps.choose_command import choose_command
from projcmds.pcmd_modules.steps.edit_definition import edit_definition
from projcmds.pcmd_modules.steps.resolve_environment import (
    environment_mapping,
    resolve_environment,
)

__all__ = [
    "choose_command",
    "edit_definition",
    "environment_mapping",
    "expand_each",
    "expand_template",
    "expand_templates",
    "parse_env_line",
    "parse_env_lines",
    "parse_env_text",
    "resolve_environment",
    "validate_definition",
]
