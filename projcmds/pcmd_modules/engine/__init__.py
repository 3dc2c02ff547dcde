"""Engine package -- backend strategies and their contract."""
from projcmds.pcmd_modules.engine.backends import (
    CompileBackend,
    MetaBackend,
    TerminalBackend,
    default_backends,
)
from projcmds.pcmd_modules.engine.types import (
    Backend,
    CommandType,
    DispatchContext,
    Invocation,
)

__all__ = [
    "Backend",
    "CommandType",
    "CompileBackend",
    "DispatchContext",
    "Invocation",
    "MetaBackend",
    "TerminalBackend",
    "default_backends",
]
