"""Dotenv-style parsing for env files and inline environment lines.

Parsing is lenient by contract: a line that does not have a
recognizable KEY=value shape yields nothing and is not an error.
Duplicate keys are kept as separate pairs; consumers decide
which occurrence wins.
"""
from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

_KEY = r"(?P<key>[A-Za-z0-9_]+)"
_SEPARATOR = r"(?:\s*=\s*|:\s+)"
_VALUE = (
    r"(?:'(?P<single>(?:\\'|[^'])*)'"
    r'|"(?P<double>(?:\\"|[^"])*)"'
    r"|(?P<bare>[^\s#]*))"
)
_COMMENT = r"(?:\s+#.*)?"

_ENV_LINE = re.compile(
    r"^(?:export\s+)?" + _KEY + _SEPARATOR + _VALUE + _COMMENT + r"$",
)


def parse_env_line(line: str) -> tuple[str, str] | None:
    """Parse one line into a (key, value) pair, or None."""
    match = _ENV_LINE.match(line.strip())
    if match is None:
        return None
    key = match.group("key")
    single = match.group("single")
    if single is not None:
        return key, single.replace("\\'", "'")
    double = match.group("double")
    if double is not None:
        return key, double.replace('\\"', '"')
    return key, match.group("bare")


def parse_env_text(text: str) -> list[tuple[str, str]]:
    """Parse dotenv-style text into ordered (key, value) pairs."""
    pairs: list[tuple[str, str]] = []
    for line in text.splitlines():
        pair = parse_env_line(line)
        if pair is not None:
            pairs.append(pair)
    return pairs


def parse_env_lines(lines: Iterable[str]) -> list[tuple[str, str]]:
    """Parse inline environment entries with the env-file grammar.

    Entries are joined with newlines and fed through the same
    parser as an env file.
    """
    return parse_env_text("\n".join(lines))
