"""Tests for dotenv-style env parsing."""
from __future__ import annotations

import pytest

from projcmds.pcmd_modules.steps.parse_env_file import (
    parse_env_line,
    parse_env_lines,
    parse_env_text,
)


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("VAR1=someval", ("VAR1", "someval")),
        ('export VAR2="a b"', ("VAR2", "a b")),
        ("KEY = value", ("KEY", "value")),
        ("KEY: value", ("KEY", "value")),
        ("  KEY=value  ", ("KEY", "value")),
        ("KEY=", ("KEY", "")),
        ("KEY='single quoted'", ("KEY", "single quoted")),
        (r"KEY='it\'s'", ("KEY", "it's")),
        (r'KEY="say \"hi\""', ("KEY", 'say "hi"')),
        ("KEY=value # trailing comment", ("KEY", "value")),
        ('KEY="a # b"', ("KEY", "a # b")),
        ("lower_case_9=x", ("lower_case_9", "x")),
    ],
)
def test_parse_env_line_accepts(
    line: str,
    expected: tuple[str, str],
) -> None:
    """Recognized shapes yield a key/value pair."""
    assert parse_env_line(line) == expected


@pytest.mark.parametrize(
    "line",
    [
        "",
        "# just a comment",
        "no separator here",
        "KEY:value",
        "BAD-KEY=value",
        "KEY=two words",
        "=value",
    ],
)
def test_parse_env_line_rejects(line: str) -> None:
    """Lines without a recognizable shape yield nothing."""
    assert parse_env_line(line) is None


def test_parse_env_text_keeps_order_and_duplicates() -> None:
    """Pairs come back in file order, duplicates included."""
    text = "A=1\n# comment\n\ngarbage line\nB=2\nA=3\n"
    assert parse_env_text(text) == [("A", "1"), ("B", "2"), ("A", "3")]


def test_parse_env_text_empty() -> None:
    """Empty text yields no pairs."""
    assert parse_env_text("") == []


def test_parse_env_lines_uses_same_grammar() -> None:
    """Inline entries are parsed exactly like file lines."""
    lines = ["export PORT=8080", 'NAME="my app"', "not valid"]
    assert parse_env_lines(lines) == [("PORT", "8080"), ("NAME", "my app")]
