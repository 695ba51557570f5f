"""Structured directives embedded in model replies.

Grammar (whitespace around tokens is optional)::

    directive := "[" "COMMAND" ":" body "]"
    body      := one or more characters other than "[" or "]"

The body is a command name optionally followed by arguments, for example
``[COMMAND: zoom_chain B]``. An opening tag without a matching close bracket,
or one interrupted by another ``[``, is ordinary text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

DIRECTIVE_RE = re.compile(r"\[\s*COMMAND\s*:\s*(?P<body>[^\[\]]*?)\s*\]")


@dataclass(frozen=True)
class Directive:
    body: str
    start: int
    end: int


def find_directives(text: str) -> list[Directive]:
    """Return directives left to right, duplicates included."""
    return [
        Directive(body=match["body"], start=match.start(), end=match.end())
        for match in DIRECTIVE_RE.finditer(text)
        if match["body"]
    ]


def extract_commands(text: str) -> list[str]:
    return [directive.body for directive in find_directives(text)]


def strip_directives(text: str) -> str:
    """Remove every directive span and trim the result."""
    parts: list[str] = []
    cursor = 0
    for directive in find_directives(text):
        parts.append(text[cursor : directive.start])
        cursor = directive.end
    parts.append(text[cursor:])
    return "".join(parts).strip()
