"""Direct command detection."""

from __future__ import annotations

import re
from collections.abc import Callable, Container
from dataclasses import dataclass, field

from molchat.commands.params import (
    ChainParams,
    CommandParams,
    NoParams,
    ResidueParams,
    ResidueRangeParams,
)

CHAIN_COMMANDS = frozenset({"zoom_chain", "highlight_chain"})

PHRASES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("what is selected", "what's selected"), "what_is_selected"),
    (("analyze selection", "analyze my selection"), "analyze_selection"),
    (("clear selection",), "clear_selection"),
)

_CHAIN = r"(?P<chain>[a-z0-9]{1,4})\b"
_RANGE = r"(?P<start>\d+)\s*(?:-|to|through)\s*(?P<end>\d+)"

_SINGLE_RESIDUE_PATTERNS = (
    re.compile(rf"select\s+residue\s+(?P<residue>\d+)\s+in\s+chain\s+{_CHAIN}"),
    re.compile(rf"select\s+residue\s+(?P<residue>\d+)\s+chain\s+{_CHAIN}"),
    # A trailing chain clause that did not match above goes to the model.
    re.compile(r"select\s+residue\s+(?P<residue>\d+)(?!\s*(?:-|to\b|\d))(?!\s+(?:in\s+)?chain\b)"),
)
_RESIDUE_RANGE_PATTERNS = (
    re.compile(rf"select\s+residues\s+{_RANGE}\s+in\s+chain\s+{_CHAIN}"),
    re.compile(rf"select\s+chain\s+{_CHAIN}\s+residues\s+{_RANGE}"),
    re.compile(rf"select\s+residues\s+{_RANGE}\s+chain\s+{_CHAIN}"),
)


@dataclass(frozen=True)
class ParsedCommand:
    """Command recognised without the language model."""

    name: str
    params: CommandParams = field(default_factory=NoParams)


def detect_command(text: str, known: Container[str]) -> ParsedCommand | None:
    """Detect whether one input should run as a direct command.

    Phrase patterns are tried first, then the first whitespace token is
    matched against ``known``. ``None`` means the input should go to the model.
    """

    normalized = _normalize(text)
    if not normalized:
        return None

    for detect in _PHRASE_DETECTORS:
        parsed = detect(normalized)
        if parsed is not None and parsed.name in known:
            return parsed

    tokens = normalized.split()
    name, args = tokens[0], tokens[1:]
    if name not in known:
        return None
    if name in CHAIN_COMMANDS:
        if args:
            return ParsedCommand(name, ChainParams(chain_id=args[0]))
        return ParsedCommand(name, ChainParams())
    return ParsedCommand(name, _positional_params(name, args))


class CommandParser:
    """Parser bound to the names of one registry."""

    def __init__(self, known: Container[str]) -> None:
        self._known = known

    def parse(self, text: str) -> ParsedCommand | None:
        return detect_command(text, self._known)


def _normalize(text: str) -> str:
    return text.strip().lower().replace("’", "'")


def _positional_params(name: str, args: list[str]) -> CommandParams:
    # select_residue <number> [chain]; select_residue_range <chain> <start> <end>
    if name == "select_residue" and args and args[0].isdigit():
        return ResidueParams(residue_id=int(args[0]), chain_id=args[1] if len(args) > 1 else None)
    if name == "select_residue_range" and len(args) >= 3 and args[1].isdigit() and args[2].isdigit():
        return ResidueRangeParams(chain_id=args[0], start_residue=int(args[1]), end_residue=int(args[2]))
    return NoParams()


def _detect_phrase(text: str) -> ParsedCommand | None:
    for phrases, name in PHRASES:
        if any(phrase in text for phrase in phrases):
            return ParsedCommand(name)
    return None


def _detect_residue_range(text: str) -> ParsedCommand | None:
    for pattern in _RESIDUE_RANGE_PATTERNS:
        match = pattern.search(text)
        if match is None:
            continue
        return ParsedCommand(
            "select_residue_range",
            ResidueRangeParams(
                chain_id=match["chain"],
                start_residue=int(match["start"]),
                end_residue=int(match["end"]),
            ),
        )
    return None


def _detect_single_residue(text: str) -> ParsedCommand | None:
    for pattern in _SINGLE_RESIDUE_PATTERNS:
        match = pattern.search(text)
        if match is None:
            continue
        chain = match.groupdict().get("chain")
        return ParsedCommand("select_residue", ResidueParams(residue_id=int(match["residue"]), chain_id=chain))
    return None


_PHRASE_DETECTORS: tuple[Callable[[str], ParsedCommand | None], ...] = (
    _detect_phrase,
    _detect_single_residue,
    _detect_residue_range,
)
