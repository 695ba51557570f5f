"""Shared dataclasses."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Literal

MessageRole = Literal["user", "assistant", "system"]
KeySource = Literal["none", "stored", "environment"]


class Representation(StrEnum):
    """Molecular representation styles understood by viewer engines."""

    CARTOON = "cartoon"
    SURFACE = "surface"
    BALL_AND_STICK = "ball_and_stick"
    SPACEFILL = "spacefill"


@dataclass(frozen=True)
class Coordinates:
    x: float
    y: float
    z: float


@dataclass(frozen=True)
class SelectionInfo:
    """Snapshot of the single current selection."""

    description: str
    residue_name: str | None = None
    residue_number: int | None = None
    chain_id: str | None = None
    atom_name: str | None = None
    element_type: str | None = None
    atom_count: int | None = None
    coordinates: Coordinates | None = None


@dataclass(frozen=True)
class AIContext:
    """Viewer context sent along with a natural-language request."""

    structure_name: str | None = None
    representation: str = Representation.CARTOON.value
    has_structure: bool = False
    selection: SelectionInfo | None = None


@dataclass(frozen=True)
class ApiKeyStatus:
    present: bool
    valid: bool
    source: KeySource


@dataclass(frozen=True)
class ChatMessage:
    """One entry of the session log."""

    role: MessageRole
    text: str
    commands_executed: tuple[str, ...] = ()
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
