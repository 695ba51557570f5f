"""Capability contracts between the core and a visualization engine."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from blinker import Signal

from molchat.types import Coordinates, Representation, SelectionInfo


@dataclass(frozen=True)
class ElementRecord:
    """One addressable structure element (an atom) as reported by an engine."""

    residue_name: str
    residue_number: int
    chain_id: str
    atom_name: str
    element_symbol: str
    handle: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Loci:
    """A group of elements, e.g. one entry of the engine selection manager."""

    elements: tuple[ElementRecord, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.elements


@runtime_checkable
class ViewerControls(Protocol):
    """Operations commands may call on the viewer."""

    async def load_structure(self, source: str, format: str | None = None) -> None: ...

    async def reset_view(self) -> None: ...

    async def zoom_in(self) -> None: ...

    async def zoom_out(self) -> None: ...

    async def set_representation(self, kind: Representation) -> None: ...

    async def show_water_molecules(self) -> None: ...

    async def hide_water_molecules(self) -> None: ...

    async def hide_ligands(self) -> None: ...

    async def focus_on_chain(self, chain_id: str) -> None: ...

    async def highlight_chain(self, chain_id: str) -> None: ...

    async def clear_highlights(self) -> None: ...

    async def show_only_selected(self) -> None: ...

    async def show_full_structure(self) -> None: ...

    async def select_residue(self, residue_id: int, chain_id: str | None = None) -> str: ...

    async def select_residue_range(self, chain_id: str, start_residue: int, end_residue: int) -> str: ...

    async def clear_selection(self) -> None: ...

    async def get_selection_info(self) -> str: ...

    async def get_current_selection(self) -> SelectionInfo | None: ...

    async def get_structure_info(self) -> str: ...


class ViewerEngine(Protocol):
    """Engine side of the contract: mutations, events and read-only selection state.

    Signals are sent with ``send_async`` and carry the engine as sender.
    """

    selection_changed: Signal
    click: Signal
    hover: Signal

    @property
    def structure_name(self) -> str | None: ...

    def has_structure(self) -> bool: ...

    def selection_entries(self) -> Sequence[Loci]: ...

    def last_highlight(self) -> Loci | None: ...

    def position_of(self, element: ElementRecord) -> Coordinates: ...

    async def load_structure(self, source: str, format: str | None = None) -> None: ...

    async def reset_view(self) -> None: ...

    async def zoom_in(self) -> None: ...

    async def zoom_out(self) -> None: ...

    async def set_representation(self, kind: Representation) -> None: ...

    async def show_water_molecules(self) -> None: ...

    async def hide_water_molecules(self) -> None: ...

    async def hide_ligands(self) -> None: ...

    async def focus_on_chain(self, chain_id: str) -> None: ...

    async def highlight_chain(self, chain_id: str) -> None: ...

    async def clear_highlights(self) -> None: ...

    async def show_only_selected(self) -> None: ...

    async def show_full_structure(self) -> None: ...

    async def select_residue(self, residue_id: int, chain_id: str | None = None) -> str: ...

    async def select_residue_range(self, chain_id: str, start_residue: int, end_residue: int) -> str: ...

    async def clear_selection(self) -> None: ...

    async def get_structure_info(self) -> str: ...
