"""Viewer controls for one session: an engine plus the selection tracker."""

from __future__ import annotations

from loguru import logger

from molchat.selection.describe import render_selection_details
from molchat.selection.tracker import SelectionTracker
from molchat.types import Representation, SelectionInfo
from molchat.viewer.protocol import ViewerEngine


class SessionControls:
    """Forward mutations to the engine; answer selection reads from the tracker."""

    def __init__(self, engine: ViewerEngine, tracker: SelectionTracker) -> None:
        self._engine = engine
        self._tracker = tracker
        self._representation = Representation.CARTOON
        tracker.attach(engine)

    @property
    def engine(self) -> ViewerEngine:
        return self._engine

    @property
    def representation(self) -> Representation:
        return self._representation

    @property
    def structure_name(self) -> str | None:
        return self._engine.structure_name

    def has_structure(self) -> bool:
        return self._engine.has_structure()

    async def load_structure(self, source: str, format: str | None = None) -> None:
        # Selection and representation state must be reset before the engine's first suspension point.
        self._tracker.detach()
        self._tracker.reset()
        self._representation = Representation.CARTOON
        logger.info("viewer.load.start source={} format={}", source, format or "auto")
        try:
            await self._engine.load_structure(source, format)
        finally:
            self._tracker.attach(self._engine)
        logger.info("viewer.load.end name={}", self._engine.structure_name)

    async def reset_view(self) -> None:
        await self._engine.reset_view()

    async def zoom_in(self) -> None:
        await self._engine.zoom_in()

    async def zoom_out(self) -> None:
        await self._engine.zoom_out()

    async def set_representation(self, kind: Representation) -> None:
        await self._engine.set_representation(kind)
        self._representation = kind

    async def show_water_molecules(self) -> None:
        await self._engine.show_water_molecules()

    async def hide_water_molecules(self) -> None:
        await self._engine.hide_water_molecules()

    async def hide_ligands(self) -> None:
        await self._engine.hide_ligands()

    async def focus_on_chain(self, chain_id: str) -> None:
        await self._engine.focus_on_chain(chain_id)

    async def highlight_chain(self, chain_id: str) -> None:
        await self._engine.highlight_chain(chain_id)

    async def clear_highlights(self) -> None:
        await self._engine.clear_highlights()

    async def show_only_selected(self) -> None:
        await self._engine.show_only_selected()

    async def show_full_structure(self) -> None:
        await self._engine.show_full_structure()

    async def select_residue(self, residue_id: int, chain_id: str | None = None) -> str:
        return await self._engine.select_residue(residue_id, chain_id)

    async def select_residue_range(self, chain_id: str, start_residue: int, end_residue: int) -> str:
        return await self._engine.select_residue_range(chain_id, start_residue, end_residue)

    async def clear_selection(self) -> None:
        await self._engine.clear_selection()

    async def get_selection_info(self) -> str:
        return render_selection_details(self._tracker.current)

    async def get_current_selection(self) -> SelectionInfo | None:
        return self._tracker.current

    async def get_structure_info(self) -> str:
        return await self._engine.get_structure_info()

    def close(self) -> None:
        self._tracker.detach()
