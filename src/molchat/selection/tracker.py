"""Single-selection tracking driven by engine interaction events."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal

from blinker import Signal
from loguru import logger

from molchat.selection.describe import describe_element
from molchat.types import SelectionInfo
from molchat.viewer.protocol import ElementRecord, Loci, ViewerEngine

DEFAULT_CLICK_GRACE_SECONDS = 0.1

Strategy = Literal["selection", "highlight"]
Trigger = Literal["manual", "selection_changed", "click"]


@dataclass(frozen=True)
class ExtractionResult:
    """Outcome of one extraction attempt."""

    trigger: Trigger
    strategy: Strategy | None = None
    info: SelectionInfo | None = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.info is not None


class SelectionTracker:
    """Owns the current selection; reads the engine, never mutates it.

    The tracker has two states, unselected and selected. Only a successful
    extraction moves it to selected; a failed extraction keeps whatever was
    selected before. Only ``reset`` clears the selection.
    """

    def __init__(self, *, click_grace_seconds: float = DEFAULT_CLICK_GRACE_SECONDS) -> None:
        self._click_grace_seconds = click_grace_seconds
        self._engine: ViewerEngine | None = None
        self._info: SelectionInfo | None = None
        self._generation = 0
        self._disconnects: list[Callable[[], None]] = []
        self._pending: set[asyncio.Task[None]] = set()
        self.last_result: ExtractionResult | None = None
        self.changed = Signal("molchat.selection.changed")

    @property
    def current(self) -> SelectionInfo | None:
        return self._info

    @property
    def state(self) -> Literal["unselected", "selected"]:
        return "unselected" if self._info is None else "selected"

    @property
    def attached(self) -> bool:
        return self._engine is not None

    def attach(self, engine: ViewerEngine) -> None:
        """Subscribe to selection, click and hover events of one engine."""
        self.detach()
        self._engine = engine

        async def _on_selection_changed(_sender: Any, **_kwargs: Any) -> None:
            self.extract("selection_changed")

        async def _on_click(_sender: Any, **_kwargs: Any) -> None:
            self._schedule_click_read()

        async def _on_hover(_sender: Any, **_kwargs: Any) -> None:
            self._observe_hover()

        for signal, receiver in (
            (engine.selection_changed, _on_selection_changed),
            (engine.click, _on_click),
            (engine.hover, _on_hover),
        ):
            signal.connect(receiver, weak=False)
            self._disconnects.append(_disconnector(signal, receiver))
        logger.debug("selection.tracker.attached engine={}", type(engine).__name__)

    def detach(self) -> None:
        """Release every subscription and drop pending delayed reads."""
        for disconnect in self._disconnects:
            disconnect()
        self._disconnects.clear()
        self._cancel_pending()
        if self._engine is not None:
            logger.debug("selection.tracker.detached")
        self._engine = None

    def reset(self) -> None:
        """Return to unselected. Runs synchronously so callers can reset before awaiting a reload."""
        self._generation += 1
        self._cancel_pending()
        self.last_result = None
        if self._info is not None:
            self._info = None
            logger.info("selection.reset")
            self.changed.send(self, info=None)

    def extract(self, trigger: Trigger = "manual") -> ExtractionResult:
        """Run the extraction cascade once and commit on success."""
        engine = self._engine
        if engine is None or not engine.has_structure():
            return self._record(ExtractionResult(trigger=trigger, reason="no structure loaded"))

        strategies: tuple[tuple[Strategy, Callable[[ViewerEngine], Loci | None]], ...] = (
            ("selection", _read_selection_state),
            ("highlight", _read_highlight),
        )
        for strategy, read in strategies:
            try:
                loci = read(engine)
            except Exception as exc:
                logger.warning("selection.read.error strategy={} error={!s}", strategy, exc)
                continue
            if loci is None or loci.is_empty:
                continue

            info = _selection_from_element(engine, loci.elements[0], atom_count=len(loci.elements))
            self._commit(info)
            return self._record(ExtractionResult(trigger=trigger, strategy=strategy, info=info))

        logger.debug("selection.extract.miss trigger={} kept={}", trigger, self.state)
        return self._record(ExtractionResult(trigger=trigger, reason="nothing selected"))

    async def drain(self) -> None:
        """Wait for delayed click reads that are still pending."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _commit(self, info: SelectionInfo) -> None:
        self._info = info
        logger.info("selection.updated description={}", info.description)
        self.changed.send(self, info=info)

    def _record(self, result: ExtractionResult) -> ExtractionResult:
        self.last_result = result
        return result

    def _schedule_click_read(self) -> None:
        generation = self._generation
        task = asyncio.get_running_loop().create_task(self._read_after_grace(generation))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _read_after_grace(self, generation: int) -> None:
        # Engines may commit the click to their selection state after the event fires.
        await asyncio.sleep(self._click_grace_seconds)
        if generation != self._generation:
            logger.debug("selection.click.stale generation={}", generation)
            return
        self.extract("click")

    def _observe_hover(self) -> None:
        if self._info is not None or self._engine is None:
            return
        try:
            loci = _read_highlight(self._engine)
        except Exception as exc:
            logger.debug("selection.hover.error error={!s}", exc)
            return
        if loci is None or loci.is_empty:
            return
        element = loci.elements[0]
        logger.debug(
            "selection.hover.preview description={}",
            describe_element(element.residue_name, element.residue_number, element.chain_id, element.atom_name),
        )

    def _cancel_pending(self) -> None:
        for task in self._pending:
            task.cancel()
        self._pending.clear()


def _disconnector(signal: Signal, receiver: Callable[..., Any]) -> Callable[[], None]:
    return lambda: signal.disconnect(receiver)


def _read_selection_state(engine: ViewerEngine) -> Loci | None:
    for entry in engine.selection_entries():
        if not entry.is_empty:
            return entry
    return None


def _read_highlight(engine: ViewerEngine) -> Loci | None:
    return engine.last_highlight()


def _selection_from_element(engine: ViewerEngine, element: ElementRecord, *, atom_count: int) -> SelectionInfo:
    try:
        coordinates = engine.position_of(element)
    except Exception as exc:
        logger.debug("selection.coordinates.unavailable error={!s}", exc)
        coordinates = None

    return SelectionInfo(
        description=describe_element(
            element.residue_name,
            element.residue_number,
            element.chain_id,
            element.atom_name,
        ),
        residue_name=element.residue_name,
        residue_number=element.residue_number,
        chain_id=element.chain_id,
        atom_name=element.atom_name,
        element_type=element.element_symbol,
        atom_count=atom_count,
        coordinates=coordinates,
    )
