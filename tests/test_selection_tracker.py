from __future__ import annotations

import asyncio

import pytest

from molchat.selection.describe import render_selection_analysis, render_selection_details
from molchat.selection.tracker import SelectionTracker
from molchat.types import Coordinates, SelectionInfo
from molchat.viewer.controls import SessionControls
from molchat.viewer.protocol import Loci
from tests.fakes import FakeEngine, element


def _attached(engine: FakeEngine, *, grace: float = 0.0) -> SelectionTracker:
    tracker = SelectionTracker(click_grace_seconds=grace)
    tracker.attach(engine)
    return tracker


def test_selection_strategy_commits_first_element(fake_engine: FakeEngine) -> None:
    tracker = _attached(fake_engine)
    fake_engine.entries = [Loci(), Loci((element(), element(atom_name="CB")))]

    result = tracker.extract()

    assert result.ok
    assert result.strategy == "selection"
    assert tracker.state == "selected"
    assert tracker.current == SelectionInfo(
        description="ALA 42 (Chain A) - CA atom",
        residue_name="ALA",
        residue_number=42,
        chain_id="A",
        atom_name="CA",
        element_type="C",
        atom_count=2,
        coordinates=Coordinates(1.0, 2.0, 3.0),
    )


def test_highlight_strategy_is_the_fallback(fake_engine: FakeEngine) -> None:
    tracker = _attached(fake_engine)
    fake_engine.highlight = Loci((element("GLY", 7, "B", "N", "N"),))

    result = tracker.extract()

    assert result.strategy == "highlight"
    assert tracker.current is not None
    assert tracker.current.description == "GLY 7 (Chain B) - N atom"


def test_failed_extraction_keeps_previous_selection(fake_engine: FakeEngine) -> None:
    tracker = _attached(fake_engine)
    fake_engine.entries = [Loci((element(),))]
    tracker.extract()
    before = tracker.current

    fake_engine.entries = []
    result = tracker.extract()

    assert not result.ok
    assert result.reason == "nothing selected"
    assert tracker.current is before
    assert tracker.state == "selected"


def test_read_error_falls_through_to_highlight(fake_engine: FakeEngine) -> None:
    tracker = _attached(fake_engine)
    fake_engine.read_error = RuntimeError("selection manager unavailable")
    fake_engine.highlight = Loci((element("SER", 3),))

    result = tracker.extract()

    assert result.strategy == "highlight"
    assert tracker.current.residue_name == "SER"


def test_extraction_without_structure_is_a_no_op(fake_engine: FakeEngine) -> None:
    tracker = _attached(fake_engine)
    fake_engine.entries = [Loci((element(),))]
    fake_engine.structure = None

    result = tracker.extract()

    assert result.reason == "no structure loaded"
    assert tracker.current is None


@pytest.mark.asyncio
async def test_selection_changed_event_updates_tracker(fake_engine: FakeEngine) -> None:
    tracker = _attached(fake_engine)
    seen: list[SelectionInfo | None] = []
    tracker.changed.connect(lambda _sender, info: seen.append(info), weak=False)

    await fake_engine.select(element("TRP", 120, "C", "CZ2"))

    assert tracker.current.description == "TRP 120 (Chain C) - CZ2 atom"
    assert tracker.last_result.trigger == "selection_changed"
    assert seen == [tracker.current]


@pytest.mark.asyncio
async def test_click_reads_after_the_grace_period(fake_engine: FakeEngine) -> None:
    tracker = _attached(fake_engine, grace=0.01)

    await fake_engine.click.send_async(fake_engine)
    # The engine commits the clicked element only after reporting the click.
    fake_engine.entries = [Loci((element("HIS", 64),))]
    await tracker.drain()

    assert tracker.last_result.trigger == "click"
    assert tracker.current.residue_number == 64


@pytest.mark.asyncio
async def test_reset_cancels_pending_click_reads(fake_engine: FakeEngine) -> None:
    tracker = _attached(fake_engine, grace=0.01)
    fake_engine.entries = [Loci((element(),))]

    await fake_engine.click.send_async(fake_engine)
    tracker.reset()
    await tracker.drain()
    await asyncio.sleep(0.02)

    assert tracker.current is None


@pytest.mark.asyncio
async def test_hover_never_commits(fake_engine: FakeEngine) -> None:
    tracker = _attached(fake_engine)
    fake_engine.highlight = Loci((element(),))

    await fake_engine.hover.send_async(fake_engine)

    assert tracker.current is None
    assert tracker.last_result is None


@pytest.mark.asyncio
async def test_detached_tracker_ignores_events(fake_engine: FakeEngine) -> None:
    tracker = _attached(fake_engine)
    tracker.detach()

    await fake_engine.select(element())

    assert not tracker.attached
    assert tracker.current is None


def test_reset_notifies_listeners(fake_engine: FakeEngine) -> None:
    tracker = _attached(fake_engine)
    fake_engine.entries = [Loci((element(),))]
    tracker.extract()
    seen: list[SelectionInfo | None] = []
    tracker.changed.connect(lambda _sender, info: seen.append(info), weak=False)

    tracker.reset()

    assert tracker.state == "unselected"
    assert seen == [None]


@pytest.mark.asyncio
async def test_reload_clears_selection_before_engine_work(fake_engine: FakeEngine) -> None:
    tracker = SelectionTracker(click_grace_seconds=0)
    controls = SessionControls(fake_engine, tracker)
    await fake_engine.select(element())
    assert tracker.state == "selected"

    gate = asyncio.Event()
    fake_engine.load_gate = gate
    task = asyncio.create_task(controls.load_structure("2xyz.pdb"))
    await asyncio.sleep(0)

    assert fake_engine.called("load_structure") == [("2xyz.pdb", None)]
    assert tracker.state == "unselected"
    assert not tracker.attached

    gate.set()
    await task
    assert tracker.attached
    assert controls.structure_name == "2xyz.pdb"


def test_selection_renderings() -> None:
    info = SelectionInfo(
        description="LYS 10 (Chain B) - NZ atom",
        residue_name="LYS",
        residue_number=10,
        chain_id="B",
        atom_name="NZ",
        element_type="N",
        atom_count=1,
        coordinates=Coordinates(1.0, 2.5, -3.25),
    )

    details = render_selection_details(info)
    analysis = render_selection_analysis(info)

    assert details.splitlines()[0] == "Current Selection Details:"
    assert "- Chain: B" in details
    assert "- Coordinates: (1.00, 2.50, -3.25)" in details
    assert "- Type: Basic" in analysis
    assert "- Z: -3.250 Å" in analysis
