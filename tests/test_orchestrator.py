from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from molchat.ai.orchestrator import AIOrchestrator, OrchestratorResult
from molchat.commands.builtin import register_builtin_commands
from molchat.commands.detector import CommandParser
from molchat.commands.registry import CommandRegistry
from molchat.errors import ServiceError
from molchat.selection.tracker import SelectionTracker
from molchat.types import AIContext, Representation
from molchat.viewer.controls import SessionControls
from tests.fakes import FakeEngine


@dataclass
class ScriptedService:
    reply: str | Exception
    catalogs: list[list[str]] = field(default_factory=list)

    async def process_command(self, message: str, context: AIContext, *, catalog: list[str]) -> str:
        self.catalogs.append(list(catalog))
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply


def _orchestrator(engine: FakeEngine, reply: str | Exception) -> tuple[AIOrchestrator, ScriptedService]:
    registry = register_builtin_commands(CommandRegistry(SessionControls(engine, SelectionTracker())))
    service = ScriptedService(reply)
    return AIOrchestrator(service, CommandParser(registry), registry), service


@pytest.mark.asyncio
async def test_directives_run_in_reply_order(fake_engine: FakeEngine) -> None:
    orchestrator, service = _orchestrator(fake_engine, "Sure! [COMMAND: reset_view] Done. [COMMAND: switch_to_surface]")

    result = await orchestrator.process("tidy up", AIContext())

    assert result.narrative == "Sure!  Done."
    assert result.commands_executed == ("reset_view", "switch_to_surface")
    assert [name for name, _ in fake_engine.calls] == ["reset_view", "set_representation"]
    assert fake_engine.called("set_representation") == [(Representation.SURFACE,)]
    assert "reset_view: Reset camera to default position" in service.catalogs[0]


@pytest.mark.asyncio
async def test_unknown_directive_is_skipped(fake_engine: FakeEngine) -> None:
    orchestrator, _ = _orchestrator(fake_engine, "Okay [COMMAND: fly_away] [COMMAND: hide_ligands]")

    result = await orchestrator.process("hide the ligands", AIContext())

    assert result.commands_executed == ("hide_ligands",)
    assert fake_engine.called("hide_ligands") == [()]


@pytest.mark.asyncio
async def test_failing_command_does_not_abort_the_batch(fake_engine: FakeEngine) -> None:
    fake_engine.fail.add("set_representation")
    orchestrator, _ = _orchestrator(fake_engine, "[COMMAND: switch_to_surface] [COMMAND: reset_view]")

    result = await orchestrator.process("surface then reset", AIContext())

    assert result.commands_executed == ("switch_to_surface", "reset_view")
    assert result.results[0] == "Failed to switch to surface representation."
    assert fake_engine.called("reset_view") == [()]
    assert result.text == (
        "Failed to switch to surface representation.\nCamera view has been reset to show the entire structure."
    )


@pytest.mark.asyncio
async def test_directive_arguments_reach_the_command(fake_engine: FakeEngine) -> None:
    orchestrator, _ = _orchestrator(fake_engine, "Looking at chain B. [COMMAND: zoom_chain B]")

    result = await orchestrator.process("show me chain b", AIContext())

    assert fake_engine.called("focus_on_chain") == [("B",)]
    assert result.text == "Looking at chain B.\n\nZoomed to chain B."


@pytest.mark.asyncio
async def test_service_errors_propagate_without_dispatch(fake_engine: FakeEngine) -> None:
    orchestrator, _ = _orchestrator(fake_engine, ServiceError("quota", "API quota exceeded."))

    with pytest.raises(ServiceError) as exc_info:
        await orchestrator.process("anything", AIContext())

    assert exc_info.value.kind == "quota"
    assert fake_engine.calls == []


def test_result_text_without_commands() -> None:
    result = OrchestratorResult(narrative="Proteins fold.")
    assert result.text == "Proteins fold."


@pytest.mark.asyncio
async def test_trailing_punctuation_in_directive_body(fake_engine: FakeEngine) -> None:
    orchestrator, _ = _orchestrator(fake_engine, "Done [COMMAND: reset_view.] [COMMAND: zoom_chain B;]")

    result = await orchestrator.process("reset and zoom", AIContext())

    assert result.commands_executed == ("reset_view", "zoom_chain")
    assert fake_engine.called("focus_on_chain") == [("B",)]
