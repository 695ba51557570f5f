from __future__ import annotations

import asyncio

import pytest

from molchat.config import Settings
from molchat.session import NOT_CONFIGURED_REPLY, SERVICE_ERROR_REPLY, Session, build_session
from molchat.types import Representation
from molchat.viewer.headless import HeadlessViewer
from tests.fakes import VALID_KEY, FakeEngine, FakeLLM, element


def _session(settings: Settings, engine: FakeEngine, llm: FakeLLM, *, api_key: str | None = VALID_KEY) -> Session:
    return build_session(
        settings.model_copy(update={"api_key": api_key}),
        engine=engine,
        llm_factory=lambda _settings, _key: llm,
    )


@pytest.mark.asyncio
async def test_free_text_goes_through_the_model(settings: Settings, fake_engine: FakeEngine, fake_llm: FakeLLM) -> None:
    fake_llm.replies = ["Switching now [COMMAND: switch_to_surface]"]
    session = _session(settings, fake_engine, fake_llm)

    reply = await session.handle_input("switch to surface view")

    assert fake_engine.called("set_representation") == [(Representation.SURFACE,)]
    assert reply.role == "assistant"
    assert reply.commands_executed == ("switch_to_surface",)
    assert reply.text.split("\n\n")[0] == "Switching now"
    assert "[COMMAND" not in reply.text
    assert session.context().representation == "surface"


@pytest.mark.asyncio
async def test_direct_command_skips_the_model(settings: Settings, fake_engine: FakeEngine, fake_llm: FakeLLM) -> None:
    session = _session(settings, fake_engine, fake_llm)

    reply = await session.handle_input("zoom_chain B")

    assert reply.text == "Zoomed to chain B."
    assert reply.commands_executed == ("zoom_chain",)
    assert fake_llm.prompts == []
    assert [message.role for message in session.messages] == ["user", "assistant"]


@pytest.mark.asyncio
async def test_free_text_without_key_suggests_direct_commands(
    settings: Settings, fake_engine: FakeEngine, fake_llm: FakeLLM
) -> None:
    session = _session(settings, fake_engine, fake_llm, api_key=None)

    reply = await session.handle_input("make it look nice")

    assert reply.role == "system"
    assert reply.text == NOT_CONFIGURED_REPLY
    assert reply.commands_executed == ()
    assert fake_engine.calls == []


@pytest.mark.asyncio
async def test_service_failure_shows_no_partial_narrative(
    settings: Settings, fake_engine: FakeEngine, fake_llm: FakeLLM
) -> None:
    fake_llm.replies = [RuntimeError("RATE_LIMIT_EXCEEDED")]
    session = _session(settings, fake_engine, fake_llm)

    reply = await session.handle_input("show me the surface")

    assert reply.role == "system"
    assert reply.text.startswith("Rate limit exceeded.")
    assert reply.text.endswith(SERVICE_ERROR_REPLY)
    assert fake_engine.calls == []


@pytest.mark.asyncio
async def test_context_carries_the_current_selection(
    settings: Settings, fake_engine: FakeEngine, fake_llm: FakeLLM
) -> None:
    fake_llm.replies = ["That is an alanine."]
    session = _session(settings, fake_engine, fake_llm)
    await fake_engine.select(element())

    context = session.context()
    await session.handle_input("tell me about this residue")

    assert context.has_structure
    assert context.selection is not None
    assert context.selection.description == "ALA 42 (Chain A) - CA atom"
    assert "- Description: ALA 42 (Chain A) - CA atom" in fake_llm.prompts[0]


@pytest.mark.asyncio
async def test_reload_resets_selection_and_representation(
    settings: Settings, fake_engine: FakeEngine, fake_llm: FakeLLM
) -> None:
    session = _session(settings, fake_engine, fake_llm)
    await session.handle_input("switch_to_surface")
    await fake_engine.select(element())

    gate = asyncio.Event()
    fake_engine.load_gate = gate
    task = asyncio.create_task(session.load_structure("4hhb.pdb"))
    await asyncio.sleep(0)
    assert session.tracker.current is None
    gate.set()
    message = await task

    assert message.text == "Loaded structure 4hhb.pdb."
    assert session.context().representation == "cartoon"
    assert session.context().selection is None


@pytest.mark.asyncio
async def test_load_failure_becomes_system_message(
    settings: Settings, fake_engine: FakeEngine, fake_llm: FakeLLM
) -> None:
    fake_engine.fail.add("load_structure")
    session = _session(settings, fake_engine, fake_llm)

    message = await session.load_structure("missing.pdb")

    assert message.role == "system"
    assert message.text.startswith("Failed to load structure from missing.pdb")
    assert session.tracker.attached


@pytest.mark.asyncio
async def test_failed_reload_leaves_default_representation(settings: Settings, tiny_pdb: str, tmp_path) -> None:
    session = build_session(settings, engine=HeadlessViewer())
    await session.load_structure(tiny_pdb)
    await session.handle_input("switch_to_surface")
    assert session.context().representation == "surface"

    message = await session.load_structure(str(tmp_path / "missing.pdb"))

    context = session.context()
    assert message.text.startswith("Failed to load structure")
    assert context.has_structure is False
    assert context.representation == "cartoon"
    assert context.selection is None
