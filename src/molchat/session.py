"""Session context and input sequencing."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from loguru import logger

from molchat.ai.orchestrator import AIOrchestrator
from molchat.ai.service import LanguageModelService, LLMFactory
from molchat.commands.builtin import register_builtin_commands
from molchat.commands.detector import CommandParser
from molchat.commands.registry import CommandRegistry
from molchat.config import Settings, load_settings
from molchat.errors import ServiceError
from molchat.integrations.republic_client import build_llm
from molchat.logging_utils import bind_session
from molchat.selection.tracker import SelectionTracker
from molchat.types import AIContext, ChatMessage, MessageRole
from molchat.viewer.controls import SessionControls
from molchat.viewer.headless import HeadlessViewer
from molchat.viewer.protocol import ViewerEngine

DIRECT_COMMAND_HINT = 'You can still use direct commands like "reset_view" or "switch_to_surface".'
NOT_CONFIGURED_REPLY = f"AI features require a valid API key. {DIRECT_COMMAND_HINT}"
SERVICE_ERROR_REPLY = "Sorry, I encountered an error. Please try again or use direct commands."


@dataclass
class Session:
    """Single-instance collaborators for one chat session."""

    engine: ViewerEngine
    tracker: SelectionTracker
    controls: SessionControls
    registry: CommandRegistry
    parser: CommandParser
    service: LanguageModelService
    orchestrator: AIOrchestrator
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    messages: list[ChatMessage] = field(default_factory=list)

    def context(self) -> AIContext:
        return AIContext(
            structure_name=self.controls.structure_name,
            representation=self.controls.representation.value,
            has_structure=self.controls.has_structure(),
            selection=self.tracker.current,
        )

    async def load_structure(self, source: str, format: str | None = None) -> ChatMessage:
        bind_session(self.session_id)
        try:
            await self.controls.load_structure(source, format)
        except Exception as exc:
            logger.exception("session.load.error source={}", source)
            return self._record("system", f"Failed to load structure from {source}: {exc}")
        return self._record("system", f"Loaded structure {self.controls.structure_name}.")

    async def handle_input(self, text: str) -> ChatMessage:
        """Try a direct command first, then the language model."""
        bind_session(self.session_id)
        self._record("user", text)

        parsed = self.parser.parse(text)
        if parsed is not None:
            logger.info("session.input.direct name={}", parsed.name)
            result = await self.registry.execute(parsed.name, parsed.params)
            return self._record("assistant", result, (parsed.name,))

        if not self.service.is_configured():
            logger.info("session.input.ai_unavailable")
            return self._record("system", NOT_CONFIGURED_REPLY)

        try:
            outcome = await self.orchestrator.process(text, self.context())
        except ServiceError as exc:
            logger.warning("session.input.service_error kind={} error={}", exc.kind, exc.message)
            return self._record("system", f"{exc.message}\n\n{SERVICE_ERROR_REPLY}")
        return self._record("assistant", outcome.text, outcome.commands_executed)

    async def drain(self) -> None:
        await self.tracker.drain()

    def close(self) -> None:
        self.controls.close()

    def _record(self, role: MessageRole, text: str, commands: tuple[str, ...] = ()) -> ChatMessage:
        message = ChatMessage(role=role, text=text, commands_executed=commands)
        self.messages.append(message)
        return message


def build_session(
    settings: Settings | None = None,
    *,
    engine: ViewerEngine | None = None,
    llm_factory: LLMFactory = build_llm,
) -> Session:
    settings = settings or load_settings()
    engine = engine if engine is not None else HeadlessViewer()
    tracker = SelectionTracker(click_grace_seconds=settings.click_grace_seconds)
    controls = SessionControls(engine, tracker)
    registry = register_builtin_commands(CommandRegistry(controls))
    parser = CommandParser(registry)
    service = LanguageModelService(settings, llm_factory=llm_factory)
    session = Session(
        engine=engine,
        tracker=tracker,
        controls=controls,
        registry=registry,
        parser=parser,
        service=service,
        orchestrator=AIOrchestrator(service, parser, registry),
    )
    bind_session(session.session_id)
    logger.info(
        "session.start id={} model={} configured={}",
        session.session_id,
        service.model,
        service.is_configured(),
    )
    return session
