"""Natural-language request orchestration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from loguru import logger

from molchat.ai.directives import find_directives, strip_directives
from molchat.commands.detector import CommandParser
from molchat.commands.registry import CommandRegistry
from molchat.types import AIContext

DIRECTIVE_TRAILING_PUNCTUATION = ".,;:!"


class CompletionService(Protocol):
    async def process_command(self, message: str, context: AIContext, *, catalog: list[str]) -> str: ...


@dataclass(frozen=True)
class OrchestratorResult:
    """Outcome of one natural-language request."""

    narrative: str
    commands_executed: tuple[str, ...] = ()
    results: tuple[str, ...] = ()
    reply: str = field(default="", repr=False)

    @property
    def text(self) -> str:
        """Narrative followed by command results, separated by a blank line."""
        if not self.results:
            return self.narrative
        joined = "\n".join(self.results)
        if not self.narrative:
            return joined
        return f"{self.narrative}\n\n{joined}"


class AIOrchestrator:
    """Ask the model, then run the directives it embedded in its reply."""

    def __init__(self, service: CompletionService, parser: CommandParser, registry: CommandRegistry) -> None:
        self._service = service
        self._parser = parser
        self._registry = registry

    async def process(self, message: str, context: AIContext) -> OrchestratorResult:
        # ServiceError propagates to the session.
        reply = await self._service.process_command(message, context, catalog=self._registry.catalog_rows())
        directives = find_directives(reply)
        narrative = strip_directives(reply)

        executed: list[str] = []
        results: list[str] = []
        for directive in directives:
            parsed = self._parser.parse(directive.body.rstrip(DIRECTIVE_TRAILING_PUNCTUATION))
            if parsed is None:
                logger.warning("ai.directive.unknown body={}", directive.body)
                continue
            # Viewer mutations do not commute; dispatch in reply order.
            results.append(await self._registry.execute(parsed.name, parsed.params))
            executed.append(parsed.name)

        logger.info(
            "ai.process.done directives={} executed={}",
            len(directives),
            ",".join(executed) or "-",
        )
        return OrchestratorResult(
            narrative=narrative,
            commands_executed=tuple(executed),
            results=tuple(results),
            reply=reply,
        )
