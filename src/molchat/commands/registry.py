"""Command registry and failure-isolating dispatcher."""

from __future__ import annotations

import builtins
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

from loguru import logger
from pydantic import BaseModel

from molchat.commands.params import NoParams
from molchat.errors import NoStructureLoadedError
from molchat.viewer.protocol import ViewerControls

NO_VIEWER_MESSAGE = "No molecular viewer available. Please load a structure first."
NO_STRUCTURE_MESSAGE = "No structure is loaded. Please load a protein structure first."

Executor = Callable[[ViewerControls, Any], Awaitable[str]]


@dataclass(frozen=True)
class CommandDescriptor:
    """Command metadata and runtime handle."""

    name: str
    description: str
    execute: Executor
    failure: str
    params_type: type[BaseModel] = NoParams


class CommandRegistry:
    """Ordered command table bound to one viewer."""

    def __init__(self, controls: ViewerControls | None = None) -> None:
        self._controls = controls
        self._commands: dict[str, CommandDescriptor] = {}

    def bind(self, controls: ViewerControls) -> None:
        self._controls = controls

    def register(self, descriptor: CommandDescriptor) -> None:
        if descriptor.name in self._commands:
            raise ValueError(f"Duplicate command name: {descriptor.name}")
        self._commands[descriptor.name] = descriptor

    def has(self, name: str) -> bool:
        return name in self._commands

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def get(self, name: str) -> CommandDescriptor | None:
        return self._commands.get(name)

    def names(self) -> builtins.list[str]:
        return list(self._commands)

    def descriptors(self) -> builtins.list[CommandDescriptor]:
        return list(self._commands.values())

    def catalog_rows(self) -> builtins.list[str]:
        return [f"{descriptor.name}: {descriptor.description}" for descriptor in self._commands.values()]

    def help_text(self, name: str) -> str:
        return f"Unknown command: {name}. Available commands: {', '.join(self._commands)}"

    async def execute(self, name: str, params: BaseModel | Mapping[str, Any] | None = None) -> str:
        """Run one command. Never raises: failures come back as sentences."""
        descriptor = self.get(name)
        if descriptor is None:
            logger.warning("command.unknown name={}", name)
            return self.help_text(name)
        if self._controls is None:
            return NO_VIEWER_MESSAGE

        logger.info("command.call.start name={} params={}", name, params)
        start = time.monotonic()
        try:
            resolved = _resolve_params(descriptor, params)
            return await descriptor.execute(self._controls, resolved)
        except NoStructureLoadedError:
            logger.warning("command.call.no_structure name={}", name)
            return NO_STRUCTURE_MESSAGE
        except Exception:
            logger.exception("command.call.error name={}", name)
            return descriptor.failure
        finally:
            duration = time.monotonic() - start
            logger.info("command.call.end name={} duration={:.3f}ms", name, duration * 1000)


def _resolve_params(descriptor: CommandDescriptor, params: BaseModel | Mapping[str, Any] | None) -> BaseModel:
    if params is None:
        return descriptor.params_type()
    if isinstance(params, descriptor.params_type):
        return params
    if isinstance(params, Mapping):
        return descriptor.params_type.model_validate(dict(params))
    raise TypeError(f"{descriptor.name} expects {descriptor.params_type.__name__}, got {type(params).__name__}")
