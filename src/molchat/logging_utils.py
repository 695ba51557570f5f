"""Runtime logging helpers."""

from __future__ import annotations

import os
import sys
from collections.abc import Callable
from contextvars import ContextVar
from logging import Handler
from typing import Literal

import loguru
from loguru import logger
from rich import get_console
from rich.logging import RichHandler

LogProfile = Literal["default", "chat"]

_PROFILE_FORMATS: dict[LogProfile, str] = {
    "chat": "[{extra[session]}] {message}",
    "default": "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<6} | {name}:{function}:{line} | {extra[session]} | {message}",
}
_CONFIGURED_PROFILE: LogProfile | None = None
_current_session: ContextVar[str] = ContextVar("molchat_session", default="-")


def current_session() -> str:
    return _current_session.get()


def bind_session(session_id: str) -> None:
    """Mark the running context as belonging to one session."""
    _current_session.set(session_id)


def _stderr_sink(message: loguru.Message) -> None:
    # Looked up per record; CLI test runners replace sys.stderr between invocations.
    sys.stderr.write(message)


def _build_chat_handler() -> Handler:
    return RichHandler(
        console=get_console(),
        show_level=True,
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )


def configure_logging(*, profile: LogProfile = "default", level: str | None = None) -> None:
    """Configure process-level logging once."""

    def inject_context(record: loguru.Record) -> None:
        record["extra"]["session"] = current_session()

    global _CONFIGURED_PROFILE
    if profile == _CONFIGURED_PROFILE:
        return

    resolved_level = (level or os.getenv("MOLCHAT_LOG_LEVEL", "INFO")).upper()
    sink: Handler | Callable[[loguru.Message], None] = _build_chat_handler() if profile == "chat" else _stderr_sink
    logger.remove()
    logger.add(
        sink,
        level=resolved_level,
        format=_PROFILE_FORMATS[profile],
        backtrace=False,
        diagnose=False,
    )
    logger.configure(patcher=inject_context)
    logger.debug("logging.configured profile={} level={}", profile, resolved_level)
    _CONFIGURED_PROFILE = profile
