"""Remote language-model service."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from typing import Any, Protocol

from blinker import Signal
from loguru import logger

from molchat.ai.prompt import SYSTEM_PROMPT, render_prompt
from molchat.config import Settings
from molchat.errors import KeyValidationError, ServiceError, ServiceErrorKind
from molchat.integrations.republic_client import build_llm
from molchat.types import AIContext, ApiKeyStatus, KeySource

API_KEY_PREFIX = "AIza"
MIN_API_KEY_LENGTH = 35
KEY_TEST_PROMPT = 'Hello, can you respond with just "OK"?'
NOT_CONFIGURED_MESSAGE = "AI API key not configured. Please add your API key in settings."

_ERROR_MARKERS: tuple[tuple[ServiceErrorKind, tuple[str, ...], str], ...] = (
    (
        "auth",
        ("api_key_invalid", "invalid api key", "401", "403", "unauthorized", "permission denied"),
        "Invalid API key. Please check your API key in settings.",
    ),
    ("quota", ("quota_exceeded", "quota"), "API quota exceeded. Please check your API usage limits."),
    (
        "rate_limit",
        ("rate_limit_exceeded", "rate limit", "429"),
        "Rate limit exceeded. Please wait a moment and try again.",
    ),
    (
        "connectivity",
        ("connection", "connect", "network", "timed out", "timeout", "unreachable"),
        "Failed to reach the AI service. Please check your internet connection.",
    ),
)
_FALLBACK_MESSAGE = "Failed to process command with AI. Please try again."


class ChatClient(Protocol):
    async def chat_async(self, prompt: str, **kwargs: Any) -> Any: ...


LLMFactory = Callable[[Settings, str], ChatClient]


def validate_key_format(api_key: str) -> str:
    """Return the trimmed key or raise before any network call is made."""
    key = api_key.strip()
    if not key.startswith(API_KEY_PREFIX) or len(key) < MIN_API_KEY_LENGTH:
        raise KeyValidationError(
            f'Invalid API key format. Keys should start with "{API_KEY_PREFIX}" '
            f"and be at least {MIN_API_KEY_LENGTH} characters long."
        )
    return key


def classify_service_error(exc: BaseException, *, default: ServiceErrorKind = "unknown") -> ServiceError:
    """Map a client exception onto a user-facing ``ServiceError``."""
    if isinstance(exc, ServiceError):
        return exc
    if isinstance(exc, TimeoutError):
        return ServiceError("connectivity", "The AI service did not respond in time. Please try again.")

    kind = getattr(exc, "kind", None)
    haystack = f"{getattr(kind, 'value', kind) or ''} {exc!s}".casefold()
    for error_kind, markers, message in _ERROR_MARKERS:
        if any(marker in haystack for marker in markers):
            return ServiceError(error_kind, message)
    if isinstance(exc, ConnectionError):
        return ServiceError("connectivity", _ERROR_MARKERS[-1][2])
    if default == "connectivity":
        return ServiceError(
            "connectivity",
            "Failed to connect to the AI service. Please check your internet connection and API key.",
        )
    return ServiceError(default, _FALLBACK_MESSAGE)


class LanguageModelService:
    """Holds the active API key and talks to the hosted model."""

    def __init__(self, settings: Settings, *, llm_factory: LLMFactory = build_llm) -> None:
        self._settings = settings
        self._llm_factory = llm_factory
        self._stored_key: str | None = None
        self._api_key = ""
        self._client: ChatClient | None = None
        self.key_changed = Signal("molchat.ai.key_changed")
        self.refresh()

    @property
    def model(self) -> str:
        return self._settings.model

    def is_configured(self) -> bool:
        return self._client is not None and bool(self._api_key)

    def refresh(self) -> None:
        """Pick up the stored key first, then the environment key."""
        key = (self._stored_key or self._settings.api_key or "").strip()
        if not key:
            self._clear()
            return
        if key == self._api_key:
            return
        try:
            self._initialize(key)
        except KeyValidationError as exc:
            logger.warning("llm.key.rejected source={} error={!s}", self._key_source(), exc)
            self._clear()

    def update_api_key(self, api_key: str | None) -> None:
        """Store a new key (or clear it) and notify listeners either way."""
        try:
            if api_key and api_key.strip():
                self._initialize(api_key)
                self._stored_key = self._api_key
            else:
                self._stored_key = None
                self._clear()
                self.refresh()
        finally:
            self.key_changed.send(self, configured=self.is_configured())

    def api_key_status(self) -> ApiKeyStatus:
        source = self._key_source()
        return ApiKeyStatus(present=source != "none", valid=self.is_configured(), source=source)

    async def test_key(self, api_key: str) -> bool:
        key = validate_key_format(api_key)
        client = self._llm_factory(self._settings, key)
        try:
            async with asyncio.timeout(self._settings.timeout_seconds):
                result = await client.chat_async(KEY_TEST_PROMPT, max_tokens=8)
        except Exception as exc:
            logger.warning("llm.key.test_failed error={!s}", exc)
            raise classify_service_error(exc, default="connectivity") from exc
        return bool(_reply_text(result).strip())

    async def process_command(self, message: str, context: AIContext, *, catalog: Sequence[str]) -> str:
        """Send one request and return the raw reply, directives included."""
        client = self._client
        if client is None:
            raise ServiceError("not_configured", NOT_CONFIGURED_MESSAGE)

        prompt = render_prompt(message, context, catalog)
        logger.info("llm.call.start model={} chars={}", self.model, len(prompt))
        try:
            async with asyncio.timeout(self._settings.timeout_seconds):
                result = await client.chat_async(
                    prompt,
                    system_prompt=SYSTEM_PROMPT,
                    max_tokens=self._settings.max_tokens,
                )
        except Exception as exc:
            logger.exception("llm.call.error model={}", self.model)
            raise classify_service_error(exc) from exc

        text = _reply_text(result)
        if not text.strip():
            raise ServiceError("empty", "The AI returned an empty response. Please try again.")
        logger.info("llm.call.end model={} chars={}", self.model, len(text))
        return text

    def _initialize(self, api_key: str) -> None:
        key = validate_key_format(api_key)
        self._client = self._llm_factory(self._settings, key)
        self._api_key = key
        logger.info("llm.initialized model={}", self.model)

    def _clear(self) -> None:
        self._client = None
        self._api_key = ""

    def _key_source(self) -> KeySource:
        if self._stored_key:
            return "stored"
        if self._settings.api_key:
            return "environment"
        return "none"


def _reply_text(result: Any) -> str:
    if isinstance(result, str):
        return result
    error = getattr(result, "error", None)
    if error is not None:
        raise classify_service_error(RuntimeError(str(getattr(error, "message", error))))
    text = getattr(result, "text", None)
    return text if isinstance(text, str) else ""
