"""Republic integration helpers."""

from __future__ import annotations

from republic import LLM

from molchat.config import Settings


def build_llm(settings: Settings, api_key: str) -> LLM:
    """Build the Republic LLM client used for natural-language requests."""

    return LLM(
        settings.model,
        api_key=api_key,
        api_base=settings.api_base,
    )
