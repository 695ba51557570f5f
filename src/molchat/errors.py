"""Application-level exception types for molchat."""

from __future__ import annotations

from typing import Literal

ServiceErrorKind = Literal["not_configured", "auth", "quota", "rate_limit", "connectivity", "empty", "unknown"]


class MolchatError(Exception):
    """Base exception for molchat."""


class ConfigurationError(MolchatError):
    """Base exception for configuration and startup validation errors."""


class KeyValidationError(ConfigurationError):
    """Raised when an API key does not match the expected format."""


class NoStructureLoadedError(MolchatError):
    """Raised by viewer engines when an operation needs a loaded structure."""


class ServiceError(MolchatError):
    """Raised when the remote language-model service cannot answer."""

    def __init__(self, kind: ServiceErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
