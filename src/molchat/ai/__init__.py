"""Language-model request handling."""

from .orchestrator import AIOrchestrator, OrchestratorResult
from .service import LanguageModelService, validate_key_format

__all__ = ["AIOrchestrator", "LanguageModelService", "OrchestratorResult", "validate_key_format"]
