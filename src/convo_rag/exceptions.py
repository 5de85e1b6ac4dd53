"""Custom exceptions for convo-rag."""

from __future__ import annotations

__all__ = [
    "CompletionError",
    "ConvoRagError",
    "RetrievalError",
    "StorageError",
    "TemplateNotFoundError",
]


class ConvoRagError(Exception):
    """Base exception for all convo-rag errors."""


class RetrievalError(ConvoRagError):
    """Raised when the passage index or embedding service fails."""


class CompletionError(ConvoRagError):
    """Raised when the language-model service fails, errors, or rate-limits."""


class TemplateNotFoundError(ConvoRagError):
    """Raised when a prompt template is missing or misconfigured."""

    def __init__(self, name: str, message: str | None = None) -> None:
        super().__init__(message or f"Prompt template '{name}' not found")
        self.name = name


class StorageError(ConvoRagError):
    """Raised when a history backend cannot read or write its data."""
