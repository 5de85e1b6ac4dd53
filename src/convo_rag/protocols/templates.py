"""Prompt template provider protocol definition."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from convo_rag.models.prompt import PromptTemplate


@runtime_checkable
class PromptTemplateProvider(Protocol):
    """Resolves prompt templates by name."""

    def resolve(self, name: str) -> PromptTemplate:
        """Return the template registered under ``name``.

        Raises:
            TemplateNotFoundError: When no template has that name.
        """
        ...
