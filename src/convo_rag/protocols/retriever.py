"""Retriever protocol definition.

Any object with a ``search`` method matching this signature can be used
as the passage source of a pipeline -- no inheritance required.
"""

from __future__ import annotations

from collections.abc import Awaitable
from typing import Protocol, runtime_checkable

from convo_rag.models.passage import RetrievedPassage


@runtime_checkable
class Retriever(Protocol):
    """Protocol for passage retrieval (embedding model plus vector index).

    ``search`` may be a plain method or a coroutine function; the retrieval
    stage awaits the result when it is awaitable.
    """

    def search(
        self, query: str
    ) -> list[RetrievedPassage] | Awaitable[list[RetrievedPassage]]:
        """Return passages relevant to ``query``.

        Parameters:
            query: A standalone search query.

        Returns:
            Passages ranked by relevance (most relevant first).  The
            order is preserved by the pipeline.

        Raises:
            RetrievalError: When the index or embedding service fails.
        """
        ...
