"""Retrieval stage: standalone query in, formatted context out."""

from __future__ import annotations

import logging

from convo_rag.exceptions import RetrievalError
from convo_rag.formatters.documents import DocumentFormatter
from convo_rag.models.passage import RetrievedPassage
from convo_rag.protocols.retriever import Retriever

from ._call import maybe_await

logger = logging.getLogger(__name__)


class RetrievalStage:
    """Fetches passages for a query and serializes them for the prompt.

    Retriever failures propagate unmodified -- there is no retry and no
    fallback context.
    """

    __slots__ = ("_formatter", "_retriever")

    def __init__(self, retriever: Retriever, formatter: DocumentFormatter | None = None) -> None:
        self._retriever = retriever
        self._formatter = formatter or DocumentFormatter()

    def __repr__(self) -> str:
        return f"RetrievalStage(retriever={self._retriever!r})"

    @property
    def formatter(self) -> DocumentFormatter:
        return self._formatter

    async def search(self, query: str) -> list[RetrievedPassage]:
        """Return the retriever's passages for ``query`` in ranked order."""
        passages = await maybe_await(self._retriever.search(query))
        if not isinstance(passages, list | tuple):
            msg = (
                f"Retriever {self._retriever!r} must return a list of RetrievedPassage, "
                f"got {type(passages).__name__}"
            )
            raise RetrievalError(msg)
        logger.debug("Retrieved %d passages for query %r", len(passages), query)
        return list(passages)

    async def retrieve(self, query: str) -> str:
        """Return the formatted context block for ``query``."""
        passages = await self.search(query)
        return self._formatter.format(passages)
