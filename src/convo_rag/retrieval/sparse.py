"""Sparse (BM25) passage retrieval.

Requires the 'bm25' extra: pip install convo-rag[bm25]
"""

from __future__ import annotations

import heapq
import logging
import threading
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from convo_rag.exceptions import RetrievalError
from convo_rag.models.passage import RetrievedPassage

if TYPE_CHECKING:
    from rank_bm25 import BM25Okapi

logger = logging.getLogger(__name__)


class SparsePassageRetriever:
    """BM25-based retrieval over an in-process passage list.

    A local stand-in for a vector index, useful for development and the
    interactive CLI.  Implements the Retriever protocol.
    """

    __slots__ = ("_bm25", "_lock", "_passages", "_tokenize_fn", "_top_k")

    def __init__(
        self,
        top_k: int = 4,
        tokenize_fn: Callable[[str], list[str]] | None = None,
    ) -> None:
        if top_k <= 0:
            msg = "top_k must be a positive integer"
            raise ValueError(msg)
        self._top_k = top_k
        self._tokenize_fn = tokenize_fn or self._default_tokenize
        self._bm25: BM25Okapi | None = None
        self._passages: list[RetrievedPassage] = []
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return (
            f"SparsePassageRetriever(indexed_passages={len(self._passages)}, "
            f"top_k={self._top_k})"
        )

    @staticmethod
    def _default_tokenize(text: str) -> list[str]:
        """Simple whitespace + lowercase tokenization."""
        return text.lower().split()

    def index(self, passages: Iterable[RetrievedPassage]) -> int:
        """Build the BM25 index, replacing any previous one. Returns the count."""
        try:
            from rank_bm25 import BM25Okapi
        except ImportError as e:
            msg = (
                "rank-bm25 is required for SparsePassageRetriever. "
                "Install it with: pip install convo-rag[bm25]"
            )
            raise RetrievalError(msg) from e

        indexed = list(passages)
        if not indexed:
            msg = "Cannot build a BM25 index from zero passages"
            raise RetrievalError(msg)
        bm25 = BM25Okapi([self._tokenize_fn(p.text) for p in indexed])
        with self._lock:
            self._passages = indexed
            self._bm25 = bm25
        logger.debug("Indexed %d passages for BM25 retrieval", len(indexed))
        return len(indexed)

    def search(self, query: str) -> list[RetrievedPassage]:
        """Return up to ``top_k`` passages with a positive BM25 score."""
        with self._lock:
            bm25, passages = self._bm25, self._passages
        if bm25 is None:
            msg = "Must call index() before search()"
            raise RetrievalError(msg)

        scores = bm25.get_scores(self._tokenize_fn(query))
        if len(scores) == 0:
            return []

        raw_max = max(scores)
        max_score = raw_max if raw_max > 0 else 1.0
        top_entries = heapq.nlargest(
            self._top_k, ((float(s / max_score), i) for i, s in enumerate(scores)),
        )

        results: list[RetrievedPassage] = []
        for score, idx in top_entries:
            if score <= 0:
                continue
            passage = passages[idx]
            results.append(
                passage.model_copy(update={
                    "score": score,
                    "metadata": {**passage.metadata, "retrieval_method": "sparse_bm25"},
                })
            )
        return results
