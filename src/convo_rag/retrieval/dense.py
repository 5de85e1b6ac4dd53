"""Dense (embedding-based) passage retrieval."""

from __future__ import annotations

import heapq
import logging
import math
import threading
from collections.abc import Callable, Iterable

from convo_rag.exceptions import RetrievalError
from convo_rag.models.passage import RetrievedPassage

logger = logging.getLogger(__name__)


class DensePassageRetriever:
    """Brute-force cosine similarity search over embedded passages.

    The ``embed_fn`` is user-provided -- convo-rag never calls an
    embedding model directly.  For development and testing only;
    production use should wrap FAISS, Chroma, Qdrant, etc. behind the
    Retriever protocol.
    """

    __slots__ = ("_embed_fn", "_entries", "_lock", "_min_score", "_top_k")

    def __init__(
        self,
        embed_fn: Callable[[str], list[float]],
        top_k: int = 4,
        min_score: float = 0.0,
    ) -> None:
        if top_k <= 0:
            msg = "top_k must be a positive integer"
            raise ValueError(msg)
        self._embed_fn = embed_fn
        self._top_k = top_k
        self._min_score = min_score
        self._entries: list[tuple[RetrievedPassage, list[float]]] = []
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"DensePassageRetriever(passages={len(self._entries)}, top_k={self._top_k})"

    def _embed(self, text: str) -> list[float]:
        try:
            return self._embed_fn(text)
        except Exception as e:
            msg = "Embedding function failed"
            raise RetrievalError(msg) from e

    def index(self, passages: Iterable[RetrievedPassage]) -> int:
        """Embed and add passages to the index. Returns the number added."""
        new_entries = [(p, self._embed(p.text)) for p in passages]
        with self._lock:
            self._entries.extend(new_entries)
        return len(new_entries)

    def search(self, query: str) -> list[RetrievedPassage]:
        with self._lock:
            entries = list(self._entries)
        if not entries:
            return []

        query_embedding = self._embed(query)
        if any(len(emb) != len(query_embedding) for _, emb in entries):
            msg = "Query embedding does not match the indexed dimensionality"
            raise RetrievalError(msg)

        scored = [(_cosine(query_embedding, emb), i) for i, (_, emb) in enumerate(entries)]

        top = heapq.nlargest(self._top_k, scored)
        return [
            entries[i][0].model_copy(update={
                "score": score,
                "metadata": {**entries[i][0].metadata, "retrieval_method": "dense"},
            })
            for score, i in top
            if score >= self._min_score
        ]


def _cosine(a: list[float], b: list[float]) -> float:
    """Cosine similarity of two equal-length vectors; 0.0 if either is all zeros."""
    norm = math.hypot(*a) * math.hypot(*b)
    if norm == 0:
        return 0.0
    return max(-1.0, min(1.0, math.fsum(x * y for x, y in zip(a, b, strict=True)) / norm))
