"""Tests for DensePassageRetriever."""

from __future__ import annotations

import pytest

from convo_rag.exceptions import RetrievalError
from convo_rag.models.passage import RetrievedPassage
from convo_rag.protocols.retriever import Retriever
from convo_rag.retrieval.dense import DensePassageRetriever

_VOCAB = ("pasta", "cake", "soup")


def keyword_embed(text: str) -> list[float]:
    lowered = text.lower()
    return [1.0 if word in lowered else 0.0 for word in _VOCAB]


class TestDensePassageRetriever:
    def test_protocol_compliance(self) -> None:
        assert isinstance(DensePassageRetriever(keyword_embed), Retriever)

    def test_empty_index(self) -> None:
        assert DensePassageRetriever(keyword_embed).search("pasta") == []

    def test_ranks_by_similarity(self) -> None:
        retriever = DensePassageRetriever(keyword_embed)
        retriever.index([
            RetrievedPassage(text="Chocolate cake"),
            RetrievedPassage(text="Garlic pasta"),
            RetrievedPassage(text="Pasta soup"),
        ])

        results = retriever.search("pasta")

        assert [r.text for r in results][:2] == ["Garlic pasta", "Pasta soup"]
        assert results[0].score == pytest.approx(1.0)
        assert results[0].metadata["retrieval_method"] == "dense"

    def test_min_score_filters(self) -> None:
        retriever = DensePassageRetriever(keyword_embed, min_score=0.5)
        retriever.index([RetrievedPassage(text="Chocolate cake"), RetrievedPassage(text="pasta")])
        assert [r.text for r in retriever.search("pasta")] == ["pasta"]

    def test_top_k(self) -> None:
        retriever = DensePassageRetriever(keyword_embed, top_k=1)
        retriever.index([RetrievedPassage(text="pasta one"), RetrievedPassage(text="pasta two")])
        assert len(retriever.search("pasta")) == 1

    def test_embed_failure(self) -> None:
        def broken(text: str) -> list[float]:
            msg = "embedding service down"
            raise ConnectionError(msg)

        with pytest.raises(RetrievalError, match="Embedding function failed"):
            DensePassageRetriever(broken).index([RetrievedPassage(text="x")])

    def test_dimension_mismatch(self) -> None:
        dims = iter([[1.0, 0.0], [1.0, 0.0, 0.0]])
        retriever = DensePassageRetriever(lambda text: next(dims))
        retriever.index([RetrievedPassage(text="x")])
        with pytest.raises(RetrievalError, match="dimensionality"):
            retriever.search("q")

    def test_zero_query_vector_scores_zero(self) -> None:
        retriever = DensePassageRetriever(keyword_embed)
        retriever.index([RetrievedPassage(text="pasta"), RetrievedPassage(text="cake")])
        assert [r.score for r in retriever.search("sushi")] == [0.0, 0.0]

    def test_opposite_vectors_score_negative(self) -> None:
        vectors = {"up": [1.0, 0.0], "down": [-1.0, 0.0]}
        retriever = DensePassageRetriever(vectors.__getitem__, min_score=-1.0)
        retriever.index([RetrievedPassage(text="down")])
        assert retriever.search("up")[0].score == pytest.approx(-1.0)
