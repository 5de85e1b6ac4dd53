"""Shared fixtures and fakes for convo-rag tests."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence

import pytest

from convo_rag.exceptions import CompletionError, RetrievalError
from convo_rag.memory.store import SessionHistoryStore
from convo_rag.models.message import Message, PromptMessage
from convo_rag.models.passage import RetrievedPassage
from convo_rag.pipeline.pipeline import ConversationalPipeline

PASTA_PASSAGE = RetrievedPassage(text="Recipe: Aglio e Olio. Spaghetti, garlic, olive oil, chili.")
PASTA_ANSWER = "Here is a pasta recipe: Aglio e Olio"


class FakeRetriever:
    """Sync retriever returning passages for queries that contain a keyword.

    Records every query it receives.
    """

    def __init__(self, by_keyword: dict[str, list[RetrievedPassage]] | None = None) -> None:
        self._by_keyword = by_keyword or {}
        self.queries: list[str] = []

    def search(self, query: str) -> list[RetrievedPassage]:
        self.queries.append(query)
        results: list[RetrievedPassage] = []
        for keyword, passages in self._by_keyword.items():
            if keyword in query.lower():
                results.extend(passages)
        return results


class FakeAsyncRetriever(FakeRetriever):
    """Async variant of FakeRetriever with an optional delay."""

    def __init__(
        self,
        by_keyword: dict[str, list[RetrievedPassage]] | None = None,
        delay: float = 0.0,
    ) -> None:
        super().__init__(by_keyword)
        self._delay = delay

    async def search(self, query: str) -> list[RetrievedPassage]:  # type: ignore[override]
        if self._delay:
            await asyncio.sleep(self._delay)
        return super().search(query)


class FailingRetriever:
    """Retriever whose service is always down."""

    def __init__(self) -> None:
        self.calls = 0

    def search(self, query: str) -> list[RetrievedPassage]:
        self.calls += 1
        msg = "index unreachable"
        raise RetrievalError(msg)


class ScriptedCompleter:
    """Completer whose reply is computed from the prompt messages.

    Records every prompt it receives in ``calls``.
    """

    def __init__(
        self,
        reply: str | Callable[[list[PromptMessage]], str] = "",
        delay: float = 0.0,
    ) -> None:
        self._reply = reply
        self._delay = delay
        self.calls: list[list[PromptMessage]] = []

    async def complete(self, messages: Sequence[PromptMessage]) -> str:
        self.calls.append(list(messages))
        if self._delay:
            await asyncio.sleep(self._delay)
        if callable(self._reply):
            return self._reply(list(messages))
        return self._reply


class EchoCompleter(ScriptedCompleter):
    """Rephrase completer that returns the follow-up question verbatim."""

    def __init__(self, delay: float = 0.0) -> None:
        super().__init__(reply=self._echo, delay=delay)

    @staticmethod
    def _echo(messages: list[PromptMessage]) -> str:
        return messages[-1].content.removeprefix("Follow-Up Question: ")


class FailingCompleter:
    """Completer whose model service always errors."""

    def __init__(self, message: str = "model unavailable") -> None:
        self._message = message
        self.calls = 0

    async def complete(self, messages: Sequence[PromptMessage]) -> str:
        self.calls += 1
        raise CompletionError(self._message)


def last_human(messages: Sequence[PromptMessage]) -> str:
    """Return the content of the final prompt message."""
    return messages[-1].content


def make_pipeline(
    retriever: object | None = None,
    rephrase: object | None = None,
    answer: object | None = None,
    store: SessionHistoryStore | None = None,
    **kwargs: object,
) -> ConversationalPipeline:
    """Build a pipeline over the pasta fixtures unless collaborators are given."""
    return ConversationalPipeline(
        retriever=retriever or FakeRetriever({"pasta": [PASTA_PASSAGE]}),
        rephrase_completer=rephrase or EchoCompleter(),
        answer_completer=answer or ScriptedCompleter(PASTA_ANSWER),
        store=store,
        **kwargs,  # type: ignore[arg-type]
    )


def make_history(*contents: str) -> list[Message]:
    """Build alternating user/assistant messages from contents."""
    return [
        Message(role="user" if i % 2 == 0 else "assistant", content=content)
        for i, content in enumerate(contents)
    ]


@pytest.fixture
def store() -> SessionHistoryStore:
    """Return a fresh in-memory SessionHistoryStore."""
    return SessionHistoryStore()


@pytest.fixture
def passages() -> list[RetrievedPassage]:
    """Return three small recipe passages."""
    return [
        RetrievedPassage(text="Aglio e olio: spaghetti tossed with garlic and olive oil."),
        RetrievedPassage(text="Chocolate cake: flour, cocoa, eggs, sugar, butter."),
        RetrievedPassage(text="Shakshuka: eggs poached in spiced tomato sauce."),
    ]
