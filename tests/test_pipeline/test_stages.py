"""Tests for the rephrase, retrieval, and synthesis stages."""

from __future__ import annotations

import pytest

from convo_rag.exceptions import CompletionError, RetrievalError, TemplateNotFoundError
from convo_rag.formatters.documents import DocumentFormatter
from convo_rag.models.passage import RetrievedPassage
from convo_rag.models.prompt import PromptTemplate
from convo_rag.pipeline.rephrase import QueryRephraseStage, clean_query
from convo_rag.pipeline.retrieval import RetrievalStage
from convo_rag.pipeline.synthesis import AnswerSynthesisStage
from convo_rag.prompts.registry import InMemoryTemplateRegistry
from tests.conftest import (
    PASTA_PASSAGE,
    EchoCompleter,
    FailingCompleter,
    FailingRetriever,
    FakeAsyncRetriever,
    FakeRetriever,
    ScriptedCompleter,
    make_history,
)


class SyncCompleter:
    def __init__(self, reply: object) -> None:
        self._reply = reply

    def complete(self, messages: object) -> object:
        return self._reply


class TestCleanQuery:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("  Spicy pasta recipes \n", "Spicy pasta recipes"),
            ('"Spicy pasta recipes"', "Spicy pasta recipes"),
            ("'Spicy pasta recipes'", "Spicy pasta recipes"),
            ("“Spicy pasta recipes”", "Spicy pasta recipes"),
            ('""Nested""', '"Nested"'),
            ('Say "hi" to pasta', 'Say "hi" to pasta'),
            ('"', '"'),
            ("   ", ""),
        ],
    )
    def test_clean(self, raw: str, expected: str) -> None:
        assert clean_query(raw) == expected


class TestRetrievalStage:
    @pytest.mark.asyncio()
    async def test_formats_results(self) -> None:
        stage = RetrievalStage(FakeRetriever({"pasta": [PASTA_PASSAGE]}))
        context = await stage.retrieve("pasta recipe")
        assert context == f"<doc>\n{PASTA_PASSAGE.text}\n</doc>"

    @pytest.mark.asyncio()
    async def test_no_results_is_empty(self) -> None:
        assert await RetrievalStage(FakeRetriever()).retrieve("nothing") == ""

    @pytest.mark.asyncio()
    async def test_async_retriever(self) -> None:
        retriever = FakeAsyncRetriever({"pasta": [PASTA_PASSAGE]})
        passages = await RetrievalStage(retriever).search("pasta")
        assert passages == [PASTA_PASSAGE]
        assert retriever.queries == ["pasta"]

    @pytest.mark.asyncio()
    async def test_preserves_order(self) -> None:
        a = RetrievedPassage(text="A")
        b = RetrievedPassage(text="B")
        stage = RetrievalStage(FakeRetriever({"x": [a, b]}))
        assert await stage.retrieve("x") == "<doc>\nA\n</doc>\n<doc>\nB\n</doc>"

    @pytest.mark.asyncio()
    async def test_custom_formatter(self) -> None:
        stage = RetrievalStage(
            FakeRetriever({"x": [RetrievedPassage(text="A")]}), DocumentFormatter("passage"),
        )
        assert await stage.retrieve("x") == "<passage>\nA\n</passage>"
        assert stage.formatter.format_type == "doc_envelope"

    @pytest.mark.asyncio()
    async def test_error_propagates(self) -> None:
        with pytest.raises(RetrievalError, match="index unreachable"):
            await RetrievalStage(FailingRetriever()).retrieve("pasta")

    @pytest.mark.asyncio()
    async def test_non_list_result(self) -> None:
        class BadRetriever:
            def search(self, query: str) -> str:
                return "not a list"

        with pytest.raises(RetrievalError, match="must return a list"):
            await RetrievalStage(BadRetriever()).retrieve("q")  # type: ignore[arg-type]


class TestQueryRephraseStage:
    @pytest.mark.asyncio()
    async def test_prompt_layout(self) -> None:
        completer = ScriptedCompleter("Spicy Aglio e Olio recipe")
        history = make_history("Find me a pasta recipe", "Here is a pasta recipe: Aglio e Olio")

        question = await QueryRephraseStage(completer).rephrase(history, "Make it spicier")

        assert question == "Spicy Aglio e Olio recipe"
        prompt = completer.calls[0]
        assert [m.role for m in prompt] == ["system", "user", "assistant", "user"]
        assert prompt[1].content == "Find me a pasta recipe"
        assert prompt[2].content == "Here is a pasta recipe: Aglio e Olio"
        assert prompt[-1].content == "Follow-Up Question: Make it spicier"

    @pytest.mark.asyncio()
    async def test_runs_with_empty_history(self) -> None:
        completer = EchoCompleter()
        question = await QueryRephraseStage(completer).rephrase([], "Find me a pasta recipe")
        assert question == "Find me a pasta recipe"
        assert len(completer.calls) == 1
        assert [m.role for m in completer.calls[0]] == ["system", "user"]

    @pytest.mark.asyncio()
    async def test_strips_quotes(self) -> None:
        stage = QueryRephraseStage(ScriptedCompleter(' "Spicy pasta" \n'))
        assert await stage.rephrase([], "Make it spicier") == "Spicy pasta"

    @pytest.mark.asyncio()
    async def test_empty_output_passed_through(self) -> None:
        stage = QueryRephraseStage(ScriptedCompleter("  "))
        assert await stage.rephrase([], "Make it spicier") == ""

    @pytest.mark.asyncio()
    async def test_quotes_only_output_is_empty(self) -> None:
        stage = QueryRephraseStage(ScriptedCompleter('""'))
        assert await stage.rephrase([], "Make it spicier") == ""

    @pytest.mark.asyncio()
    async def test_sync_completer(self) -> None:
        stage = QueryRephraseStage(SyncCompleter("standalone"))  # type: ignore[arg-type]
        assert await stage.rephrase([], "q") == "standalone"

    @pytest.mark.asyncio()
    async def test_non_str_output(self) -> None:
        stage = QueryRephraseStage(SyncCompleter(42))  # type: ignore[arg-type]
        with pytest.raises(CompletionError, match="expected str"):
            await stage.rephrase([], "q")

    @pytest.mark.asyncio()
    async def test_error_propagates(self) -> None:
        with pytest.raises(CompletionError, match="model unavailable"):
            await QueryRephraseStage(FailingCompleter()).rephrase([], "q")

    @pytest.mark.asyncio()
    async def test_missing_template(self) -> None:
        stage = QueryRephraseStage(
            EchoCompleter(), InMemoryTemplateRegistry(include_defaults=False),
        )
        with pytest.raises(TemplateNotFoundError):
            await stage.rephrase([], "q")

    @pytest.mark.asyncio()
    async def test_custom_template_name(self) -> None:
        registry = InMemoryTemplateRegistry().register(
            PromptTemplate(name="terse", system="Rewrite.", human="Q: {input}")
        )
        completer = ScriptedCompleter("x")
        await QueryRephraseStage(completer, registry, template_name="terse").rephrase([], "hi")
        assert completer.calls[0][-1].content == "Q: hi"


class TestAnswerSynthesisStage:
    @pytest.mark.asyncio()
    async def test_prompt_layout(self) -> None:
        completer = ScriptedCompleter("answer")
        history = make_history("Find me a pasta recipe", "Aglio e Olio")
        context = "<doc>\nchili flakes\n</doc>"

        await AnswerSynthesisStage(completer).synthesize(history, "Spicy pasta", context)

        prompt = completer.calls[0]
        assert [m.role for m in prompt] == ["system", "user", "assistant", "user"]
        assert f"<context>\n{context}\n</context>" in prompt[0].content
        assert prompt[-1].content.endswith("\nSpicy pasta")

    @pytest.mark.asyncio()
    async def test_output_unmodified(self) -> None:
        stage = AnswerSynthesisStage(ScriptedCompleter('  "Quoted answer"\n'))
        assert await stage.synthesize([], "q", "") == '  "Quoted answer"\n'

    @pytest.mark.asyncio()
    async def test_empty_context_still_calls_model(self) -> None:
        completer = ScriptedCompleter("I could not find that.")
        answer = await AnswerSynthesisStage(completer).synthesize([], "q", "")
        assert answer == "I could not find that."
        assert "<context>\n\n</context>" in completer.calls[0][0].content

    @pytest.mark.asyncio()
    async def test_context_braces_not_reparsed(self) -> None:
        completer = ScriptedCompleter("ok")
        await AnswerSynthesisStage(completer).synthesize([], "q", "use {question} literally")
        assert "use {question} literally" in completer.calls[0][0].content

    @pytest.mark.asyncio()
    async def test_non_str_output(self) -> None:
        stage = AnswerSynthesisStage(SyncCompleter(None))  # type: ignore[arg-type]
        with pytest.raises(CompletionError):
            await stage.synthesize([], "q", "")

    @pytest.mark.asyncio()
    async def test_error_propagates(self) -> None:
        with pytest.raises(CompletionError):
            await AnswerSynthesisStage(FailingCompleter()).synthesize([], "q", "")
