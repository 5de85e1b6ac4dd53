"""Concurrency, timeout, and cancellation tests for ConversationalPipeline."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

import pytest

from convo_rag.memory.store import SessionHistoryStore
from convo_rag.models.message import PromptMessage
from tests.conftest import (
    PASTA_ANSWER,
    PASTA_PASSAGE,
    EchoCompleter,
    FakeAsyncRetriever,
    ScriptedCompleter,
    make_pipeline,
)


class OverlapTrackingCompleter:
    """Answer completer that records how many calls were in flight at once."""

    def __init__(self, delay: float) -> None:
        self._delay = delay
        self.active = 0
        self.max_active = 0

    async def complete(self, messages: Sequence[PromptMessage]) -> str:
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self._delay)
        finally:
            self.active -= 1
        return PASTA_ANSWER


class TestSessionSerialization:
    @pytest.mark.asyncio()
    async def test_same_session_turns_do_not_interleave(
        self, store: SessionHistoryStore
    ) -> None:
        rephrase_model = EchoCompleter(delay=0.01)
        answer_model = OverlapTrackingCompleter(delay=0.02)
        pipeline = make_pipeline(
            FakeAsyncRetriever({"pasta": [PASTA_PASSAGE]}, delay=0.01),
            rephrase_model,
            answer_model,
            store,
        )

        await asyncio.gather(
            pipeline.run("s", "pasta one"),
            pipeline.run("s", "pasta two"),
            pipeline.run("s", "pasta three"),
        )

        assert answer_model.max_active == 1
        history = store.get_or_create("s")
        assert [m.role for m in history] == ["user", "assistant"] * 3
        assert sorted(m.content for m in history[::2]) == [
            "pasta one", "pasta three", "pasta two",
        ]
        # Each later turn saw every earlier completed turn.
        assert sorted(len(call) for call in rephrase_model.calls) == [2, 4, 6]

    @pytest.mark.asyncio()
    async def test_different_sessions_run_concurrently(
        self, store: SessionHistoryStore
    ) -> None:
        answer_model = OverlapTrackingCompleter(delay=0.05)
        pipeline = make_pipeline(answer=answer_model, store=store)

        await asyncio.gather(*(pipeline.run(f"s{i}", "pasta") for i in range(4)))

        assert answer_model.max_active > 1
        for i in range(4):
            assert store.get_or_create(f"s{i}").turn_count == 1


class TestTimeout:
    @pytest.mark.asyncio()
    async def test_stage_timeout_leaves_history(self, store: SessionHistoryStore) -> None:
        pipeline = make_pipeline(
            answer=ScriptedCompleter(PASTA_ANSWER, delay=1.0),
            store=store,
            stage_timeout=0.05,
        )

        with pytest.raises(TimeoutError):
            await pipeline.run("s", "pasta")

        assert len(store.get_or_create("s")) == 0

    @pytest.mark.asyncio()
    async def test_fast_stages_within_timeout(self, store: SessionHistoryStore) -> None:
        pipeline = make_pipeline(store=store).with_stage_timeout(5.0)
        assert await pipeline.run("s", "pasta") == PASTA_ANSWER


class TestCancellation:
    @pytest.mark.asyncio()
    async def test_cancel_mid_turn_leaves_history(self, store: SessionHistoryStore) -> None:
        answer_model = ScriptedCompleter(PASTA_ANSWER, delay=1.0)
        pipeline = make_pipeline(answer=answer_model, store=store)

        task = asyncio.create_task(pipeline.run("s", "pasta"))
        while not answer_model.calls:
            await asyncio.sleep(0.005)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert len(store.get_or_create("s")) == 0
        assert not store.session_lock("s").locked()

    @pytest.mark.asyncio()
    async def test_session_usable_after_cancel(self, store: SessionHistoryStore) -> None:
        slow = make_pipeline(answer=ScriptedCompleter(PASTA_ANSWER, delay=1.0), store=store)
        task = asyncio.create_task(slow.run("s", "pasta"))
        await asyncio.sleep(0.02)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        fast = make_pipeline(store=store)
        assert await fast.run("s", "pasta again") == PASTA_ANSWER
        assert [m.content for m in store.get_or_create("s")] == ["pasta again", PASTA_ANSWER]
