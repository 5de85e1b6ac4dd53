"""ConversationalPipeline -- the turn orchestrator for convo-rag."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable
from typing import Any, TypeVar

from convo_rag.formatters.documents import DocumentFormatter
from convo_rag.memory.store import SessionHistoryStore
from convo_rag.models.message import Message
from convo_rag.models.state import PipelineState
from convo_rag.prompts.registry import InMemoryTemplateRegistry
from convo_rag.protocols.completer import TextCompleter
from convo_rag.protocols.history import HistoryWindow
from convo_rag.protocols.retriever import Retriever
from convo_rag.protocols.templates import PromptTemplateProvider

from .callbacks import PipelineCallback
from .rephrase import QueryRephraseStage
from .retrieval import RetrievalStage
from .synthesis import AnswerSynthesisStage

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ConversationalPipeline:
    """Turns ``(session_id, user_input)`` into an answer and records the turn.

    Usage::

        pipeline = ConversationalPipeline(
            retriever=my_retriever,
            rephrase_completer=AnthropicCompleter(model, temperature=0.1),
            answer_completer=AnthropicCompleter(model),
        )
        answer = await pipeline.run("session-1", "Find me a pasta recipe")

    Each turn follows this flow:
        1. Lock the session and resolve its history (created if absent)
        2. Rephrase the input into a standalone query using the history
        3. Retrieve and format passages for that query
        4. Synthesize the answer from the query, context, and history
        5. Append the user input, then the answer, to the history
        6. Return the answer

    History is written only after all three stages succeed.  A failure,
    timeout, or cancellation at any stage propagates to the caller and
    leaves the session exactly as it was.  Turns for the same session
    are serialized; turns for different sessions run concurrently.
    """

    __slots__ = (
        "_callbacks",
        "_rephrase",
        "_retrieval",
        "_stage_timeout",
        "_store",
        "_synthesis",
        "_templates",
        "_window",
    )

    def __init__(
        self,
        retriever: Retriever,
        rephrase_completer: TextCompleter,
        answer_completer: TextCompleter,
        *,
        templates: PromptTemplateProvider | None = None,
        store: SessionHistoryStore | None = None,
        formatter: DocumentFormatter | None = None,
        window: HistoryWindow | None = None,
        stage_timeout: float | None = None,
    ) -> None:
        if stage_timeout is not None and stage_timeout <= 0:
            msg = "stage_timeout must be positive"
            raise ValueError(msg)
        self._templates = templates or InMemoryTemplateRegistry()
        self._store = store or SessionHistoryStore()
        self._rephrase = QueryRephraseStage(rephrase_completer, self._templates)
        self._retrieval = RetrievalStage(retriever, formatter)
        self._synthesis = AnswerSynthesisStage(answer_completer, self._templates)
        self._window = window
        self._stage_timeout = stage_timeout
        self._callbacks: list[PipelineCallback] = []

    # -- Read-only properties --

    @property
    def store(self) -> SessionHistoryStore:
        """The session history store this pipeline records turns into."""
        return self._store

    @property
    def templates(self) -> PromptTemplateProvider:
        return self._templates

    @property
    def rephrase_stage(self) -> QueryRephraseStage:
        return self._rephrase

    @property
    def retrieval_stage(self) -> RetrievalStage:
        return self._retrieval

    @property
    def synthesis_stage(self) -> AnswerSynthesisStage:
        return self._synthesis

    @property
    def stage_timeout(self) -> float | None:
        return self._stage_timeout

    def __repr__(self) -> str:
        return (
            f"ConversationalPipeline("
            f"store={self._store!r}, "
            f"window={self._window!r}, "
            f"stage_timeout={self._stage_timeout})"
        )

    # -- Fluent configuration --

    def with_window(self, window: HistoryWindow | None) -> ConversationalPipeline:
        """Set the history window shown to the stages. Returns self for chaining."""
        self._window = window
        return self

    def with_stage_timeout(self, seconds: float | None) -> ConversationalPipeline:
        """Set a per-stage timeout in seconds. Returns self for chaining."""
        if seconds is not None and seconds <= 0:
            msg = "stage_timeout must be positive"
            raise ValueError(msg)
        self._stage_timeout = seconds
        return self

    def add_callback(self, callback: PipelineCallback) -> ConversationalPipeline:
        """Register an event callback for turn observability. Returns self for chaining."""
        self._callbacks.append(callback)
        return self

    def _notify(self, event: str, session_id: str, *args: Any) -> None:
        """Deliver a turn or stage event to every callback that handles it.

        A callback only receives the events it defines an ``on_<event>``
        method for.  Its failures are logged and never reach the turn.
        """
        hook_name = f"on_{event}"
        for callback in self._callbacks:
            hook = getattr(callback, hook_name, None)
            if not callable(hook):
                continue
            try:
                hook(session_id, *args)
            except Exception:
                logger.warning(
                    "%s callback %r failed for session %r",
                    hook_name, callback, session_id, exc_info=True,
                )

    def _visible_history(self, messages: list[Message]) -> list[Message]:
        if self._window is None:
            return messages
        return self._window.select(messages)

    async def _run_stage(self, session_id: str, stage: str, call: Awaitable[T]) -> T:
        """Await one stage under the stage timeout, firing stage callbacks."""
        self._notify("stage_start", session_id, stage)
        start = time.monotonic()
        try:
            async with asyncio.timeout(self._stage_timeout):
                result = await call
        except Exception as exc:
            logger.debug("Stage '%s' failed for session %r: %r", stage, session_id, exc)
            self._notify("stage_error", session_id, stage, exc)
            raise
        elapsed = (time.monotonic() - start) * 1000
        self._notify("stage_end", session_id, stage, round(elapsed, 2))
        return result

    # -- Public entry point --

    async def run(self, session_id: str, user_input: str) -> str:
        """Run one full turn and return the answer text."""
        if not isinstance(session_id, str):
            msg = f"session_id must be a str, got {type(session_id).__name__}"
            raise TypeError(msg)
        if not isinstance(user_input, str):
            msg = f"user_input must be a str, got {type(user_input).__name__}"
            raise TypeError(msg)

        async with self._store.session_lock(session_id):
            history = self._store.get_or_create(session_id)
            visible = self._visible_history(history.messages)
            state = PipelineState(input=user_input)
            self._notify("turn_start", session_id, state)

            question = await self._run_stage(
                session_id, "rephrase", self._rephrase.rephrase(visible, state.input),
            )
            state = state.with_question(question)

            context = await self._run_stage(
                session_id, "retrieve", self._retrieval.retrieve(question),
            )
            state = state.with_context(context)

            answer = await self._run_stage(
                session_id,
                "synthesize",
                self._synthesis.synthesize(visible, question, context),
            )

            self._store.extend(
                session_id, [Message.user(state.input), Message.assistant(answer)],
            )
            logger.debug(
                "Recorded turn %d for session %r", history.turn_count, session_id,
            )
            self._notify("turn_end", session_id, state, answer)
            return answer
