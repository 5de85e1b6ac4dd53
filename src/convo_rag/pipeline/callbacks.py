"""Pipeline callback protocol for observability and event hooks."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from convo_rag.models.state import PipelineState


@runtime_checkable
class PipelineCallback(Protocol):
    """Protocol for pipeline event callbacks.

    Callbacks are looked up by name, so an implementation only needs the
    methods it cares about.  Exceptions raised by a callback are logged
    and never affect the turn.
    """

    def on_turn_start(self, session_id: str, state: PipelineState) -> None: ...
    def on_stage_start(self, session_id: str, stage: str) -> None: ...
    def on_stage_end(self, session_id: str, stage: str, time_ms: float) -> None: ...
    def on_stage_error(self, session_id: str, stage: str, error: Exception) -> None: ...
    def on_turn_end(self, session_id: str, state: PipelineState, answer: str) -> None: ...
