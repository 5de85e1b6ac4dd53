"""Per-turn pipeline state."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class PipelineState(BaseModel):
    """The record threaded through the stages of a single turn.

    Starts as ``{input}``, gains ``question`` after rephrasing and
    ``context`` after retrieval.  Never shared across turns or sessions.
    """

    input: str
    question: str | None = None
    context: str | None = None

    model_config = ConfigDict(frozen=True)

    def with_question(self, question: str) -> PipelineState:
        return self.model_copy(update={"question": question})

    def with_context(self, context: str) -> PipelineState:
        return self.model_copy(update={"context": context})
