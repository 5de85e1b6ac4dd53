"""Retrieved passage model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RetrievedPassage(BaseModel):
    """A unit of reference text returned by a retriever.

    Only ``text`` is used by the pipeline; ``metadata`` and ``score`` are
    carried for callers that want to inspect where a passage came from.
    """

    text: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    score: float | None = None

    model_config = ConfigDict(frozen=True)
