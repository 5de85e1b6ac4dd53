"""Text completer protocol definition."""

from __future__ import annotations

from collections.abc import Awaitable, Sequence
from typing import Protocol, runtime_checkable

from convo_rag.models.message import PromptMessage


@runtime_checkable
class TextCompleter(Protocol):
    """Protocol for language-model completion.

    A pipeline uses two completers: a low-variance one for query
    rephrasing and a default-variance one for answer synthesis.  Sampling
    configuration belongs to the completer, not to the pipeline.
    """

    def complete(self, messages: Sequence[PromptMessage]) -> str | Awaitable[str]:
        """Generate the model's reply to an ordered list of prompt messages.

        Parameters:
            messages: Role-tagged prompt messages, oldest first.  A
                ``system`` message, when present, comes first.

        Returns:
            The generated text.

        Raises:
            CompletionError: When the model service is unreachable,
                errors, or rate-limits the request.
        """
        ...
