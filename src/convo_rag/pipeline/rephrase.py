"""Query rephrase stage: follow-up utterance in, standalone query out."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from convo_rag.exceptions import CompletionError
from convo_rag.formatters.utils import history_to_prompt
from convo_rag.models.message import Message
from convo_rag.prompts.defaults import REPHRASE_TEMPLATE_NAME
from convo_rag.prompts.registry import InMemoryTemplateRegistry
from convo_rag.protocols.completer import TextCompleter
from convo_rag.protocols.templates import PromptTemplateProvider

from ._call import maybe_await

logger = logging.getLogger(__name__)

_QUOTE_PAIRS: tuple[tuple[str, str], ...] = (('"', '"'), ("'", "'"), ("“", "”"))


def clean_query(text: str) -> str:
    """Strip whitespace and one pair of wrapping quotes from model output."""
    query = text.strip()
    for open_quote, close_quote in _QUOTE_PAIRS:
        if len(query) >= 2 and query.startswith(open_quote) and query.endswith(close_quote):
            query = query[1:-1].strip()
            break
    return query


class QueryRephraseStage:
    """Rewrites a dialogue-dependent utterance into a standalone search query.

    "How do I make it vegetarian?" is useless to a vector index on its own;
    this stage shows the model the prior turns and asks for a
    self-contained query instead.  The completer should be configured for
    near-deterministic sampling so rewrites stay literal.

    Runs even when history is empty, in which case the query is usually
    the input restated.
    """

    __slots__ = ("_completer", "_template_name", "_templates")

    def __init__(
        self,
        completer: TextCompleter,
        templates: PromptTemplateProvider | None = None,
        template_name: str = REPHRASE_TEMPLATE_NAME,
    ) -> None:
        self._completer = completer
        self._templates = templates or InMemoryTemplateRegistry()
        self._template_name = template_name

    def __repr__(self) -> str:
        return f"QueryRephraseStage(template={self._template_name!r})"

    async def rephrase(self, history: Sequence[Message], user_input: str) -> str:
        """Return a standalone query for ``user_input`` given ``history``."""
        template = self._templates.resolve(self._template_name)
        messages = template.render(history_to_prompt(history), input=user_input)

        raw = await maybe_await(self._completer.complete(messages))
        if not isinstance(raw, str):
            msg = f"Completer returned {type(raw).__name__}, expected str"
            raise CompletionError(msg)

        question = clean_query(raw)
        logger.debug(
            "Rephrased %r -> %r (%d history messages)", user_input, question, len(history),
        )
        return question
