"""Answer synthesis stage."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from convo_rag.exceptions import CompletionError
from convo_rag.formatters.utils import history_to_prompt
from convo_rag.models.message import Message
from convo_rag.prompts.defaults import ANSWER_TEMPLATE_NAME
from convo_rag.prompts.registry import InMemoryTemplateRegistry
from convo_rag.protocols.completer import TextCompleter
from convo_rag.protocols.templates import PromptTemplateProvider

from ._call import maybe_await

logger = logging.getLogger(__name__)


class AnswerSynthesisStage:
    """Generates the final answer from the question, context, and history.

    The prompt is the answer template's system part (with ``{context}``
    filled in), the full history, and a final human turn carrying
    ``{question}``.  The model output is returned unmodified.
    """

    __slots__ = ("_completer", "_template_name", "_templates")

    def __init__(
        self,
        completer: TextCompleter,
        templates: PromptTemplateProvider | None = None,
        template_name: str = ANSWER_TEMPLATE_NAME,
    ) -> None:
        self._completer = completer
        self._templates = templates or InMemoryTemplateRegistry()
        self._template_name = template_name

    def __repr__(self) -> str:
        return f"AnswerSynthesisStage(template={self._template_name!r})"

    async def synthesize(
        self, history: Sequence[Message], question: str, context: str
    ) -> str:
        template = self._templates.resolve(self._template_name)
        messages = template.render(
            history_to_prompt(history), question=question, context=context,
        )

        answer = await maybe_await(self._completer.complete(messages))
        if not isinstance(answer, str):
            msg = f"Completer returned {type(answer).__name__}, expected str"
            raise CompletionError(msg)
        logger.debug("Synthesized %d-char answer for %r", len(answer), question)
        return answer
