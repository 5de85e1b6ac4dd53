"""Prompt template model."""

from __future__ import annotations

import string
from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

from convo_rag.exceptions import TemplateNotFoundError

from .message import PromptMessage

_FORMATTER = string.Formatter()


def _placeholders(text: str) -> set[str]:
    return {field for _, field, _, _ in _FORMATTER.parse(text) if field}


class PromptTemplate(BaseModel):
    """A ``{system, human}`` prompt pair with named ``{placeholder}`` fields.

    Substituted values are inserted verbatim and never re-parsed, so
    braces inside retrieved text or user input are safe.
    """

    name: str
    system: str
    human: str

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_syntax(self) -> PromptTemplate:
        try:
            _placeholders(self.system)
            _placeholders(self.human)
        except ValueError as e:
            msg = f"Prompt template '{self.name}' is malformed: {e}"
            raise ValueError(msg) from e
        return self

    @property
    def placeholders(self) -> set[str]:
        """All placeholder names used by the system and human parts."""
        return _placeholders(self.system) | _placeholders(self.human)

    def _fill(self, text: str, values: dict[str, Any]) -> str:
        try:
            return text.format_map(values)
        except (KeyError, IndexError, ValueError) as e:
            msg = f"Prompt template '{self.name}' has an unfilled placeholder: {e}"
            raise TemplateNotFoundError(self.name, msg) from e

    def render(
        self,
        history: Sequence[PromptMessage] = (),
        **values: Any,
    ) -> list[PromptMessage]:
        """Build ``[system, *history, human]`` prompt messages."""
        messages = [PromptMessage(role="system", content=self._fill(self.system, values))]
        messages.extend(history)
        messages.append(PromptMessage(role="user", content=self._fill(self.human, values)))
        return messages
