"""Anthropic Messages API text completer.

Requires the 'anthropic' extra: pip install convo-rag[anthropic]
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from convo_rag.exceptions import CompletionError
from convo_rag.formatters.utils import ensure_alternating_roles
from convo_rag.models.message import PromptMessage

logger = logging.getLogger(__name__)


def _api_errors() -> tuple[type[Exception], ...]:
    """Return the Anthropic SDK's error base class, or nothing if not installed."""
    try:
        import anthropic as _anthropic
    except ImportError:
        return ()
    return (_anthropic.APIError,)


class AnthropicCompleter:
    """Async TextCompleter backed by ``anthropic.AsyncAnthropic``.

    ``temperature=None`` leaves sampling at the API default; use a low
    value (e.g. ``0.1``) for the completer that rephrases queries.
    SDK errors are re-raised as ``CompletionError``.

    Usage::

        rephraser = AnthropicCompleter("claude-haiku-4-5-20251001", temperature=0.1)
        answerer = AnthropicCompleter("claude-haiku-4-5-20251001")
    """

    __slots__ = ("_client", "_max_tokens", "_model", "_temperature")

    def __init__(
        self,
        model: str,
        *,
        temperature: float | None = None,
        max_tokens: int = 1024,
        api_key: str | None = None,
        client: Any = None,
    ) -> None:
        if temperature is not None and not 0.0 <= temperature <= 1.0:
            msg = "temperature must be between 0.0 and 1.0"
            raise ValueError(msg)
        if max_tokens <= 0:
            msg = "max_tokens must be a positive integer"
            raise ValueError(msg)
        if client is not None:
            self._client: Any = client
        else:
            try:
                import anthropic
            except ImportError:
                msg = (
                    "anthropic is required for AnthropicCompleter. "
                    "Install with: pip install convo-rag[anthropic]"
                )
                raise ImportError(msg) from None
            self._client = anthropic.AsyncAnthropic(api_key=api_key)

        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens

    def __repr__(self) -> str:
        return (
            f"AnthropicCompleter(model={self._model!r}, "
            f"temperature={self._temperature}, max_tokens={self._max_tokens})"
        )

    @property
    def model(self) -> str:
        return self._model

    @property
    def temperature(self) -> float | None:
        return self._temperature

    def _build_request(self, messages: Sequence[PromptMessage]) -> dict[str, Any]:
        """Split out the system prompt and enforce user/assistant alternation."""
        system_parts = [m.content for m in messages if m.role == "system"]
        chat = ensure_alternating_roles(
            [{"role": m.role, "content": m.content} for m in messages if m.role != "system"]
        )
        if not chat:
            msg = "At least one user message is required"
            raise CompletionError(msg)

        kwargs: dict[str, Any] = {
            "model": self._model,
            "max_tokens": self._max_tokens,
            "messages": chat,
        }
        if system_parts:
            kwargs["system"] = "\n\n".join(system_parts)
        if self._temperature is not None:
            kwargs["temperature"] = self._temperature
        return kwargs

    async def complete(self, messages: Sequence[PromptMessage]) -> str:
        kwargs = self._build_request(messages)
        try:
            response = await self._client.messages.create(**kwargs)
        except _api_errors() as e:
            msg = f"Anthropic request to {self._model} failed: {e}"
            raise CompletionError(msg) from e

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        logger.debug(
            "Completion from %s: %d chars (stop_reason=%s)",
            self._model, len(text), getattr(response, "stop_reason", None),
        )
        return text
