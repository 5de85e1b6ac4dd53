"""Internal helpers for turning history into prompt messages.

These are *not* part of the public API and should not be imported
outside this package.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from convo_rag.models.message import Message, PromptMessage


def history_to_prompt(history: Sequence[Message]) -> list[PromptMessage]:
    """Replay history as role-tagged prompt messages, preserving order."""
    return [message.to_prompt() for message in history]


def ensure_alternating_roles(messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Merge consecutive same-role messages to enforce role alternation.

    Chat APIs require ``user`` and ``assistant`` messages to strictly
    alternate.  A history that ends on a ``user`` message (for example
    one written by an external backend) followed by the new human turn
    would otherwise be rejected.

    Consecutive messages sharing a role are merged by joining their
    ``content`` with ``"\\n\\n"``.  ``system`` messages are never merged.
    """
    if len(messages) <= 1:
        return list(messages)

    merged: list[dict[str, Any]] = []
    for msg in messages:
        if merged and msg["role"] != "system" and merged[-1]["role"] == msg["role"]:
            merged[-1] = {
                **merged[-1],
                "content": merged[-1]["content"] + "\n\n" + msg["content"],
            }
        else:
            merged.append(dict(msg))
    return merged
