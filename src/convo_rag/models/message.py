"""Message models for conversation history and model prompts."""

from __future__ import annotations

from typing import Literal, TypeAlias

from pydantic import BaseModel, ConfigDict

Role: TypeAlias = Literal["user", "assistant"]
PromptRole: TypeAlias = Literal["system", "user", "assistant"]


class Message(BaseModel):
    """A single message in a session's history.

    Messages are immutable once created; a history log is replayed
    verbatim into model prompts, so order and content must never drift.
    """

    role: Role
    content: str

    model_config = ConfigDict(frozen=True)

    @classmethod
    def user(cls, content: str) -> Message:
        return cls(role="user", content=content)

    @classmethod
    def assistant(cls, content: str) -> Message:
        return cls(role="assistant", content=content)

    def to_prompt(self) -> PromptMessage:
        """Convert to a prompt message with the same role and content."""
        return PromptMessage(role=self.role, content=self.content)


class PromptMessage(BaseModel):
    """A role-tagged message sent to a text completer."""

    role: PromptRole
    content: str

    model_config = ConfigDict(frozen=True)
