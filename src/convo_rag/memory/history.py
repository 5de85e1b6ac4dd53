"""Append-only message log for one session."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import overload

from convo_rag.models.message import Message


class HistoryLog:
    """Ordered, append-only sequence of messages owned by one session.

    The log is a live reference: a caller holding it sees later turns as
    they are recorded.  Messages are only added through
    ``SessionHistoryStore`` so that the storage backend and the in-memory
    view never diverge; the log is never reordered or pruned.
    """

    __slots__ = ("_messages", "_session_id")

    def __init__(self, session_id: str, messages: Iterable[Message] = ()) -> None:
        self._session_id = session_id
        self._messages: list[Message] = list(messages)

    def __repr__(self) -> str:
        return f"HistoryLog(session_id={self._session_id!r}, messages={len(self._messages)})"

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def messages(self) -> list[Message]:
        """A snapshot copy of the messages, oldest first."""
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(list(self._messages))

    @overload
    def __getitem__(self, index: int) -> Message: ...

    @overload
    def __getitem__(self, index: slice) -> list[Message]: ...

    def __getitem__(self, index: int | slice) -> Message | list[Message]:
        return self._messages[index]

    @property
    def turn_count(self) -> int:
        """Number of completed user/assistant pairs."""
        return len(self._messages) // 2

    def _extend(self, messages: Iterable[Message]) -> None:
        self._messages.extend(messages)
