"""Protocols for session history storage and windowing.

All history extension points are ``@runtime_checkable`` Protocols
(PEP 544).  Any object with the matching method signatures satisfies the
protocol -- no inheritance required.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from convo_rag.models.message import Message


@runtime_checkable
class HistoryBackend(Protocol):
    """Storage medium behind a ``SessionHistoryStore``."""

    def load(self, session_id: str) -> list[Message]:
        """Return the stored messages for a session, oldest first.

        Returns an empty list for a session that has never been saved.
        """
        ...

    def save(self, session_id: str, messages: list[Message]) -> None:
        """Replace the stored messages for a session.

        Raises:
            StorageError: When the write fails.  The previously stored
                messages must remain intact in that case.
        """
        ...

    def delete(self, session_id: str) -> bool:
        """Remove a session. Returns True if it existed."""
        ...

    def session_ids(self) -> list[str]:
        """Return the ids of all stored sessions."""
        ...


@runtime_checkable
class HistoryWindow(Protocol):
    """Selects which history messages are shown to the model.

    The stored log is never pruned; a window only narrows the view that
    the rephrase and synthesis stages receive for one turn.
    """

    def select(self, messages: list[Message]) -> list[Message]:
        """Return the subset of ``messages`` to include, oldest first."""
        ...
