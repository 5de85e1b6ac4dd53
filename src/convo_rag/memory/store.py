"""Session-scoped history store."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Iterable

from convo_rag.models.message import Message
from convo_rag.protocols.history import HistoryBackend

from .backends import InMemoryHistoryBackend
from .history import HistoryLog

logger = logging.getLogger(__name__)


class SessionHistoryStore:
    """Maps session ids to their history logs.

    Logs are created lazily on first reference and live for the lifetime
    of the store.  The storage medium is an injected ``HistoryBackend``
    (in-memory by default); the store keeps one ``HistoryLog`` view per
    session and writes through to the backend on every append.

    The session map is guarded by a thread lock.  Turns for the same
    session are serialized by the per-session ``asyncio.Lock`` returned
    from :meth:`session_lock`, which the pipeline holds for a whole turn.
    """

    __slots__ = ("_backend", "_lock", "_logs", "_session_locks")

    def __init__(self, backend: HistoryBackend | None = None) -> None:
        self._backend: HistoryBackend = backend or InMemoryHistoryBackend()
        self._logs: dict[str, HistoryLog] = {}
        self._session_locks: dict[str, asyncio.Lock] = {}
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(sessions={len(self._logs)}, backend={self._backend!r})"

    @property
    def backend(self) -> HistoryBackend:
        return self._backend

    def get_or_create(self, session_id: str) -> HistoryLog:
        """Return the live history log for a session, creating it if absent."""
        with self._lock:
            log = self._logs.get(session_id)
            if log is None:
                log = HistoryLog(session_id, self._backend.load(session_id))
                self._logs[session_id] = log
                logger.debug(
                    "Opened history for session %r (%d messages)", session_id, len(log),
                )
            return log

    def append(self, session_id: str, message: Message) -> None:
        """Append one message to a session's history."""
        self.extend(session_id, [message])

    def extend(self, session_id: str, messages: Iterable[Message]) -> None:
        """Append several messages as one all-or-nothing write.

        The backend is written first; if it raises, the in-memory log is
        left unchanged.
        """
        new_messages = list(messages)
        for message in new_messages:
            if not isinstance(message, Message):
                msg = f"expected Message, got {type(message).__name__}"
                raise TypeError(msg)
        log = self.get_or_create(session_id)
        with self._lock:
            self._backend.save(session_id, [*log.messages, *new_messages])
            log._extend(new_messages)

    def session_lock(self, session_id: str) -> asyncio.Lock:
        """Return the lock that serializes turns for ``session_id``."""
        with self._lock:
            lock = self._session_locks.get(session_id)
            if lock is None:
                lock = asyncio.Lock()
                self._session_locks[session_id] = lock
            return lock

    def sessions(self) -> list[str]:
        """Ids of every session known to the store or its backend."""
        with self._lock:
            known = dict.fromkeys(self._backend.session_ids())
            known.update(dict.fromkeys(self._logs))
            return list(known)

    def clear(self, session_id: str) -> bool:
        """Forget a session's history. Returns True if it existed.

        Must not be called while a turn for the same session is in flight.
        """
        with self._lock:
            had_log = self._logs.pop(session_id, None) is not None
            had_stored = self._backend.delete(session_id)
            return had_log or had_stored
