"""History storage backends.

``InMemoryHistoryBackend`` is the default -- unbounded, no persistence
across restarts.  ``JsonFileHistoryBackend`` keeps every session in one
JSON file.  Production users provide their own implementations (Redis,
Postgres, etc.) that satisfy the ``HistoryBackend`` protocol.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from convo_rag.exceptions import StorageError
from convo_rag.models.message import Message

logger = logging.getLogger(__name__)


class InMemoryHistoryBackend:
    """Dict-backed history backend. Implements HistoryBackend."""

    __slots__ = ("_lock", "_sessions")

    def __init__(self) -> None:
        self._sessions: dict[str, list[Message]] = {}
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(sessions={len(self._sessions)})"

    def load(self, session_id: str) -> list[Message]:
        with self._lock:
            return list(self._sessions.get(session_id, ()))

    def save(self, session_id: str, messages: list[Message]) -> None:
        with self._lock:
            self._sessions[session_id] = list(messages)

    def delete(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def session_ids(self) -> list[str]:
        with self._lock:
            return list(self._sessions)


class JsonFileHistoryBackend:
    """Persistent history backend storing all sessions in one JSON file.

    The file holds ``{"<session_id>": [{"role": ..., "content": ...}, ...]}``.
    Every ``save`` rewrites the file atomically (temp file + rename), so a
    failed write leaves the previous contents in place.

    Suitable for development and single-process applications.
    Not suitable for concurrent multi-process access.
    """

    __slots__ = ("_file_path", "_lock", "_sessions")

    def __init__(self, file_path: str | Path) -> None:
        self._file_path = Path(file_path).resolve()
        self._sessions: dict[str, list[Message]] = {}
        self._lock = threading.Lock()
        if self._file_path.exists():
            self._sessions = self._read()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(path='{self._file_path}', sessions={len(self._sessions)})"

    @property
    def file_path(self) -> Path:
        return self._file_path

    def load(self, session_id: str) -> list[Message]:
        with self._lock:
            return list(self._sessions.get(session_id, ()))

    def save(self, session_id: str, messages: list[Message]) -> None:
        with self._lock:
            updated = {**self._sessions, session_id: list(messages)}
            self._write(updated)
            self._sessions = updated

    def delete(self, session_id: str) -> bool:
        with self._lock:
            if session_id not in self._sessions:
                return False
            updated = {k: v for k, v in self._sessions.items() if k != session_id}
            self._write(updated)
            self._sessions = updated
            return True

    def session_ids(self) -> list[str]:
        with self._lock:
            return list(self._sessions)

    def _read(self) -> dict[str, list[Message]]:
        try:
            text = self._file_path.read_text(encoding="utf-8")
        except OSError as e:
            msg = f"Cannot read history file {self._file_path}"
            raise StorageError(msg) from e
        if not text.strip():
            return {}

        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            msg = f"History file {self._file_path} is not valid JSON"
            raise StorageError(msg) from e
        if not isinstance(raw, dict):
            msg = f"History file {self._file_path} must contain a JSON object"
            raise StorageError(msg)

        sessions: dict[str, list[Message]] = {}
        try:
            for session_id, messages in raw.items():
                sessions[session_id] = [Message.model_validate(m) for m in messages]
        except (TypeError, ValidationError) as e:
            msg = f"History file {self._file_path} contains an invalid message"
            raise StorageError(msg) from e
        logger.debug("Loaded %d sessions from %s", len(sessions), self._file_path)
        return sessions

    def _write(self, sessions: dict[str, list[Message]]) -> None:
        data: dict[str, list[dict[str, Any]]] = {
            session_id: [m.model_dump(mode="json") for m in messages]
            for session_id, messages in sessions.items()
        }
        content = json.dumps(data, indent=2, ensure_ascii=False)

        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self._file_path.parent, suffix=".tmp")
        except OSError as e:
            msg = f"Cannot write history file {self._file_path}"
            raise StorageError(msg) from e
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            Path(tmp_path).replace(self._file_path)
        except OSError as e:
            Path(tmp_path).unlink(missing_ok=True)
            msg = f"Cannot write history file {self._file_path}"
            raise StorageError(msg) from e
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise
