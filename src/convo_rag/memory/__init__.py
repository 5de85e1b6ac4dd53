"""Session history: logs, storage backends, and windowing."""

from .backends import InMemoryHistoryBackend, JsonFileHistoryBackend
from .history import HistoryLog
from .store import SessionHistoryStore
from .window import FullHistoryWindow, SlidingTurnWindow

__all__ = [
    "FullHistoryWindow",
    "HistoryLog",
    "InMemoryHistoryBackend",
    "JsonFileHistoryBackend",
    "SessionHistoryStore",
    "SlidingTurnWindow",
]
