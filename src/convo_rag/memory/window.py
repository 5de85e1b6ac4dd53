"""History windowing strategies."""

from __future__ import annotations

from convo_rag.models.message import Message


class FullHistoryWindow:
    """Shows the complete history. Implements HistoryWindow."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "FullHistoryWindow()"

    def select(self, messages: list[Message]) -> list[Message]:
        return list(messages)


class SlidingTurnWindow:
    """Shows only the most recent ``max_turns`` user/assistant pairs.

    Opt-in bound on prompt growth for long sessions.  The stored history
    is untouched; only the view handed to the model is narrowed.
    """

    __slots__ = ("_max_turns",)

    def __init__(self, max_turns: int) -> None:
        if max_turns <= 0:
            msg = "max_turns must be a positive integer"
            raise ValueError(msg)
        self._max_turns = max_turns

    def __repr__(self) -> str:
        return f"SlidingTurnWindow(max_turns={self._max_turns})"

    @property
    def max_turns(self) -> int:
        return self._max_turns

    def select(self, messages: list[Message]) -> list[Message]:
        """Return the trailing turns, always starting on a ``user`` message."""
        keep = self._max_turns * 2
        selected = list(messages[-keep:])
        start = 0
        while start < len(selected) and selected[start].role == "assistant":
            start += 1
        return selected[start:]
