"""Document envelope formatter."""

from __future__ import annotations

from collections.abc import Sequence

from convo_rag.models.passage import RetrievedPassage


class DocumentFormatter:
    """Serializes retrieved passages into one delimited text block.

    Each passage is wrapped in a ``<doc>`` envelope so the model can tell
    where one passage ends and the next begins; envelopes are separated by
    a single newline and keep the retriever's order.

    Security Note:
        Passage text is inserted verbatim.  Text that itself contains
        ``<doc>`` or ``</doc>`` can be misread as a passage boundary, and
        retrieved text from untrusted sources may carry prompt injection
        payloads.  Callers should filter passages before indexing them.
    """

    __slots__ = ("_close", "_open")

    def __init__(self, tag: str = "doc") -> None:
        if not tag or not tag.isidentifier():
            msg = f"tag must be a non-empty identifier, got {tag!r}"
            raise ValueError(msg)
        self._open = f"<{tag}>"
        self._close = f"</{tag}>"

    def __repr__(self) -> str:
        return f"DocumentFormatter(tag={self._open[1:-1]!r})"

    @property
    def format_type(self) -> str:
        return "doc_envelope"

    def format(self, passages: Sequence[RetrievedPassage]) -> str:
        """Wrap each passage and join them with newlines.

        An empty sequence yields an empty string.
        """
        return "\n".join(
            f"{self._open}\n{passage.text}\n{self._close}" for passage in passages
        )
