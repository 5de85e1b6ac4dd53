"""Load plain-text files as passages."""

from __future__ import annotations

import logging
from pathlib import Path

from convo_rag.exceptions import RetrievalError
from convo_rag.models.passage import RetrievedPassage

logger = logging.getLogger(__name__)

_DEFAULT_SUFFIXES: tuple[str, ...] = (".txt", ".md")


def load_passages(
    path: str | Path,
    suffixes: tuple[str, ...] = _DEFAULT_SUFFIXES,
) -> list[RetrievedPassage]:
    """Read a file, or every matching file under a directory, as one passage each.

    Empty files are skipped.  Each passage records its file in
    ``metadata["source"]``.  Files are read in sorted path order.
    """
    root = Path(path)
    if not root.exists():
        msg = f"{root} does not exist"
        raise RetrievalError(msg)

    if root.is_file():
        files = [root]
    else:
        files = sorted(p for p in root.rglob("*") if p.is_file() and p.suffix in suffixes)

    passages: list[RetrievedPassage] = []
    for file in files:
        try:
            text = file.read_text(encoding="utf-8").strip()
        except (OSError, UnicodeDecodeError) as e:
            msg = f"Cannot read passage file {file}"
            raise RetrievalError(msg) from e
        if not text:
            logger.debug("Skipping empty file %s", file)
            continue
        passages.append(RetrievedPassage(text=text, metadata={"source": str(file)}))
    logger.debug("Loaded %d passages from %s", len(passages), root)
    return passages
