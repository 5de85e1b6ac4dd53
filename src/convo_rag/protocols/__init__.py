"""Protocol definitions for convo-rag's pluggable collaborators."""

from .completer import TextCompleter
from .history import HistoryBackend, HistoryWindow
from .retriever import Retriever
from .templates import PromptTemplateProvider

__all__ = [
    "HistoryBackend",
    "HistoryWindow",
    "PromptTemplateProvider",
    "Retriever",
    "TextCompleter",
]
