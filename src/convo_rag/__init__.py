"""convo-rag: Session-scoped conversational retrieval-augmented generation.

Core Pipeline:
    ConversationalPipeline, QueryRephraseStage, RetrievalStage,
    AnswerSynthesisStage, PipelineCallback

Session History:
    SessionHistoryStore, HistoryLog, InMemoryHistoryBackend,
    JsonFileHistoryBackend, FullHistoryWindow, SlidingTurnWindow

Formatting:
    DocumentFormatter

Prompts:
    InMemoryTemplateRegistry, JsonFileTemplateRegistry

Retrieval:
    SparsePassageRetriever, DensePassageRetriever, load_passages

Completion:
    AnthropicCompleter

Protocols (extension points):
    Retriever, TextCompleter, PromptTemplateProvider, HistoryBackend,
    HistoryWindow

Models & Types:
    Message, PromptMessage, RetrievedPassage, PipelineState, PromptTemplate,
    Role, PromptRole

Exceptions:
    ConvoRagError, RetrievalError, CompletionError, TemplateNotFoundError,
    StorageError
"""

from importlib.metadata import PackageNotFoundError, version

from convo_rag.completion import AnthropicCompleter
from convo_rag.exceptions import (
    CompletionError,
    ConvoRagError,
    RetrievalError,
    StorageError,
    TemplateNotFoundError,
)
from convo_rag.formatters import DocumentFormatter
from convo_rag.memory import (
    FullHistoryWindow,
    HistoryLog,
    InMemoryHistoryBackend,
    JsonFileHistoryBackend,
    SessionHistoryStore,
    SlidingTurnWindow,
)
from convo_rag.models import (
    Message,
    PipelineState,
    PromptMessage,
    PromptRole,
    PromptTemplate,
    RetrievedPassage,
    Role,
)
from convo_rag.pipeline import (
    AnswerSynthesisStage,
    ConversationalPipeline,
    PipelineCallback,
    QueryRephraseStage,
    RetrievalStage,
)
from convo_rag.prompts import InMemoryTemplateRegistry, JsonFileTemplateRegistry
from convo_rag.protocols import (
    HistoryBackend,
    HistoryWindow,
    PromptTemplateProvider,
    Retriever,
    TextCompleter,
)
from convo_rag.retrieval import DensePassageRetriever, SparsePassageRetriever, load_passages

try:
    __version__ = version("convo-rag")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

__all__ = [
    "AnswerSynthesisStage",
    "AnthropicCompleter",
    "CompletionError",
    "ConversationalPipeline",
    "ConvoRagError",
    "DensePassageRetriever",
    "DocumentFormatter",
    "FullHistoryWindow",
    "HistoryBackend",
    "HistoryLog",
    "HistoryWindow",
    "InMemoryHistoryBackend",
    "InMemoryTemplateRegistry",
    "JsonFileHistoryBackend",
    "JsonFileTemplateRegistry",
    "Message",
    "PipelineCallback",
    "PipelineState",
    "PromptMessage",
    "PromptRole",
    "PromptTemplate",
    "PromptTemplateProvider",
    "QueryRephraseStage",
    "RetrievalError",
    "RetrievalStage",
    "RetrievedPassage",
    "Retriever",
    "Role",
    "SessionHistoryStore",
    "SlidingTurnWindow",
    "StorageError",
    "TemplateNotFoundError",
    "TextCompleter",
    "load_passages",
]
