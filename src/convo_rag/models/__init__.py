"""Core data models for convo-rag."""

from .message import Message, PromptMessage, PromptRole, Role
from .passage import RetrievedPassage
from .prompt import PromptTemplate
from .state import PipelineState

__all__ = [
    "Message",
    "PipelineState",
    "PromptMessage",
    "PromptRole",
    "PromptTemplate",
    "RetrievedPassage",
    "Role",
]
