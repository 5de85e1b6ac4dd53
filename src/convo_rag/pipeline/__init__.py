"""Conversational pipeline orchestration."""

from .callbacks import PipelineCallback
from .pipeline import ConversationalPipeline
from .rephrase import QueryRephraseStage, clean_query
from .retrieval import RetrievalStage
from .synthesis import AnswerSynthesisStage

__all__ = [
    "AnswerSynthesisStage",
    "ConversationalPipeline",
    "PipelineCallback",
    "QueryRephraseStage",
    "RetrievalStage",
    "clean_query",
]
