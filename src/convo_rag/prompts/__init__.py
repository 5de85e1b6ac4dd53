"""Prompt templates and template providers."""

from .defaults import (
    ANSWER_TEMPLATE,
    ANSWER_TEMPLATE_NAME,
    REPHRASE_TEMPLATE,
    REPHRASE_TEMPLATE_NAME,
    default_templates,
)
from .registry import InMemoryTemplateRegistry, JsonFileTemplateRegistry

__all__ = [
    "ANSWER_TEMPLATE",
    "ANSWER_TEMPLATE_NAME",
    "REPHRASE_TEMPLATE",
    "REPHRASE_TEMPLATE_NAME",
    "InMemoryTemplateRegistry",
    "JsonFileTemplateRegistry",
    "default_templates",
]
