"""Formatters for retrieved passages and prompt history."""

from .documents import DocumentFormatter

__all__ = ["DocumentFormatter"]
