"""Text completer implementations."""

from .anthropic import AnthropicCompleter

__all__ = ["AnthropicCompleter"]
