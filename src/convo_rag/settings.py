"""Runtime settings for the convo-rag CLI.

Loaded from ``CONVO_RAG_*`` environment variables and an optional
``.env`` file in the working directory.  Library classes never read
settings themselves; they take everything through their constructors.

Requires the 'cli' extra: pip install convo-rag[cli]
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConvoRagSettings(BaseSettings):
    """Settings for wiring a pipeline from the command line.

    Attributes:
        model: Anthropic model used by both completers.
        rephrase_temperature: Sampling temperature for query rephrasing.
        answer_temperature: Sampling temperature for answers; ``None``
            keeps the API default.
        max_response_tokens: Response token cap for each completion.
        top_k: Passages retrieved per turn.
        docs_dir: File or directory of ``.txt``/``.md`` passages to index.
        history_file: JSON file for persistent history; in-memory if unset.
        templates_file: JSON file overriding the built-in prompt templates.
        session_id: Session used by the interactive loop.
        stage_timeout: Per-stage timeout in seconds; unlimited if unset.
        log_level: Level for the CLI's log handler.
    """

    model: str = "claude-haiku-4-5-20251001"
    rephrase_temperature: float = 0.1
    answer_temperature: float | None = None
    max_response_tokens: int = Field(default=1024, gt=0)
    top_k: int = Field(default=4, gt=0)
    docs_dir: Path = Path("docs")
    history_file: Path | None = None
    templates_file: Path | None = None
    session_id: str = "1"
    stage_timeout: float | None = Field(default=None, gt=0)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"

    model_config = SettingsConfigDict(
        env_prefix="CONVO_RAG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("rephrase_temperature", "answer_temperature")
    @classmethod
    def _temperature_range(cls, v: float | None) -> float | None:
        if v is not None and not 0.0 <= v <= 1.0:
            msg = f"temperature must be between 0.0 and 1.0, got {v}"
            raise ValueError(msg)
        return v
