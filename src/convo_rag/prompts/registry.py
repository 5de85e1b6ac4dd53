"""Prompt template registries.

``InMemoryTemplateRegistry`` is the default provider.  Production users
can supply their own versioned store that satisfies the
``PromptTemplateProvider`` protocol.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Iterable
from pathlib import Path

from pydantic import ValidationError

from convo_rag.exceptions import TemplateNotFoundError
from convo_rag.models.prompt import PromptTemplate

from .defaults import default_templates

logger = logging.getLogger(__name__)


class InMemoryTemplateRegistry:
    """Dict-backed template provider. Implements PromptTemplateProvider.

    Starts with the built-in templates unless ``include_defaults=False``.
    """

    __slots__ = ("_lock", "_templates")

    def __init__(
        self,
        templates: Iterable[PromptTemplate] = (),
        *,
        include_defaults: bool = True,
    ) -> None:
        self._templates: dict[str, PromptTemplate] = {}
        self._lock = threading.Lock()
        if include_defaults:
            for template in default_templates():
                self._templates[template.name] = template
        for template in templates:
            self._templates[template.name] = template

    def __repr__(self) -> str:
        return f"{type(self).__name__}(templates={sorted(self._templates)})"

    def register(self, template: PromptTemplate) -> InMemoryTemplateRegistry:
        """Add or replace a template. Returns self for chaining."""
        with self._lock:
            self._templates[template.name] = template
        return self

    def resolve(self, name: str) -> PromptTemplate:
        with self._lock:
            template = self._templates.get(name)
        if template is None:
            raise TemplateNotFoundError(name)
        return template

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._templates)


class JsonFileTemplateRegistry(InMemoryTemplateRegistry):
    """Template provider loaded from a JSON file.

    The file maps template names to ``{"system": ..., "human": ...}``
    objects.  Templates in the file override the built-in ones with the
    same name::

        {"answer-generation": {"system": "You are a chef...", "human": "{question}"}}
    """

    __slots__ = ("_file_path",)

    def __init__(self, file_path: str | Path, *, include_defaults: bool = True) -> None:
        self._file_path = Path(file_path).resolve()
        super().__init__(self._read(), include_defaults=include_defaults)

    def _read(self) -> list[PromptTemplate]:
        try:
            raw = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            msg = f"Cannot read prompt templates from {self._file_path}"
            raise TemplateNotFoundError(self._file_path.name, msg) from e

        if not isinstance(raw, dict):
            msg = f"Prompt template file {self._file_path} must contain a JSON object"
            raise TemplateNotFoundError(self._file_path.name, msg)

        templates: list[PromptTemplate] = []
        for name, body in raw.items():
            try:
                templates.append(PromptTemplate.model_validate({**body, "name": name}))
            except (TypeError, ValidationError) as e:
                msg = f"Prompt template '{name}' in {self._file_path} is invalid"
                raise TemplateNotFoundError(name, msg) from e
        logger.debug("Loaded %d prompt templates from %s", len(templates), self._file_path)
        return templates
