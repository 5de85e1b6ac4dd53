"""Helpers for calling collaborators that may be sync or async."""

from __future__ import annotations

import inspect
from typing import Any


async def maybe_await(value: Any) -> Any:
    """Await ``value`` if it is awaitable, otherwise return it as-is.

    Lets a pipeline mix sync collaborators (in-memory indexes, test
    fakes) with async ones (network clients) behind one call site.
    """
    if inspect.isawaitable(value):
        return await value
    return value
