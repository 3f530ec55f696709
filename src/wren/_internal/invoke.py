"""Invoke helpers — call sync or async callables uniformly.

Route handlers and lifecycle hooks can be ``def`` or ``async def``.
The sync/async check lives here, in exactly one place.
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it's awaitable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
