"""Terminal error formatting for the wren server.

Structured, human-readable error output for server-side logs. Replaces
raw ``logger.exception()`` with clean diagnostics that highlight the
useful information.

Verbosity is controlled by the ``WREN_TRACEBACK`` environment variable:
``compact`` (default, application frames only), ``full`` (the whole
Python traceback), or ``minimal`` (one line).
"""

from __future__ import annotations

import logging
import os
import traceback as _traceback
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from wren.http.request import Request

logger = logging.getLogger("wren.server")

_MAX_FRAMES = 5


def _is_app_frame(filename: str) -> bool:
    """True if the frame is from the application (not stdlib/site-packages)."""
    if "site-packages" in filename:
        return False
    if filename.startswith("<"):
        return False
    stdlib_prefix = os.path.dirname(os.__file__)
    return not filename.startswith(stdlib_prefix)


def format_compact_traceback(exc: BaseException) -> str:
    """Format an error with application frames only.

    Falls back to the last three frames when none of them belong to the
    application (e.g. an ``OSError`` raised inside a worker thread).
    """
    tb = exc.__traceback__
    frames = _traceback.extract_tb(tb) if tb else []
    app_frames = [f for f in frames if _is_app_frame(f.filename)]
    display_frames = app_frames if app_frames else frames[-3:]

    parts = [f"{type(exc).__name__}: {exc}"]
    if display_frames:
        parts.append("  Trace (app frames):")
        for frame in display_frames[-_MAX_FRAMES:]:
            parts.append(f"    {frame.filename}:{frame.lineno} in {frame.name}")
            if frame.line:
                parts.append(f"      {frame.line.strip()}")
    return "\n".join(parts)


def format_minimal_error(exc: BaseException) -> str:
    """One-line error summary."""
    tb = exc.__traceback__
    frames = _traceback.extract_tb(tb) if tb else []
    last = frames[-1] if frames else None
    location = f" at {last.filename}:{last.lineno}" if last else ""
    return f"{type(exc).__name__}{location}: {exc}"


def log_error(exc: BaseException, request: Request | None = None) -> None:
    """Log a server-side failure with the configured verbosity.

    Args:
        exc: The exception behind the 500 response.
        request: The request that triggered it, when there is one.
    """
    prefix = f"500 {request.method} {request.path}" if request is not None else "Server error"
    style = os.environ.get("WREN_TRACEBACK", "compact").lower()

    if style == "full":
        logger.error(prefix, exc_info=exc)
    elif style == "minimal":
        logger.error("%s - %s", prefix, format_minimal_error(exc))
    else:
        logger.error("%s\n%s", prefix, format_compact_traceback(exc))
