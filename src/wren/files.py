"""File responder — read a file off the event loop and answer with it.

Reads run in an anyio worker thread so other requests keep moving while
the disk is busy. Every call produces exactly one complete response.
"""

import logging
from collections.abc import Iterable
from pathlib import Path

import anyio.to_thread

from wren.content_types import content_type_for
from wren.errors import NotFound
from wren.http.request import Request
from wren.http.response import Response
from wren.responses import internal_server_error
from wren.server.terminal_errors import log_error

logger = logging.getLogger("wren.server")

# Errors that mean "there is no file there" rather than "the disk failed"
_MISSING = (FileNotFoundError, NotADirectoryError, IsADirectoryError)


async def read_file(path: Path) -> bytes:
    """Read the whole file in a worker thread."""
    return await anyio.to_thread.run_sync(path.read_bytes)


def resolve_asset(root: Path, subpaths: Iterable[str]) -> Path | None:
    """Join *subpaths* onto *root* and resolve the result.

    Returns ``None`` when the resolved path escapes *root* (``..``
    segments, symlinks pointing outside) or cannot be represented.
    *root* must already be resolved.
    """
    try:
        candidate = root.joinpath(*subpaths).resolve()
    except (OSError, ValueError):
        return None
    if candidate == root or not candidate.is_relative_to(root):
        return None
    return candidate


async def respond_with_file(path: Path, request: Request | None = None) -> Response:
    """Answer with the contents of *path*.

    - Success: 200 with the content type from the extension table.
    - Missing file, or a directory: raises ``NotFound``.
    - Any other I/O failure: logged, answered with the fixed 500.
    """
    try:
        data = await read_file(path)
    except _MISSING as exc:
        raise NotFound(f"No file at {path}") from exc
    except OSError as exc:
        log_error(exc, request)
        return internal_server_error()

    logger.debug("Writing %s as response.", path)
    return Response(body=data, content_type=content_type_for(path))
