"""Content-type inference by file extension."""

from pathlib import PurePath
from types import MappingProxyType

DEFAULT_CONTENT_TYPE = "text/plain"

CONTENT_TYPES: MappingProxyType[str, str] = MappingProxyType(
    {
        ".html": "text/html",
        ".css": "text/css",
        ".js": "text/javascript",
    }
)


def content_type_for(path: str | PurePath) -> str:
    """Return the MIME type for *path*'s extension.

    Matching is exact on the final suffix (``.HTML`` is not ``.html``);
    unknown or missing extensions get ``text/plain``.
    """
    return CONTENT_TYPES.get(PurePath(path).suffix, DEFAULT_CONTENT_TYPE)
