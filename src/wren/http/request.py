"""Immutable HTTP request.

Frozen metadata with async body access. The request is honest about
what it is: received data that doesn't change.
"""

from __future__ import annotations

import json as json_module
from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qsl

from wren._internal.asgi import Receive, Scope
from wren.errors import BadRequest
from wren.http.headers import Headers


def split_path(path: str) -> tuple[str, tuple[str, ...]]:
    """Split a request path into its route key and subpaths.

    The leading empty segment produced by the leading slash is discarded,
    the next segment is the route key, and everything after it is passed
    through verbatim::

        "/"                     -> ("", ())
        "/public/css/site.css"  -> ("public", ("css", "site.css"))
        "/adduser"              -> ("adduser", ())
    """
    parts = path.split("/")
    if parts and parts[0] == "":
        parts = parts[1:]
    if not parts:
        return "", ()
    return parts[0], tuple(parts[1:])


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Metadata (method, path, headers, etc.) is frozen at creation.
    Body is accessed asynchronously via ``.body()``, ``.json()``, ``.form()``.
    """

    method: str
    path: str
    headers: Headers
    query_string: bytes
    http_version: str
    server: tuple[str, int] | None
    client: tuple[str, int] | None

    # Private: ASGI receive callable for body streaming
    _receive: Receive

    # Private: mutable cache for the body and parsed forms
    # (dict contents are mutable even though the field reference is frozen)
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    # -- Async body access --

    async def body(self, *, max_size: int | None = None) -> bytes:
        """Read the full request body.

        Result is cached — the ASGI receive is consumed once, then the
        same bytes are returned on subsequent calls. Raises ``BadRequest``
        if the body grows past *max_size*.
        """
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks: list[bytes] = []
        size = 0
        async for chunk in self.stream():
            size += len(chunk)
            if max_size is not None and size > max_size:
                raise BadRequest(f"Request body exceeds {max_size} bytes")
            chunks.append(chunk)
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes, None]:
        """Stream the request body in chunks."""
        while True:
            message = await self._receive()
            if message.get("type") == "http.disconnect":
                break
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def text(self, *, max_size: int | None = None) -> str:
        """Read the body as text (UTF-8)."""
        raw = await self.body(max_size=max_size)
        return raw.decode("utf-8")

    async def json(self, *, max_size: int | None = None) -> Any:
        """Parse the body as JSON."""
        raw = await self.body(max_size=max_size)
        return json_module.loads(raw)

    async def form(self, *, max_size: int | None = None) -> dict[str, str]:
        """Parse a URL-encoded body. The first value wins for repeated keys."""
        if "_form" in self._cache:
            return self._cache["_form"]
        text = await self.text(max_size=max_size)
        result: dict[str, str] = {}
        for key, value in parse_qsl(text, keep_blank_values=True):
            result.setdefault(key, value)
        self._cache["_form"] = result
        return result

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=Headers(scope.get("headers", ())),
            query_string=scope.get("query_string", b""),
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
            _receive=receive,
        )
