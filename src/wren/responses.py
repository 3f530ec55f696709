"""Fixed error responses.

The single source of truth for error formatting: every error the server
answers with comes out of ``ERROR_RESPONSES``. Handlers raise
``HTTPError`` subclasses; the request pipeline turns them into these.
"""

from collections.abc import Iterable
from types import MappingProxyType

from wren.http.response import Response

ERROR_CONTENT_TYPE = "text/html"

ERROR_RESPONSES: MappingProxyType[int, str] = MappingProxyType(
    {
        400: "Bad Request.",
        404: "Resource not found.",
        405: "Method not allowed.",
        500: "Internal Server Error",
    }
)


def error_response(status: int) -> Response:
    """Build the fixed response for *status*.

    Statuses without an entry fall back to the 500 body, so a client
    never sees anything but one of the fixed strings.
    """
    body = ERROR_RESPONSES.get(status, ERROR_RESPONSES[500])
    return Response(body=body, status=status, content_type=ERROR_CONTENT_TYPE)


def bad_request() -> Response:
    return error_response(400)


def not_found() -> Response:
    return error_response(404)


def method_not_allowed(allowed: Iterable[str] = ()) -> Response:
    """405, with an ``Allow`` header when the allowed methods are known."""
    response = error_response(405)
    allow = ", ".join(sorted(allowed))
    if allow:
        response = response.with_header("Allow", allow)
    return response


def internal_server_error() -> Response:
    return error_response(500)
