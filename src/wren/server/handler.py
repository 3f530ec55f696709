"""ASGI handler — translates ASGI scope/messages to wren types.

The only component that touches raw ASGI for HTTP requests. Converts
scope dicts to typed Request objects, dispatches through the router,
and sends the Response back through ASGI send().
"""

import inspect
import logging
from collections.abc import Callable, Mapping
from typing import Any

from wren._internal.asgi import Receive, Scope, Send
from wren._internal.invoke import invoke
from wren.errors import HTTPError
from wren.http.request import Request
from wren.http.response import Response
from wren.routing.route import RouteMatch
from wren.routing.router import Router
from wren.server.errors import handle_http_error, handle_internal_error
from wren.server.sender import send_response

trace_logger = logging.getLogger("wren.trace")


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    services: Mapping[str, Any],
    trace: bool = False,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)

    if trace:
        trace_logger.info("Handling request from client for %s", request.path)

    try:
        match = router.match(request.method, request.path)
        response = await _invoke_handler(match, request, services)
    except HTTPError as exc:
        response = handle_http_error(exc, request)
    except Exception as exc:
        response = handle_internal_error(exc, request)

    await send_response(response, send)

    if trace:
        trace_logger.info(
            "Completed request for %s (%d)", request.path, response.status
        )


async def _invoke_handler(
    match: RouteMatch,
    request: Request,
    services: Mapping[str, Any],
) -> Response:
    """Call the matched route handler with the arguments it asks for."""
    handler = match.route.handler
    kwargs = _build_handler_kwargs(handler, request, match.subpaths, services)
    result = await invoke(handler, **kwargs)
    return _to_response(result)


def _build_handler_kwargs(
    handler: Callable[..., Any],
    request: Request,
    subpaths: tuple[str, ...],
    services: Mapping[str, Any],
) -> dict[str, Any]:
    """Inspect the handler signature and build kwargs by parameter name.

    Resolution order:
    1. ``request`` (by name or ``Request`` annotation)
    2. ``subpaths``
    3. App services (``config``, ``store``, ``app``)
    """
    sig = inspect.signature(handler)
    kwargs: dict[str, Any] = {}

    for name, param in sig.parameters.items():
        if name == "request" or param.annotation is Request:
            kwargs[name] = request
        elif name == "subpaths":
            kwargs[name] = subpaths
        elif name in services:
            kwargs[name] = services[name]

    return kwargs


def _to_response(result: Any) -> Response:
    """Normalize a handler return value.

    Handlers return a ``Response``, a string/bytes body, or a
    ``(body, status)`` tuple.
    """
    if isinstance(result, Response):
        return result
    if isinstance(result, (str, bytes)):
        return Response(body=result)
    if isinstance(result, tuple) and len(result) == 2:
        body, status = result
        return Response(body=body, status=status)
    msg = f"Handler returned unsupported type {type(result).__name__}"
    raise TypeError(msg)
