"""Error handling pipeline for wren requests.

Maps HTTPError exceptions and unexpected failures to the fixed helper
responses. Clients only ever see the helper bodies; details go to the log.
"""

import logging

from wren.errors import HTTPError
from wren.http.request import Request
from wren.http.response import Response
from wren.responses import error_response, internal_server_error
from wren.server.terminal_errors import log_error

logger = logging.getLogger("wren.server")


def handle_http_error(exc: HTTPError, request: Request) -> Response:
    """Map an HTTPError to its fixed response, keeping its headers."""
    logger.debug("%d %s %s - %s", exc.status, request.method, request.path, exc.detail)

    response = error_response(exc.status)
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


def handle_internal_error(exc: Exception, request: Request) -> Response:
    """Log an unexpected exception and answer 500."""
    log_error(exc, request)
    return internal_server_error()
