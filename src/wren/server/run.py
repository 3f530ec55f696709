"""Server startup.

Starts a pounce ASGI server with the live wren App object, single worker:
one event loop dispatches every connection, file reads go to worker
threads.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from wren.errors import ConfigurationError

if TYPE_CHECKING:
    from wren.app import App


def run_server(
    app: App,
    host: str = "127.0.0.1",
    port: int = 5008,
    *,
    log_level: str = "info",
) -> None:
    """Serve *app* with pounce until the process is stopped.

    Pounce's ``run()`` takes an import string, but wren has a live
    ``App`` object, so ``pounce.Server`` is used directly with the ASGI
    callable.

    Args:
        app: The wren App.
        host: Bind host address.
        port: Bind port number.
        log_level: pounce log level (debug, info, warning, error, critical).

    Raises:
        ConfigurationError: If pounce is not installed.
    """
    try:
        from pounce.config import ServerConfig
        from pounce.server import Server
    except ImportError:
        msg = (
            "wren needs the 'bengal-pounce' ASGI server to serve requests "
            "(Python 3.14+). Install it with: pip install bengal-pounce"
        )
        raise ConfigurationError(msg) from None

    config = ServerConfig(
        host=host,
        port=port,
        workers=1,
        log_level=log_level,
    )
    server = Server(config, app)
    server.run()
