"""Wren — a small async static asset server.

Serves an entry document at ``/``, files beneath an assets root at
``/public/...``, and accepts user registrations at ``/adduser``.

Basic usage::

    from wren import ServerConfig, create_app

    app = create_app(ServerConfig(site_root="site", trace=True))
    app.run()

Custom routes are keyed by the first path segment::

    from wren import App

    app = App()

    @app.route("health")
    def health():
        return "ok"
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "BadRequest",
    "ConfigurationError",
    "HTTPError",
    "MethodNotAllowed",
    "NotFound",
    "Request",
    "Response",
    "ServerConfig",
    "UserStoreError",
    "WrenError",
    "create_app",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wren`` fast while providing a clean top-level API.
    """
    if name in ("App", "create_app"):
        from wren import app as _app

        return getattr(_app, name)

    if name == "ServerConfig":
        from wren.config import ServerConfig

        return ServerConfig

    if name == "Request":
        from wren.http.request import Request

        return Request

    if name == "Response":
        from wren.http.response import Response

        return Response

    if name in (
        "BadRequest",
        "ConfigurationError",
        "HTTPError",
        "MethodNotAllowed",
        "NotFound",
        "UserStoreError",
        "WrenError",
    ):
        from wren import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
