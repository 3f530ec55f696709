"""Wren application class.

Mutable during setup (route registration, lifecycle hooks).
Frozen at runtime when app.run() or __call__() is first invoked.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from wren._internal.asgi import Receive, Scope, Send
from wren._internal.invoke import invoke
from wren.config import ServerConfig
from wren.routing.route import Route
from wren.routing.router import Router
from wren.server.handler import handle_request
from wren.users.store import MemoryUserStore, UserStore

logger = logging.getLogger("wren.server")

Handler = Callable[..., Any]


@dataclass(slots=True)
class _PendingRoute:
    """A route waiting to be compiled."""

    key: str
    handler: Handler
    methods: list[str] | None
    name: str | None


class App:
    """The wren application.

    Mutable during setup (route registration, hooks).
    Frozen at runtime when ``app.run()`` or ``__call__()`` is first invoked.

    Thread safety:
        Setup is single-threaded. The freeze transition uses a Lock +
        double-check so exactly one thread compiles the route table, even
        if several workers deliver their first request at once.
    """

    __slots__ = (
        "_freeze_lock",
        "_frozen",
        "_pending_routes",
        "_router",
        "_services",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
        "store",
    )

    def __init__(
        self,
        config: ServerConfig | None = None,
        *,
        store: UserStore | None = None,
    ) -> None:
        self.config: ServerConfig = config or ServerConfig()
        self.store: UserStore = store if store is not None else MemoryUserStore()
        self._pending_routes: list[_PendingRoute] = []
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Compiled state — set during _freeze()
        self._router: Router | None = None
        self._services: dict[str, Any] = {}

    # -- Route registration --

    def route(
        self,
        key: str,
        *,
        methods: list[str] | None = None,
        name: str | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register a handler for a top-level path segment via decorator.

        Args:
            key: First path segment (``""`` for the site root, ``"public"``
                for ``/public/...``). Remaining segments reach the handler
                as ``subpaths``.
            methods: HTTP methods. Defaults to ``["GET"]``.
            name: Optional display name.
        """

        def decorator(func: Handler) -> Handler:
            self._check_not_frozen()
            self._pending_routes.append(_PendingRoute(key, func, methods, name))
            return func

        return decorator

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order after the user store opens,
        before the server begins accepting HTTP requests.
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator.

        Hooks run in registration order before the user store closes.
        """
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    @property
    def router(self) -> Router:
        """The compiled router (freezes the app on first access)."""
        self._ensure_frozen()
        assert self._router is not None
        return self._router

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Compile the app and serve it until the process is stopped.

        Attaches the stdout log handler first, so trace lines and the
        startup line appear however the app was launched.

        Args:
            host: Override bind host.
            port: Override bind port.
        """
        self._ensure_frozen()
        from wren.server.logs import configure_logging
        from wren.server.run import run_server

        port = port if port is not None else self.config.port
        configure_logging(self.config.log_level, trace=self.config.trace)
        logger.info("Server is running on port %d", port)

        run_server(
            self,
            host=host or self.config.host,
            port=port,
            log_level=self.config.log_level,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles lifespan scopes directly, then delegates HTTP scopes to
        the request handler pipeline.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()
        assert self._router is not None
        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            services=self._services,
            trace=self.config.trace,
        )

    async def startup(self) -> None:
        """Open the user store, then run startup hooks."""
        self._ensure_frozen()
        await self.store.open()
        for hook in self._startup_hooks:
            await invoke(hook)

    async def shutdown(self) -> None:
        """Run shutdown hooks, then close the user store."""
        for hook in self._shutdown_hooks:
            await invoke(hook)
        await self.store.close()

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol."""
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self.startup()
                except Exception as exc:
                    logger.exception("Startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                try:
                    await self.shutdown()
                except Exception as exc:
                    logger.exception("Shutdown failed")
                    await send({"type": "lifespan.shutdown.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        router = Router()
        for pending in self._pending_routes:
            methods = frozenset(m.upper() for m in (pending.methods or ["GET"]))
            router.add(
                Route(
                    key=pending.key,
                    handler=pending.handler,
                    methods=methods,
                    name=pending.name,
                )
            )
        router.compile()
        self._router = router

        self._services = {"app": self, "config": self.config, "store": self.store}
        self._frozen = True

        if self.config.trace:
            for route in router.routes:
                logger.debug("Route %s %s", ", ".join(sorted(route.methods)), route.path)

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes and hooks before calling app.run()."
            )
            raise RuntimeError(msg)


def create_app(config: ServerConfig | None = None, *, store: UserStore | None = None) -> App:
    """Build the default site: home page, public assets, and user registration.

    When *store* is omitted, ``config.database`` selects a SQLite store;
    without one, registrations live in memory.
    """
    from wren import handlers

    config = config or ServerConfig()
    if store is None and config.database is not None:
        from wren.users.sqlite import SQLiteUserStore

        store = SQLiteUserStore(config.database)

    app = App(config, store=store)
    app.route("", name="home")(handlers.home_page)
    app.route("adduser", methods=["POST"], name="adduser")(handlers.add_user)
    app.route("public", name="public")(handlers.public_assets)
    return app

