"""Compiled router keyed by the first path segment.

The route key selects the handler; the remaining segments travel to the
handler untouched so it can rebuild nested file paths.
"""

from types import MappingProxyType

from wren.errors import ConfigurationError, MethodNotAllowed, NotFound
from wren.http.request import split_path
from wren.routing.route import Route, RouteMatch


class Router:
    """Route table with one entry per top-level path segment.

    Usage::

        router = Router()
        router.add(Route("", home, frozenset({"GET"})))
        router.add(Route("public", assets, frozenset({"GET"})))
        router.compile()
        match = router.match("GET", "/public/css/site.css")
        match.subpaths  # ("css", "site.css")
    """

    __slots__ = ("_compiled", "_table")

    def __init__(self) -> None:
        self._table: dict[str, Route] | MappingProxyType[str, Route] = {}
        self._compiled = False

    def add(self, route: Route) -> None:
        """Add a route to the router. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)
        if "/" in route.key:
            msg = f"Route key {route.key!r} must be a single path segment."
            raise ConfigurationError(msg)
        if route.key in self._table:
            msg = f"Route key {route.key!r} is already registered."
            raise ConfigurationError(msg)
        if not route.methods:
            msg = f"Route {route.path!r} must allow at least one method."
            raise ConfigurationError(msg)
        self._table[route.key] = route  # type: ignore[index]

    @property
    def routes(self) -> list[Route]:
        """Return all registered routes, in registration order."""
        return list(self._table.values())

    @property
    def compiled(self) -> bool:
        return self._compiled

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._table = MappingProxyType(dict(self._table))
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request path and method against the route table.

        Returns a ``RouteMatch`` on success.
        Raises ``NotFound`` if no route answers for the route key.
        Raises ``MethodNotAllowed`` if the key matches but the method doesn't.
        """
        key, subpaths = split_path(path)
        route = self._table.get(key)

        if route is None:
            raise NotFound(f"No route matches {method} {path!r}")

        if method not in route.methods:
            raise MethodNotAllowed(route.methods)

        return RouteMatch(route=route, subpaths=subpaths)
