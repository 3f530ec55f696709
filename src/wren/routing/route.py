"""Route and RouteMatch frozen dataclasses."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Route:
    """A frozen route definition.

    ``key`` is the first path segment the route answers for (``""`` is
    the site root). Created during app setup, compiled into the router
    at freeze time.
    """

    key: str
    handler: Callable[..., Any]
    methods: frozenset[str]
    name: str | None = None

    @property
    def path(self) -> str:
        """Display form of the route, e.g. ``/public``."""
        return f"/{self.key}"


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: Route
    subpaths: tuple[str, ...]
