"""Request routing logic - classifies inbound requests into route classes."""

from dataclasses import dataclass
from enum import Enum

from core.exceptions import ConfigurationError

SAFE_METHODS = frozenset({"GET", "HEAD"})


class RouteClass(str, Enum):
    PREFIX_PROXY = "prefix"
    DIRECT_PROXY = "direct"
    ROOT = "root"
    CATCH_ALL = "catch_all"


@dataclass(frozen=True)
class RouteDecision:
    """Routing decision for a request."""

    route: RouteClass
    path: str

    @property
    def is_proxied(self) -> bool:
        return self.route in (RouteClass.PREFIX_PROXY, RouteClass.DIRECT_PROXY)


class RouteDecider:
    """Match a request against the fixed route table.

    Routes are evaluated in order: the mount prefix and the direct endpoint
    names (both case-insensitive), the root page, and finally the catch-all.
    """

    def __init__(self, mount_prefix: str = "/c2", direct_endpoints: list[str] | None = None):
        self.mount_prefix = "/" + mount_prefix.strip("/")
        if self.mount_prefix == "/":
            raise ConfigurationError("mount_prefix must not be the root path")
        self.direct_endpoints = frozenset(name.lower() for name in direct_endpoints or [])

    def decide(self, method: str, path: str) -> RouteDecision:
        """Return the route class for a method and raw path."""
        if self._under_prefix(path):
            return RouteDecision(RouteClass.PREFIX_PROXY, path)
        if self._first_segment(path).lower() in self.direct_endpoints:
            return RouteDecision(RouteClass.DIRECT_PROXY, path)
        if path == "/" and method.upper() in SAFE_METHODS:
            return RouteDecision(RouteClass.ROOT, path)
        return RouteDecision(RouteClass.CATCH_ALL, path)

    def _under_prefix(self, path: str) -> bool:
        path = path.lower()
        prefix = self.mount_prefix.lower()
        return path == prefix or path.startswith(prefix + "/")

    @staticmethod
    def _first_segment(path: str) -> str:
        """Return the first path segment, '' for the root path."""
        return path.lstrip("/").split("/", 1)[0]
