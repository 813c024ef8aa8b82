"""Path rewriting for forwarded requests."""

from core.router import RouteClass, RouteDecision


class PathRewriter:
    """Translate an inbound path into the path sent to a backend target."""

    def __init__(self, mount_prefix: str = "/c2"):
        self.mount_prefix = "/" + mount_prefix.strip("/")

    def rewrite(self, decision: RouteDecision) -> str:
        """Rewrite a proxied path according to its route class."""
        if decision.route == RouteClass.PREFIX_PROXY:
            return self.strip_prefix(decision.path, self.mount_prefix)
        if decision.route == RouteClass.DIRECT_PROXY:
            return self.lower_path(decision.path)
        return decision.path

    @staticmethod
    def strip_prefix(path: str, prefix: str) -> str:
        """Remove the mount prefix in any letter case; the bare prefix maps to '/'."""
        if not path.lower().startswith(prefix.lower()):
            return path
        return path[len(prefix):] or "/"

    @staticmethod
    def lower_path(path: str) -> str:
        return path.lower()
