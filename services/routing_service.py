"""Routing orchestration for proxy requests."""

from core.headers import HeaderBuilder
from core.request_types import ProxyRequest
from core.router import RouteDecider, RouteDecision
from core.transform import PathRewriter
from services.targets import TargetSelector


class RoutingService:
    """Prepare inbound requests for forwarding to a backend target."""

    def __init__(
        self,
        decider: RouteDecider,
        rewriter: PathRewriter,
        selector: TargetSelector,
        header_builder: HeaderBuilder,
    ) -> None:
        self._decider = decider
        self._rewriter = rewriter
        self._selector = selector
        self._headers = header_builder

    def decide(self, method: str, path: str) -> RouteDecision:
        return self._decider.decide(method, path)

    def prepare(
        self,
        decision: RouteDecision,
        method: str,
        query: str,
        headers: list[tuple[bytes, bytes]],
        body: bytes,
    ) -> ProxyRequest:
        """Rewrite the path, pick a target and build the outbound request."""
        path = self._rewriter.rewrite(decision)
        # Selection advances the rotation, so only proxied routes reach it
        target = self._selector.select()
        return ProxyRequest(
            route_name=decision.route.value,
            method=method,
            target=target.url,
            url=target.join(path, query),
            headers=self._headers.build_upstream_headers(headers, target.host),
            body=body,
            original_path=decision.path,
        )
