"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request

from api.handlers import handle_request
from api.middleware import register_middleware
from core.config import Config
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.router import RouteDecider
from core.transform import PathRewriter
from services.routing_service import RoutingService
from services.targets import TargetRegistry, TargetSelector
from services.upstream import UpstreamClient

def create_app(
    config: Config,
    logger: RequestLogger,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Raises:
        ConfigurationError: the routing settings cannot form a route table
    """
    registry = TargetRegistry.from_config(config)
    decider = RouteDecider(config.routing.mount_prefix, config.routing.direct_endpoints)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        limits = httpx.Limits(
            max_connections=config.limits.max_connections,
            max_keepalive_connections=config.limits.max_keepalive_connections,
        )
        client = httpx.AsyncClient(
            timeout=config.limits.upstream_timeout,
            limits=limits,
            follow_redirects=False,
            transport=transport,
        )
        header_builder = HeaderBuilder()
        app.state.upstream_client = UpstreamClient(client, header_builder)
        app.state.routing_service = RoutingService(
            decider=decider,
            rewriter=PathRewriter(config.routing.mount_prefix),
            selector=TargetSelector(registry, logger),
            header_builder=header_builder,
        )
        try:
            yield
        finally:
            await client.aclose()

    # No generated docs: nothing beyond the routes below is served
    app = FastAPI(
        title="Gateway Relay",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.registry = registry
    register_middleware(app)

    async def dispatch(request: Request):
        return await handle_request(request, config, logger)

    # methods=None lets every verb through, including WebDAV and cache verbs
    app.router.add_route("/{path:path}", dispatch, methods=None, include_in_schema=False)

    return app
