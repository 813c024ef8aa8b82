"""FastAPI route handlers."""

from fastapi import Request, Response
from fastapi.responses import HTMLResponse, PlainTextResponse

from core.config import Config
from core.exceptions import RequestTooLarge, UpstreamError
from core.protocols import RequestLogger
from core.router import RouteClass
from ui.log_utils import write_incoming_log

ROOT_PAGE = "<h1>Welcome</h1><p>This is a secure gateway.</p>"


def request_path(request: Request) -> str:
    """Return the still-encoded request path, without the query string."""
    raw_path = request.scope.get("raw_path")
    if not raw_path:
        return request.url.path
    return raw_path.split(b"?", 1)[0].decode("latin-1")


async def read_body(request: Request, limit: int) -> bytes:
    """Buffer the request body, refusing anything above the size limit."""
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > limit:
        raise RequestTooLarge(int(declared), limit)

    # Chunked uploads carry no length, so the running total is checked per chunk
    chunks = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > limit:
            raise RequestTooLarge(received, limit)
        chunks.append(chunk)
    return b"".join(chunks)


async def handle_request(
    request: Request,
    config: Config,
    logger: RequestLogger,
) -> Response:
    """Dispatch any inbound request through the route table."""
    method = request.method
    path = request_path(request)

    routing_service = request.app.state.routing_service
    decision = routing_service.decide(method, path)

    if decision.route == RouteClass.ROOT:
        return handle_root()
    if not decision.is_proxied:
        return handle_not_found(method, path, logger)

    try:
        body = await read_body(request, config.limits.max_body_size)
    except RequestTooLarge as e:
        logger.log_error(decision.route.value, 413, f"{method} {path}: {e}")
        return PlainTextResponse("Payload Too Large", status_code=413)

    headers = dict(request.headers)
    logger.log_incoming(method, path, headers, len(body))
    if config.proxy.debug:
        write_incoming_log(method, path, headers, len(body))

    prepared = routing_service.prepare(
        decision, method, request.url.query, request.headers.raw, body
    )
    upstream = request.app.state.upstream_client

    try:
        return await upstream.forward(prepared, logger)
    except UpstreamError as e:
        logger.log_error(
            prepared.route_name,
            503,
            f"Target {e.target} failed for {prepared.original_path}: {type(e).__name__}: {e}",
        )
        return PlainTextResponse("Service Unavailable", status_code=503)


def handle_root() -> Response:
    """Serve the static welcome page."""
    return HTMLResponse(ROOT_PAGE)


def handle_not_found(method: str, path: str, logger: RequestLogger) -> Response:
    logger.log_unmatched(method, path)
    return PlainTextResponse("Not Found", status_code=404)
