import httpx
import pytest

from core.exceptions import UpstreamConnectionError, UpstreamError, UpstreamTimeoutError
from core.headers import HeaderBuilder
from core.request_types import ProxyRequest
from services.upstream import UpstreamClient


def _prepared(body: bytes = b"", method: str = "POST") -> ProxyRequest:
    return ProxyRequest(
        route_name="direct",
        method=method,
        target="http://backend:8000",
        url="http://backend:8000/uploadexe",
        headers=[(b"host", b"backend:8000"), (b"content-type", b"application/octet-stream")],
        body=body,
        original_path="/UploadExe",
    )


class FailingStream(httpx.AsyncByteStream):
    async def __aiter__(self):
        yield b"partial"
        raise httpx.ReadError("connection reset")


async def _collect(response) -> bytes:
    return b"".join([chunk async for chunk in response.body_iterator])


@pytest.mark.asyncio
async def test_forward_relays_raw_response(logger):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(
            202,
            headers={"Content-Encoding": "gzip", "X-Id": "9"},
            content=b"\x1f\x8bcompressed",
        )

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        upstream = UpstreamClient(client, HeaderBuilder())
        response = await upstream.forward(_prepared(b"\x00\x01"), logger)
        body = await _collect(response)
        await response.background()

    assert response.status_code == 202
    assert body == b"\x1f\x8bcompressed"
    assert response.headers["content-encoding"] == "gzip"
    assert response.headers["x-id"] == "9"
    assert seen[0].content == b"\x00\x01"
    assert seen[0].headers["host"] == "backend:8000"


@pytest.mark.asyncio
async def test_get_without_body_sends_no_content(logger):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        upstream = UpstreamClient(client, HeaderBuilder())
        await upstream.forward(_prepared(method="GET"), logger)

    assert seen[0].content == b""
    assert "content-length" not in seen[0].headers


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (httpx.ConnectError("refused"), UpstreamConnectionError),
        (httpx.ReadTimeout("slow"), UpstreamTimeoutError),
        (httpx.PoolTimeout("busy"), UpstreamTimeoutError),
    ],
)
async def test_transport_errors_are_wrapped(logger, error, expected):
    def handler(request):
        raise error

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        upstream = UpstreamClient(client, HeaderBuilder())
        with pytest.raises(expected) as exc_info:
            await upstream.forward(_prepared(), logger)

    assert isinstance(exc_info.value, UpstreamError)
    assert exc_info.value.target == "http://backend:8000"
    assert not hasattr(exc_info.value, "status_code")
    assert logger.named("response") == []


@pytest.mark.asyncio
async def test_mid_stream_failure_ends_body(logger):
    def handler(request):
        return httpx.Response(200, stream=FailingStream())

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        upstream = UpstreamClient(client, HeaderBuilder())
        response = await upstream.forward(_prepared(), logger)
        body = await _collect(response)
        await response.background()

    assert body == b"partial"
    route, status, message = logger.named("error")[0]
    assert (route, status) == ("direct", 200)
    assert "/UploadExe" in message


@pytest.mark.asyncio
async def test_unparseable_target_url_is_connection_error(logger):
    prepared = ProxyRequest(
        route_name="prefix",
        method="GET",
        target="http://backend:port",
        url="http://backend:port/beacon",
        headers=[(b"host", b"backend:port")],
        body=b"",
        original_path="/c2/beacon",
    )

    transport = httpx.MockTransport(lambda request: httpx.Response(200))
    async with httpx.AsyncClient(transport=transport) as client:
        upstream = UpstreamClient(client, HeaderBuilder())
        with pytest.raises(UpstreamConnectionError):
            await upstream.forward(prepared, logger)
