"""HTTP proxying utilities for upstream requests."""

from collections.abc import AsyncIterator

import httpx
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from core.exceptions import UpstreamConnectionError, UpstreamTimeoutError
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.request_types import ProxyRequest


class UpstreamClient:
    """Forward prepared requests to backend targets with streaming relay."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        header_builder: HeaderBuilder,
    ) -> None:
        self._client = client
        self._headers = header_builder

    async def forward(
        self,
        prepared: ProxyRequest,
        logger: RequestLogger,
    ) -> StreamingResponse:
        """Send one attempt to the selected target and relay its response.

        Raises:
            UpstreamTimeoutError: the target did not answer in time
            UpstreamConnectionError: any other transport failure
        """
        logger.log_forward(
            prepared.route_name,
            prepared.method,
            prepared.original_path,
            target=prepared.target,
            body_size=len(prepared.body),
        )
        try:
            req = self._client.build_request(
                prepared.method,
                prepared.url,
                headers=prepared.headers,
                content=prepared.body or None,
            )
            response = await self._client.send(req, stream=True)
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(str(e), target=prepared.target) from e
        except (httpx.RequestError, httpx.InvalidURL) as e:
            raise UpstreamConnectionError(str(e), target=prepared.target) from e

        logger.log_response(prepared.route_name, prepared.original_path, response.status_code)

        relayed = StreamingResponse(
            self._relay_body(response, prepared, logger),
            status_code=response.status_code,
            background=BackgroundTask(self._cleanup_streaming, response),
        )
        relayed.raw_headers.extend(self._headers.build_response_headers(response.headers.raw))
        return relayed

    async def _relay_body(
        self,
        response: httpx.Response,
        prepared: ProxyRequest,
        logger: RequestLogger,
    ) -> AsyncIterator[bytes]:
        """Yield upstream bytes undecoded; a mid-stream failure ends the body."""
        try:
            async for chunk in response.aiter_raw():
                yield chunk
        except httpx.HTTPError as e:
            logger.log_error(
                prepared.route_name,
                response.status_code,
                f"Relay from {prepared.target} for {prepared.original_path} aborted: {e}",
            )

    async def _cleanup_streaming(self, response: httpx.Response) -> None:
        """Clean up streaming resources."""
        await response.aclose()
