"""Header construction for upstream requests and client responses."""

from collections.abc import Iterable

# Hop-by-hop headers are connection-scoped and never relayed (RFC 7230)
HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "proxy-connection",
        "te",
        "trailer",
        "trailers",
        "transfer-encoding",
        "upgrade",
    }
)

UPSTREAM_DROPPED_HEADERS = HOP_BY_HOP_HEADERS | {"host", "content-length"}

CONTENT_SECURITY_POLICY = "; ".join(
    [
        "default-src 'self'",
        "base-uri 'self'",
        "font-src 'self' https: data:",
        "form-action 'self'",
        "frame-ancestors 'self'",
        "img-src 'self' data:",
        "object-src 'none'",
        "script-src 'self'",
        "script-src-attr 'none'",
        "style-src 'self' https: 'unsafe-inline'",
        "upgrade-insecure-requests",
    ]
)

SECURITY_HEADERS = {
    "Content-Security-Policy": CONTENT_SECURITY_POLICY,
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Origin-Agent-Cluster": "?1",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Frame-Options": "SAMEORIGIN",
    "X-Permitted-Cross-Domain-Policies": "none",
    "X-XSS-Protection": "0",
}

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Origin, X-Requested-With, Content-Type, Accept, Authorization",
}


class HeaderBuilder:
    """Build headers for outbound requests and relayed responses.

    Header names and values stay as raw bytes so obs-text values pass
    through untouched in both directions.
    """

    def build_upstream_headers(
        self,
        headers: Iterable[tuple[bytes, bytes]],
        host: str,
    ) -> list[tuple[bytes, bytes]]:
        """Copy inbound headers, rewriting Host to the selected target."""
        upstream = [
            (key, value)
            for key, value in headers
            if key.lower().decode("latin-1") not in UPSTREAM_DROPPED_HEADERS
        ]
        upstream.append((b"host", host.encode("ascii")))
        return upstream

    def build_response_headers(
        self,
        headers: Iterable[tuple[bytes, bytes]],
    ) -> list[tuple[bytes, bytes]]:
        """Drop hop-by-hop headers from an upstream response, keeping repeats.

        Names are lower-cased as ASGI expects.
        """
        return [
            (key.lower(), value)
            for key, value in headers
            if key.lower().decode("latin-1") not in HOP_BY_HOP_HEADERS
        ]
