"""Shared request data types."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ProxyRequest:
    """Prepared data for an upstream request."""

    route_name: str
    method: str
    target: str
    url: str
    headers: list[tuple[bytes, bytes]]
    body: bytes
    original_path: str
