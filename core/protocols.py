"""Shared protocol definitions."""

from typing import Any, Protocol


class RequestLogger(Protocol):
    """Protocol for request logging (Dashboard or ConsoleLogger)."""

    def log_incoming(
        self,
        method: str,
        path: str,
        headers: dict[str, str],
        body_size: int,
    ) -> None: ...
    def log_target(self, url: str) -> None: ...
    def log_invalid_target(self, entry: Any, reason: str) -> None: ...
    def log_forward(
        self,
        route: str,
        method: str,
        path: str,
        *,
        target: str,
        body_size: int,
    ) -> None: ...
    def log_response(self, route: str, path: str, status: int) -> None: ...
    def log_unmatched(self, method: str, path: str) -> None: ...
    def log_error(self, route: str, status: int, message: str) -> None: ...
