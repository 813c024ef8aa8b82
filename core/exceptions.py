"""Custom exception hierarchy for the gateway."""


class ProxyError(Exception):
    """Base exception for all gateway errors."""


class ConfigurationError(ProxyError):
    """Raised when configuration is missing or invalid."""


class UpstreamError(ProxyError):
    """Raised when a backend target cannot serve a request.

    Attributes:
        message: Error message
        target: Backend base URL that was attempted
    """

    def __init__(self, message: str, target: str | None = None) -> None:
        super().__init__(message)
        self.target = target


class UpstreamTimeoutError(UpstreamError):
    """Raised when a backend target request times out."""


class UpstreamConnectionError(UpstreamError):
    """Raised when unable to connect to a backend target."""


class RequestTooLarge(ProxyError):
    """Request body exceeds size limit."""

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(f"Request body of {size} bytes exceeds {limit} bytes")
        self.size = size
        self.limit = limit
