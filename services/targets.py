"""Backend target registry and round-robin selection."""

from dataclasses import dataclass
from threading import Lock
from typing import Any
from urllib.parse import urlsplit

from core.config import FALLBACK_TARGET_URL, Config
from core.exceptions import ConfigurationError
from core.protocols import RequestLogger

URL_SCHEMES = ("http://", "https://")


@dataclass(frozen=True)
class BackendTarget:
    """A validated backend base URL."""

    url: str

    @property
    def host(self) -> str:
        """Authority (host[:port]) used as the outbound Host header."""
        return urlsplit(self.url).netloc

    def join(self, path: str, query: str = "") -> str:
        """Prepend the target base URL to a rewritten path."""
        url = self.url.rstrip("/") + path
        if query:
            url += f"?{query}"
        return url


def validate_target(entry: Any) -> str | None:
    """Return the reason an entry is not a usable target, or None if it is."""
    if not entry:
        return "missing"
    if not isinstance(entry, str):
        return f"not a string ({type(entry).__name__})"
    if not entry.isascii():
        return "non-ASCII characters"
    if not entry.startswith(URL_SCHEMES):
        return "unrecognized URL scheme"
    if not urlsplit(entry).netloc:
        return "missing host"
    return None


class TargetRegistry:
    """Ordered, never-empty list of configured backend base URLs."""

    def __init__(self, urls: list[Any], fallback_url: str = FALLBACK_TARGET_URL) -> None:
        reason = validate_target(fallback_url)
        if reason:
            raise ConfigurationError(f"Invalid fallback target {fallback_url!r}: {reason}")
        self.fallback = BackendTarget(fallback_url)
        entries = [url.strip() if isinstance(url, str) else url for url in urls]
        entries = [entry for entry in entries if entry != ""]
        self._targets: tuple[Any, ...] = tuple(entries) or (fallback_url,)

    @classmethod
    def from_config(cls, config: Config) -> "TargetRegistry":
        return cls(config.targets.urls, config.targets.fallback_url)

    def targets(self) -> tuple[Any, ...]:
        """Return the configured entries in rotation order."""
        return self._targets

    def __len__(self) -> int:
        return len(self._targets)


class TargetSelector:
    """Round-robin target picker with fallback for invalid entries.

    The cursor advances on every call, including calls whose entry is
    rejected and replaced with the fallback target.
    """

    def __init__(self, registry: TargetRegistry, logger: RequestLogger) -> None:
        self._registry = registry
        self._logger = logger
        self._lock = Lock()
        self._cursor = 0

    def select(self) -> BackendTarget:
        """Return the next target in rotation."""
        targets = self._registry.targets()
        with self._lock:
            entry = targets[self._cursor]
            self._cursor = (self._cursor + 1) % len(targets)

        reason = validate_target(entry)
        if reason:
            self._logger.log_invalid_target(entry, reason)
            return self._registry.fallback

        self._logger.log_target(entry)
        return BackendTarget(entry)
