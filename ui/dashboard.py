"""Real-time CLI dashboard for gateway monitoring."""

from collections import Counter
from datetime import datetime
from threading import Lock
from typing import Any

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from ui.log_utils import format_log_line, write_cli_log

console = Console()


class RequestInfo:
    """Info about a single forwarded request."""

    def __init__(self, method: str, path: str, target: str, body_size: int, timestamp: datetime):
        self.method = method
        self.path = path
        self.target = target
        self.body_size = body_size
        self.status: int | None = None
        self.timestamp = timestamp


class Dashboard:
    """Real-time dashboard showing target rotation and recent requests."""

    def __init__(self, config: Config, targets: tuple[Any, ...] = ()):
        self.config = config
        self._lock = Lock()
        self._targets = [str(t) for t in targets]
        self._hits: Counter[str] = Counter()
        self._requests: list[RequestInfo] = []
        self._max_requests = 10
        self._counts = {"forwarded": 0, "unmatched": 0, "errors": 0}
        self._errors: list[str] = []
        self._live: Live | None = None

    def start(self) -> "Dashboard":
        """Start the live dashboard."""
        self._live = Live(
            self._build_layout(),
            console=console,
            refresh_per_second=4,
            screen=False,
        )
        self._live.start()
        return self

    def stop(self) -> None:
        """Stop the live dashboard."""
        if self._live:
            self._live.stop()

    def log_incoming(
        self,
        method: str,
        path: str,
        headers: dict[str, str],
        body_size: int,
    ) -> None:
        write_cli_log("INCOMING", f"{method} {path}", body_size=body_size)

    def log_target(self, url: str) -> None:
        with self._lock:
            self._hits[url] += 1
            if url not in self._targets:
                self._targets.append(url)
        write_cli_log("TARGET", url)

    def log_invalid_target(self, entry: Any, reason: str) -> None:
        """Log a rejected rotation entry (fallback is used instead)."""
        fallback = self.config.targets.fallback_url
        with self._lock:
            self._hits[fallback] += 1
        self.log_error("targets", 0, f"Invalid target {entry!r}: {reason}, using fallback")

    def log_forward(
        self,
        route: str,
        method: str,
        path: str,
        *,
        target: str,
        body_size: int,
    ) -> None:
        """Log a request about to be forwarded."""
        with self._lock:
            self._counts["forwarded"] += 1
            info = RequestInfo(method, path, target, body_size, datetime.now())
            self._requests.insert(0, info)
            self._requests = self._requests[: self._max_requests]
            self._refresh()
        write_cli_log(route.upper(), f"{method} {path}", target=target, body_size=body_size)

    def log_response(self, route: str, path: str, status: int) -> None:
        with self._lock:
            for info in self._requests:
                if info.status is None and info.path == path:
                    info.status = status
                    break
            self._refresh()
        write_cli_log(route.upper(), f"response {path}", status=status)

    def log_unmatched(self, method: str, path: str) -> None:
        with self._lock:
            self._counts["unmatched"] += 1
            self._refresh()
        write_cli_log("CATCH-ALL", f"Unhandled request: {method} {path}")

    def log_error(self, route: str, status: int, message: str) -> None:
        """Log an error."""
        with self._lock:
            self._counts["errors"] += 1
            truncated = message[:60] + "..." if len(message) > 60 else message
            self._errors.insert(0, f"{route} {status}: {truncated}")
            self._errors = self._errors[:3]
            self._refresh()
        write_cli_log("ERROR", message[:200], route=route, status=status)

    def _refresh(self) -> None:
        """Refresh the display."""
        if self._live:
            self._live.update(self._build_layout())

    def _build_layout(self) -> Layout:
        """Build the dashboard layout."""
        layout = Layout()

        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=5),
        )

        layout["body"].split_row(
            Layout(name="targets", ratio=1),
            Layout(name="requests", ratio=2),
        )

        layout["header"].update(self._build_header())
        layout["targets"].update(self._build_targets_panel())
        layout["requests"].update(self._build_requests_panel())
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        stats = Text()
        stats.append("Gateway Relay", style="bold cyan")
        stats.append("  |  ")
        stats.append(f"Forwarded: {self._counts['forwarded']}", style="green")
        stats.append("  |  ")
        stats.append(f"Unmatched: {self._counts['unmatched']}", style="yellow")
        stats.append("  |  ")
        stats.append(f"Errors: {self._counts['errors']}", style="red")
        stats.append("  |  ")
        stats.append(f"Port: {self.config.proxy.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_targets_panel(self) -> Panel:
        """Build the rotation panel with per-target hit counts."""
        if self._targets:
            content = Table.grid(padding=(0, 1))
            content.add_column()
            content.add_column(justify="right")
            for target in self._targets:
                content.add_row(Text(target), str(self._hits[target]))
        else:
            content = Text("No targets configured", style="dim")

        return Panel(content, title="[blue]Targets[/blue]", border_style="blue")

    def _build_requests_panel(self) -> Panel:
        """Build recent requests panel."""
        if self._requests:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("Method", width=7)
            table.add_column("Path", ratio=2)
            table.add_column("Target", ratio=1)
            table.add_column("Bytes", justify="right", width=9)
            table.add_column("Status", width=6)

            for info in self._requests:
                status = "…" if info.status is None else str(info.status)
                table.add_row(
                    info.timestamp.strftime("%H:%M:%S"),
                    info.method,
                    Text(info.path[:60] + "..." if len(info.path) > 60 else info.path),
                    Text(info.target),
                    str(info.body_size),
                    status,
                )

            content = table
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(content, title="[magenta]Recent Requests[/magenta]", border_style="magenta")

    def _build_footer(self) -> Panel:
        """Build footer with errors and help."""
        if self._errors:
            error_text = Text()
            for err in self._errors:
                error_text.append("! ", style="red bold")
                error_text.append(err + "\n", style="red")
            content = error_text
        else:
            content = Text(
                f"Listening on {self.config.proxy.host}:{self.config.proxy.port}",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")


class ConsoleLogger:
    """Line-per-event logger for headless deployments."""

    def __init__(self, config: Config):
        self.config = config
        self._console = Console(highlight=False)

    def _emit(self, level: str, message: str, style: str = "", **extra: Any) -> None:
        line = format_log_line(level, message, **extra)
        self._console.print(line, style=style, markup=False, soft_wrap=True)
        write_cli_log(level, message, **extra)

    def log_incoming(
        self,
        method: str,
        path: str,
        headers: dict[str, str],
        body_size: int,
    ) -> None:
        self._emit("INCOMING", f"{method} {path}", body_size=body_size)

    def log_target(self, url: str) -> None:
        self._emit("TARGET", url, style="dim")

    def log_invalid_target(self, entry: Any, reason: str) -> None:
        self._emit(
            "ERROR",
            f"Invalid target {entry!r}: {reason}, using fallback",
            style="red",
            fallback=self.config.targets.fallback_url,
        )

    def log_forward(
        self,
        route: str,
        method: str,
        path: str,
        *,
        target: str,
        body_size: int,
    ) -> None:
        self._emit(route.upper(), f"{method} {path}", target=target, body_size=body_size)

    def log_response(self, route: str, path: str, status: int) -> None:
        self._emit(route.upper(), f"response {path}", style="green", status=status)

    def log_unmatched(self, method: str, path: str) -> None:
        self._emit("CATCH-ALL", f"Unhandled request: {method} {path}", style="yellow")

    def log_error(self, route: str, status: int, message: str) -> None:
        self._emit("ERROR", message[:200], style="red", route=route, status=status)
