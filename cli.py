"""CLI entry point for gateway-relay."""

import sys
from datetime import datetime

from rich.console import Console
from rich.markup import escape

from app import create_app
from core.config import CONFIG_FILE, load_config
from core.exceptions import ConfigurationError
from services.targets import TargetRegistry, validate_target
from ui.dashboard import ConsoleLogger, Dashboard
from ui.log_utils import write_cli_log

console = Console()


def main():
    """Main CLI entry point."""
    config = load_config()
    plain = False

    # Handle CLI arguments
    if len(sys.argv) > 1:
        arg = sys.argv[1]

        if arg == "--targets":
            _print_targets(_build_registry(config))
            return

        if arg == "--config":
            console.print(f"[bold]Config:[/bold] {CONFIG_FILE}")
            return

        if arg in ("--help", "-h"):
            _print_help()
            return

        if arg == "--plain":
            plain = True
        else:
            console.print(f"[red][ERROR][/red] Unknown option: {arg}")
            _print_help()
            sys.exit(2)

    registry = _build_registry(config)
    if plain:
        logger = ConsoleLogger(config)
        dashboard = None
    else:
        logger = dashboard = Dashboard(config, registry.targets())

    import uvicorn

    try:
        app = create_app(config, logger)
    except ConfigurationError as e:
        _exit_config_error(e)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.proxy.host,
        port=config.proxy.port,
        log_level="warning",
        server_header=False,
        timeout_keep_alive=config.limits.keep_alive_timeout,
    )
    server = uvicorn.Server(uvicorn_config)

    if dashboard:
        dashboard.start()
    start_time = datetime.now()
    write_cli_log(
        "STARTUP",
        "Gateway started",
        port=config.proxy.port,
        targets=",".join(str(t) for t in registry.targets()),
    )
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Gateway stopped", duration=str(duration))
        if dashboard:
            dashboard.stop()


def _build_registry(config) -> TargetRegistry:
    try:
        return TargetRegistry.from_config(config)
    except ConfigurationError as e:
        _exit_config_error(e)


def _exit_config_error(error: ConfigurationError) -> None:
    console.print(f"[red][ERROR][/red] {error}")
    console.print(f"[dim]Edit {CONFIG_FILE}[/dim]")
    sys.exit(1)


def _print_targets(registry: TargetRegistry) -> None:
    """Print the effective rotation list."""
    for position, entry in enumerate(registry.targets()):
        reason = validate_target(entry)
        if reason:
            console.print(
                f"{position}: {escape(repr(entry))} "
                f"[red]({reason}, fallback {registry.fallback.url})[/red]"
            )
        else:
            console.print(f"{position}: {escape(entry)}")


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]Gateway Relay[/bold cyan]

Forwards /c2/* and the direct endpoints to backend targets in round-robin order.

[bold]Usage:[/bold]
    gateway-relay              Start with live dashboard
    gateway-relay --plain      Start with one log line per event
    gateway-relay --targets    Show the target rotation
    gateway-relay --config     Show config location
    gateway-relay --help       Show this help

[bold]Environment:[/bold]
    PORT          Listening port (default 10000)
    HOST          Listening address (default 0.0.0.0)
    TARGET_URLS   Comma-separated backend base URLs
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
