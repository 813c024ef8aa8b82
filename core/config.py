"""Configuration models and loading."""

import json
import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

CONFIG_DIR = Path.home() / ".config" / "gateway-relay"
CONFIG_FILE = CONFIG_DIR / "config.json"

FALLBACK_TARGET_URL = "http://127.0.0.1:6464"

DIRECT_ENDPOINTS = [
    "uploadexe",
    "uploaddll",
    "uploadpayload",
    "uploadloader",
    "getexe",
    "getdll",
    "getpayload",
]


class ProxySettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 10000
    debug: bool = False


class TargetSettings(BaseModel):
    urls: list[str] = Field(default_factory=lambda: [FALLBACK_TARGET_URL])
    fallback_url: str = FALLBACK_TARGET_URL


class RoutingSettings(BaseModel):
    mount_prefix: str = "/c2"
    direct_endpoints: list[str] = Field(default_factory=lambda: list(DIRECT_ENDPOINTS))


class LimitsSettings(BaseModel):
    max_body_size: int = 10 * 1024 * 1024  # 10MB
    upstream_timeout: float = 300.0
    keep_alive_timeout: int = 5
    max_connections: int = 100
    max_keepalive_connections: int = 20


class Config(BaseModel):
    proxy: ProxySettings = Field(default_factory=ProxySettings)
    targets: TargetSettings = Field(default_factory=TargetSettings)
    routing: RoutingSettings = Field(default_factory=RoutingSettings)
    limits: LimitsSettings = Field(default_factory=LimitsSettings)


def load_config(environ: Mapping[str, str] | None = None) -> Config:
    """Load configuration from JSON file, then apply environment overrides."""
    config = _load_file()
    return apply_env_overrides(config, os.environ if environ is None else environ)


def apply_env_overrides(config: Config, environ: Mapping[str, str]) -> Config:
    """Apply PORT, HOST and TARGET_URLS from the environment."""
    port = environ.get("PORT", "").strip()
    if port.isdigit():
        config.proxy.port = int(port)

    host = environ.get("HOST", "").strip()
    if host:
        config.proxy.host = host

    # Blank entries are left for the registry to drop
    if "TARGET_URLS" in environ:
        config.targets.urls = environ["TARGET_URLS"].split(",")

    return config


def _load_file() -> Config:
    if not CONFIG_FILE.exists():
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        default = Config()
        CONFIG_FILE.write_text(default.model_dump_json(indent=2))
        return default

    try:
        data = json.loads(CONFIG_FILE.read_text())
        return Config.model_validate(data)
    except (json.JSONDecodeError, ValidationError):
        # Backup corrupted config and recreate default
        backup = CONFIG_FILE.with_suffix(".json.bak")
        CONFIG_FILE.rename(backup)
        default = Config()
        CONFIG_FILE.write_text(default.model_dump_json(indent=2))
        return default
