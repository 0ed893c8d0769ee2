"""Configuration management for notical."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

NOTICAL_HOME = Path(os.environ.get("NOTICAL_HOME", Path.home() / "notical"))
CONFIG_FILE = NOTICAL_HOME / "config" / "notical.conf"

NOTION_API_BASE = "https://api.notion.com/v1/"
NOTION_VERSION = "2022-06-28"
DEFAULT_RELAY_PORT = 8787

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class Config:
    """notical configuration."""

    notion_secret: str = ""
    database_id: str = ""
    use_relay: bool = False
    relay_url: str = f"http://localhost:{DEFAULT_RELAY_PORT}/api/"
    relay_port: int = DEFAULT_RELAY_PORT
    widget_port: int = 5000
    notion_version: str = NOTION_VERSION
    request_timeout: float = 10.0
    refresh_delay: float = 0.8
    default_color: str = "blue"
    fallback_color: str = "gray"
    # Empty means the machine's local time zone
    timezone: str = ""


@dataclass(frozen=True)
class RelaySettings:
    """Process-wide relay settings, read once at startup."""

    secret: str
    port: int = DEFAULT_RELAY_PORT
    upstream_base: str = NOTION_API_BASE
    notion_version: str = NOTION_VERSION
    timeout: float = 10.0


def _unquote(value: str) -> str:
    # Handle quoted values with inline comments: "value" # comment
    if value.startswith('"') or value.startswith("'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        return value.split("#")[0].strip()
    return value


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in _TRUTHY


def _apply(config: Config, key: str, value: str) -> None:
    """Set one config key, ignoring unknown keys."""
    try:
        match key:
            case "notion_secret":
                config.notion_secret = value
            case "database_id":
                config.database_id = value
            case "use_relay":
                config.use_relay = _parse_bool(value)
            case "relay_url":
                config.relay_url = value if value.endswith("/") else value + "/"
            case "relay_port":
                config.relay_port = int(value)
            case "widget_port":
                config.widget_port = int(value)
            case "notion_version":
                config.notion_version = value
            case "request_timeout":
                config.request_timeout = float(value)
            case "refresh_delay":
                config.refresh_delay = float(value)
            case "default_color":
                config.default_color = value
            case "fallback_color":
                config.fallback_color = value
            case "timezone":
                if value:
                    ZoneInfo(value)
                config.timezone = value
    except (ValueError, ZoneInfoNotFoundError) as e:
        logger.warning(f"Ignoring invalid value for {key.upper()}: {e}")


def resolve_timezone(name: str) -> ZoneInfo | None:
    """Return the named time zone, or None (local time) when unset or unknown."""
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ValueError, ZoneInfoNotFoundError):
        logger.warning(f"Unknown time zone {name!r}, using local time")
        return None


def load_config(path: Path | None = None) -> Config:
    """Load configuration from notical.conf, then apply environment overrides."""
    config = Config()
    path = path or CONFIG_FILE

    if path.exists():
        for line in path.read_text().splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            if "=" not in line:
                continue

            key, _, value = line.partition("=")
            _apply(config, key.strip().lower(), _unquote(value.strip()))

    if os.environ.get("NOTION_SECRET"):
        config.notion_secret = os.environ["NOTION_SECRET"]
    if os.environ.get("NOTICAL_DATABASE_ID"):
        config.database_id = os.environ["NOTICAL_DATABASE_ID"]
    if os.environ.get("NOTICAL_USE_RELAY"):
        config.use_relay = _parse_bool(os.environ["NOTICAL_USE_RELAY"])
    if os.environ.get("PORT"):
        _apply(config, "relay_port", os.environ["PORT"])

    return config


def load_relay_settings(config: Config | None = None) -> RelaySettings:
    """Read the relay credential from the environment (and .env) once."""
    load_dotenv()
    config = config or load_config()

    if not config.notion_secret:
        logger.warning("NOTION_SECRET is not set. Set it before running the relay.")

    return RelaySettings(
        secret=config.notion_secret,
        port=config.relay_port,
        notion_version=config.notion_version,
        timeout=config.request_timeout,
    )
