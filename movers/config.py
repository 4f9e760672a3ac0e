"""Load configuration from TOML file and merge environment variables."""

from __future__ import annotations

import os
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # type: ignore[no-redef]

from movers.sources import DEFAULT_TEMPLATES, MoverList


_DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "settings.toml"


def _load_toml(path: Path) -> dict:
    with open(path, "rb") as f:
        return tomllib.load(f)


class Config:
    """Application configuration.  Reads settings.toml then overlays env vars."""

    def __init__(self, config_path: Path | None = None) -> None:
        path = config_path or Path(os.environ.get("MOVERS_CONFIG", str(_DEFAULT_CONFIG_PATH)))
        raw = _load_toml(path)

        # ── Source pages ──────────────────────────────────────────────────────
        src = raw.get("source", {})
        self.templates: dict[MoverList, str] = {
            MoverList.GAINERS: src.get("gainers_url", DEFAULT_TEMPLATES[MoverList.GAINERS]),
            MoverList.LOSERS: src.get("losers_url", DEFAULT_TEMPLATES[MoverList.LOSERS]),
        }

        # ── Fetching ──────────────────────────────────────────────────────────
        fetch = raw["fetch"]
        self.fetch_timeout: float = float(
            os.environ.get("MOVERS_FETCH_TIMEOUT", fetch["timeout_seconds"])
        )
        self.user_agent: str = fetch["user_agent"]
        self.pool_size: int = int(fetch["pool_size"])

        # ── HTTP server ───────────────────────────────────────────────────────
        srv = raw["server"]
        self.host: str = os.environ.get("MOVERS_HOST", srv["host"])
        self.port: int = int(os.environ.get("MOVERS_PORT", srv["port"]))

        # ── Logging ───────────────────────────────────────────────────────────
        log = raw["logging"]
        self.log_level: str = os.environ.get("LOG_LEVEL", log["level"]).upper()
        self.log_format: str = os.environ.get("LOG_FORMAT", log.get("format", "json")).lower()


_instance: Config | None = None


def get_config(config_path: Path | None = None) -> Config:
    """Return the singleton Config, creating it on first call."""
    global _instance
    if _instance is None:
        _instance = Config(config_path)
    return _instance


def reset_config() -> None:
    """Reset the singleton (useful in tests)."""
    global _instance
    _instance = None
