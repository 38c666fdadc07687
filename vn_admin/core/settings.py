"""Runtime settings read from environment variables (and an optional .env file)."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL = 300.0
DEFAULT_DB_PATH = Path.home() / ".vn_admin" / "vn_admin.db"

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")
_UNIT_SECONDS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def parse_duration(value: str) -> float:
    """
    Parse a duration into seconds.

    Accepts plain numbers (seconds) and compound values such as
    ``"5m"``, ``"1h30m"`` or ``"250ms"``.

    Raises:
        ValueError: If the value cannot be parsed.
    """
    text = value.strip().lower()
    if not text:
        raise ValueError("empty duration")
    try:
        return float(text)
    except ValueError:
        pass

    total = 0.0
    position = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            raise ValueError(f"invalid duration: {value!r}")
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        position = match.end()
    if position != len(text):
        raise ValueError(f"invalid duration: {value!r}")
    return total


def load_env_file(path: Path | None = None) -> None:
    """Load a .env file from the given path, the cwd, or the project root."""
    candidates = [path] if path else [Path.cwd() / ".env", Path(__file__).resolve().parents[2] / ".env"]
    for candidate in candidates:
        if candidate and candidate.exists():
            load_dotenv(candidate)
            break


@dataclass
class Settings:
    """Process-wide configuration."""

    database_url: str = f"sqlite:///{DEFAULT_DB_PATH}"
    redis_url: str | None = None
    cache_ttl: float = DEFAULT_CACHE_TTL
    api_cookie: str = ""
    source_config: str | None = None
    log_file: str | None = None
    debug: bool = False

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from the current environment."""
        ttl_raw = os.environ.get("CACHE_TTL", "5m")
        try:
            cache_ttl = parse_duration(ttl_raw)
        except ValueError:
            logger.warning(f"Invalid CACHE_TTL {ttl_raw!r}, using {DEFAULT_CACHE_TTL:.0f}s")
            cache_ttl = DEFAULT_CACHE_TTL

        return cls(
            database_url=_database_url(os.environ.get("DATABASE_URL")),
            redis_url=os.environ.get("REDIS_URL") or None,
            cache_ttl=cache_ttl,
            api_cookie=os.environ.get("API_COOKIE", ""),
            source_config=os.environ.get("SOURCE_CONFIG") or None,
            log_file=os.environ.get("LOG_FILE") or None,
            debug=os.environ.get("DEBUG", "").lower() in ("1", "true", "yes"),
        )


def _database_url(value: str | None) -> str:
    """Accept a full SQLAlchemy URL or a bare SQLite file path."""
    if value and "://" in value:
        return value
    path = Path(value).expanduser() if value else DEFAULT_DB_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{path}"


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings, reading the environment on first use."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def reset_settings() -> None:
    """Forget cached settings (useful for testing)."""
    global _settings
    _settings = None
