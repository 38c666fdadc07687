"""
Source Configuration Module
===========================

Describes the remote source that provinces and units are crawled from.
Loaded from a YAML file; built-in defaults point at the bando.com.vn
merger lookup service.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/144.0.0.0 Safari/537.36"
)


@dataclass
class RetryPolicy:
    """Backoff settings for remote fetches."""

    max_attempts: int = 3
    base_delay: float = 2.0

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> RetryPolicy:
        """Create from dictionary, using defaults for missing values."""
        if data is None:
            return cls()
        return cls(
            max_attempts=int(data.get("max_attempts", 3)),
            base_delay=float(data.get("base_delay", 2.0)),
        )


@dataclass
class SourceConfig:
    """Remote endpoints, request identity and pacing."""

    provinces_url: str = "https://sapnhap.bando.com.vn/pcotinh"
    units_url: str = "https://sapnhap.bando.com.vn/ptracuu"
    origin: str = "https://sapnhap.bando.com.vn"
    referer: str = "https://sapnhap.bando.com.vn/"
    user_agent: str = DEFAULT_USER_AGENT
    request_timeout: float = 30.0
    politeness_delay: float = 0.5
    retry: RetryPolicy = field(default_factory=RetryPolicy)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> SourceConfig:
        """Create from dictionary, using defaults for missing values."""
        if data is None:
            return cls()
        defaults = cls()
        return cls(
            provinces_url=data.get("provinces_url", defaults.provinces_url),
            units_url=data.get("units_url", defaults.units_url),
            origin=data.get("origin", defaults.origin),
            referer=data.get("referer", defaults.referer),
            user_agent=data.get("user_agent", defaults.user_agent),
            request_timeout=float(data.get("request_timeout", defaults.request_timeout)),
            politeness_delay=float(data.get("politeness_delay", defaults.politeness_delay)),
            retry=RetryPolicy.from_dict(data.get("retry")),
        )

    @classmethod
    def load(cls, config_path: Path | str) -> SourceConfig:
        """
        Load configuration from a YAML file.

        The file may hold the settings at the top level or under a
        ``source`` key.

        Args:
            config_path: Path to the YAML file

        Raises:
            FileNotFoundError: If the file does not exist
        """
        config_path = Path(config_path).expanduser().resolve()
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data.get("source", data))


def get_default_source_config(config_path: Path | str | None = None) -> SourceConfig:
    """
    Get the source configuration.

    Uses the given path, then the SOURCE_CONFIG environment variable, then
    config/source.yaml in the project root. Falls back to built-in defaults
    when no file exists.
    """
    if config_path is None:
        env_path = os.environ.get("SOURCE_CONFIG")
        if env_path:
            config_path = Path(env_path)
        else:
            project_root = Path(__file__).resolve().parent.parent.parent
            config_path = project_root / "config" / "source.yaml"
            if not config_path.exists():
                return SourceConfig()

    return SourceConfig.load(config_path)
