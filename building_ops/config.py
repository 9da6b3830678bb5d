"""
config.py – Load runtime settings from environment variables.

All configuration is loaded from environment variables (or a .env file at the
repo root).  Call `get_config()` to obtain a Config object; it never raises for
a missing SHEET_ID because that is reported per fetch by the row source.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Package root: building_ops/
_PACKAGE_ROOT = Path(__file__).resolve().parent
# Repo root (so .env can live next to pyproject.toml)
_REPO_ROOT = _PACKAGE_ROOT.parent

_env_repo = _REPO_ROOT / ".env"
if _env_repo.exists():
    load_dotenv(_env_repo)


SECONDS_PER_DAY = 60 * 60 * 24


@dataclass
class Config:
    """Runtime configuration for the row source, cache and HTTP server."""

    sheet_id: str | None = None
    sheet_gid: str | None = None
    cache_ttl_days: float = 30.0
    host: str = "127.0.0.1"
    port: int = 3000
    warmup_timeout_seconds: float = 8.0
    http_timeout_seconds: float = 30.0
    log_level: str = "INFO"

    @property
    def cache_ttl_seconds(self) -> float:
        return self.cache_ttl_days * SECONDS_PER_DAY


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise EnvironmentError(f"{name} must be a number, got {raw!r}") from exc


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise EnvironmentError(f"{name} must be an integer, got {raw!r}") from exc


def get_config() -> Config:
    """
    Read environment variables and return a Config.

    Raises
    ------
    EnvironmentError
        If a numeric variable is set but cannot be parsed.
    """
    return Config(
        sheet_id=os.environ.get("SHEET_ID") or None,
        sheet_gid=os.environ.get("SHEET_GID") or None,
        cache_ttl_days=_env_float("CACHE_TTL_DAYS", 30.0),
        host=os.environ.get("HOST", "127.0.0.1"),
        port=_env_int("PORT", 3000),
        warmup_timeout_seconds=_env_float("WARMUP_TIMEOUT_SECONDS", 8.0),
        http_timeout_seconds=_env_float("HTTP_TIMEOUT_SECONDS", 30.0),
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    )
