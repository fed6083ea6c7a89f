"""
Environment variable loading for the vision-risk worker.

- VISION_API_BASE: base URL of the upstream proxy (/check, /txs, /neighbors)
- VISION_NETWORK: default network when a request omits one (default: eth)
- VISION_REQUEST_TIMEOUT_SEC, VISION_NEIGHBOR_TTL_SEC, VISION_BATCH_SIZE,
  VISION_BATCH_PAUSE_MS: worker tuning
- VISION_HEURISTICS_PATH: optional JSON file overriding heuristic tables
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

# Project root: config is vision_risk/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEFAULT_NETWORK = "eth"


def load_vision_env() -> None:
    """Load .env from project root. Safe to call multiple times."""
    from dotenv import load_dotenv

    load_dotenv(_ENV_PATH)


def get_api_base() -> str:
    """Return VISION_API_BASE without a trailing slash; empty string when unset."""
    load_vision_env()
    return (os.getenv("VISION_API_BASE") or "").strip().rstrip("/")


def get_default_network() -> str:
    load_vision_env()
    return (os.getenv("VISION_NETWORK") or DEFAULT_NETWORK).strip().lower() or DEFAULT_NETWORK


def get_float(name: str, default: float) -> float:
    """Read a float env var; fall back to default when unset or malformed."""
    load_vision_env()
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def get_int(name: str, default: int) -> int:
    load_vision_env()
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def get_heuristics_path() -> Path | None:
    """Return VISION_HEURISTICS_PATH as a Path, or None when unset."""
    load_vision_env()
    raw = (os.getenv("VISION_HEURISTICS_PATH") or "").strip()
    return Path(raw) if raw else None
