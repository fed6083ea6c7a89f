"""Address normalization: the canonical key form used by every cache and graph."""

from __future__ import annotations

from typing import Any

from vision_risk.core.exceptions import InvalidRequestError


def normalize_address(value: Any) -> str:
    """Lower-cased, stripped string form; empty string for None/blank."""
    if value is None:
        return ""
    return str(value).strip().lower()


def require_address(value: Any, *, context: str = "request") -> str:
    """Normalize and reject empty addresses."""
    address = normalize_address(value)
    if not address:
        raise InvalidRequestError(f"{context}: missing id")
    return address


def short_address(address: str) -> str:
    """Truncated form for log lines."""
    return address[:10] + "..." if len(address) > 10 else address
