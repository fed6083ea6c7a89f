"""Core helpers shared by every layer: exceptions and address normalization."""

from vision_risk.core.addresses import normalize_address, require_address, short_address
from vision_risk.core.exceptions import (
    InvalidRequestError,
    UnknownRequestKindError,
    VisionRiskError,
)

__all__ = [
    "InvalidRequestError",
    "UnknownRequestKindError",
    "VisionRiskError",
    "normalize_address",
    "require_address",
    "short_address",
]
