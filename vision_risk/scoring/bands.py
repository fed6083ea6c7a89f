"""Score bands shared by the result payload and any consumer that colors by risk."""

from __future__ import annotations

BAND_HIGH = "High"
BAND_ELEVATED = "Elevated"
BAND_MODERATE = "Moderate"
BAND_LOW = "Low"
BAND_VERY_LOW = "Very low"

# (lower bound inclusive, band), highest first
BAND_THRESHOLDS = (
    (80, BAND_HIGH),
    (60, BAND_ELEVATED),
    (40, BAND_MODERATE),
    (20, BAND_LOW),
)


def band_for_score(score: float, blocked: bool = False) -> str:
    if blocked:
        return BAND_HIGH
    for lower, band in BAND_THRESHOLDS:
        if score >= lower:
            return band
    return BAND_VERY_LOW
