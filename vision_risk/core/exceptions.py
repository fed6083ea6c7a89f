"""
Application-level exceptions.

Only caller-visible failures are exceptions: an invalid request and an
unknown request kind. Upstream failures are returned as values by the
clients and never raised.
"""

from __future__ import annotations


class VisionRiskError(Exception):
    """Base error; code is stable and goes out with ERROR responses."""

    code = "vision_risk_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidRequestError(VisionRiskError):
    """Request is missing a required field (e.g. the address)."""

    code = "invalid_request"


class UnknownRequestKindError(VisionRiskError):
    code = "unknown_request_kind"

    def __init__(self, kind: object) -> None:
        super().__init__(f"unknown type: {kind}")
        self.kind = kind
