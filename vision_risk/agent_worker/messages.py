"""
Typed request/response messages exchanged with the worker.

Wire form is {"id", "type", "payload"} inbound and {"id", "type", "data",
"error"} outbound. Request.kind stays a plain string so an unknown kind can
still be answered with an ERROR carrying the same id.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from vision_risk.core.exceptions import VisionRiskError


class RequestKind(str, Enum):
    INIT = "INIT"
    SCORE_ONE = "SCORE_ONE"
    SCORE_BATCH = "SCORE_BATCH"
    NEIGHBORS = "NEIGHBORS"


class ResponseKind(str, Enum):
    INIT_OK = "INIT_OK"
    RESULT = "RESULT"
    RESULT_STREAM = "RESULT_STREAM"
    DONE = "DONE"
    NEIGHBOR_STATS = "NEIGHBOR_STATS"
    ERROR = "ERROR"


INTERNAL_ERROR_CODE = "internal_error"


def new_request_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass(frozen=True)
class Request:
    kind: str
    payload: dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=new_request_id)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Request":
        payload = raw.get("payload")
        return cls(
            kind=str(raw.get("type") or raw.get("kind") or ""),
            payload=payload if isinstance(payload, dict) else {},
            id=str(raw.get("id") or new_request_id()),
        )


@dataclass(frozen=True)
class Response:
    id: str
    kind: ResponseKind
    data: Any = None
    error: str | None = None
    code: str | None = None

    @classmethod
    def failure(cls, request_id: str, exc: Exception) -> "Response":
        if isinstance(exc, VisionRiskError):
            return cls(id=request_id, kind=ResponseKind.ERROR, error=exc.message, code=exc.code)
        return cls(id=request_id, kind=ResponseKind.ERROR, error=str(exc) or type(exc).__name__, code=INTERNAL_ERROR_CODE)

    @property
    def is_error(self) -> bool:
        return self.kind == ResponseKind.ERROR

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id, "type": self.kind.value}
        if self.data is not None:
            out["data"] = self.data
        if self.error is not None:
            out["error"] = self.error
            out["code"] = self.code
        return out
