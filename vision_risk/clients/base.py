"""
Shared HTTP plumbing for the upstream clients.

Every call returns an UpstreamResult instead of raising: non-2xx status,
timeout, transport error and JSON decode failure all collapse to a failure
value with a short reason, and the caller decides the fallback. There is no
retry here. Each call is bounded by config.request_timeout_sec.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import httpx

from vision_risk.config.settings import WorkerConfig
from vision_risk.vision_logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# Upstream state must be read fresh on every call
NO_CACHE_HEADERS = {
    "Accept": "application/json",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}

FAILURE_NO_API_BASE = "no_api_base"
FAILURE_TIMEOUT = "timeout"
FAILURE_TRANSPORT = "transport_error"
FAILURE_BAD_JSON = "bad_json"
FAILURE_BAD_PAYLOAD = "bad_payload"


@dataclass(frozen=True)
class UpstreamResult(Generic[T]):
    """Either a parsed payload (ok=True) or an absence signal with a reason."""

    ok: bool
    value: T | None = None
    error: str | None = None
    status: int | None = None
    elapsed_ms: float = 0.0

    @classmethod
    def success(cls, value: T, *, status: int | None = 200, elapsed_ms: float = 0.0) -> "UpstreamResult[T]":
        return cls(ok=True, value=value, status=status, elapsed_ms=elapsed_ms)

    @classmethod
    def failure(cls, error: str, *, status: int | None = None, elapsed_ms: float = 0.0) -> "UpstreamResult[T]":
        return cls(ok=False, error=error, status=status, elapsed_ms=elapsed_ms)

    def map(self, fn: Any) -> "UpstreamResult[Any]":
        """
        Apply fn to the payload of a success; failures pass through unchanged.

        A payload fn cannot parse becomes a bad_payload failure.
        """
        if not self.ok:
            return self
        try:
            value = fn(self.value)
        except (TypeError, ValueError, KeyError, AttributeError, OverflowError) as e:
            logger.info("upstream_bad_payload", error=str(e))
            return UpstreamResult.failure(FAILURE_BAD_PAYLOAD, status=self.status, elapsed_ms=self.elapsed_ms)
        return UpstreamResult(ok=True, value=value, status=self.status, elapsed_ms=self.elapsed_ms)


class UpstreamHttp:
    """
    Thin JSON GET helper over one shared httpx.AsyncClient.

    The client is injectable so tests can pass an httpx.MockTransport.
    """

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(headers=NO_CACHE_HEADERS)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def get_json(
        self,
        config: WorkerConfig,
        path: str,
        params: dict[str, Any],
    ) -> UpstreamResult[Any]:
        if not config.api_base:
            return UpstreamResult.failure(FAILURE_NO_API_BASE)
        url = f"{config.api_base}{path}"
        started = time.perf_counter()
        try:
            resp = await asyncio.wait_for(
                self.client.get(
                    url,
                    params=params,
                    headers=NO_CACHE_HEADERS,
                    timeout=config.request_timeout_sec,
                ),
                timeout=config.request_timeout_sec,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            elapsed = (time.perf_counter() - started) * 1000
            logger.warning("upstream_timeout", path=path, timeout_sec=config.request_timeout_sec)
            return UpstreamResult.failure(FAILURE_TIMEOUT, elapsed_ms=elapsed)
        except httpx.HTTPError as e:
            elapsed = (time.perf_counter() - started) * 1000
            logger.warning("upstream_transport_error", path=path, error=str(e))
            return UpstreamResult.failure(FAILURE_TRANSPORT, elapsed_ms=elapsed)
        elapsed = (time.perf_counter() - started) * 1000
        if not resp.is_success:
            logger.info("upstream_http_status", path=path, status=resp.status_code)
            return UpstreamResult.failure(
                f"http_{resp.status_code}", status=resp.status_code, elapsed_ms=elapsed
            )
        try:
            data = resp.json()
        except ValueError as e:
            logger.info("upstream_bad_json", path=path, error=str(e))
            return UpstreamResult.failure(FAILURE_BAD_JSON, status=resp.status_code, elapsed_ms=elapsed)
        return UpstreamResult.success(data, status=resp.status_code, elapsed_ms=elapsed)
