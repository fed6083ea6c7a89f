"""
Upstream clients for the policy, transaction and neighbor services.

Each returns an UpstreamResult (payload or failure reason) and never raises
across this boundary.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from vision_risk.clients.base import UpstreamHttp, UpstreamResult
from vision_risk.clients.neighbors import NeighborClient
from vision_risk.clients.policy import PolicyClient, PolicyResult
from vision_risk.clients.transactions import TransactionClient, TxPage


@dataclass
class UpstreamClients:
    """The three clients sharing one HTTP connection pool."""

    http: UpstreamHttp
    policy: PolicyClient
    transactions: TransactionClient
    neighbors: NeighborClient

    @classmethod
    def create(cls, client: httpx.AsyncClient | None = None) -> "UpstreamClients":
        http = UpstreamHttp(client)
        return cls(
            http=http,
            policy=PolicyClient(http),
            transactions=TransactionClient(http),
            neighbors=NeighborClient(http),
        )

    async def aclose(self) -> None:
        await self.http.aclose()


__all__ = [
    "NeighborClient",
    "PolicyClient",
    "PolicyResult",
    "TransactionClient",
    "TxPage",
    "UpstreamClients",
    "UpstreamHttp",
    "UpstreamResult",
]
