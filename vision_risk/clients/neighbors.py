"""
Neighbor client: GET /neighbors?address&network&hop&limit.

Accepts {nodes, links} or a bare edge list. A payload that parses to nothing
is a successful empty graph; the resolver decides what to do with it.
"""

from __future__ import annotations

from vision_risk.clients.base import UpstreamHttp, UpstreamResult
from vision_risk.config.settings import WorkerConfig
from vision_risk.graph.models import NeighborGraph
from vision_risk.graph.normalize import parse_graph

NEIGHBORS_PATH = "/neighbors"


class NeighborClient:
    def __init__(self, http: UpstreamHttp) -> None:
        self.http = http

    async def fetch(
        self,
        config: WorkerConfig,
        address: str,
        network: str,
        *,
        hop: int,
        limit: int,
    ) -> UpstreamResult[NeighborGraph]:
        result = await self.http.get_json(
            config,
            NEIGHBORS_PATH,
            {"address": address, "network": network, "hop": hop, "limit": limit},
        )
        return result.map(lambda raw: parse_graph(raw, network))
