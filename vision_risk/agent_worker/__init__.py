"""
Agent worker package: message contract, dispatcher and the single-consumer actor.

The dispatcher routes typed requests; RiskWorker serializes them through one
inbox and resolves a future per request.
"""

from vision_risk.agent_worker.dispatcher import Dispatcher, NeighborsQuery, NeighborsResult
from vision_risk.agent_worker.messages import Request, RequestKind, Response, ResponseKind
from vision_risk.agent_worker.worker import RiskWorker

__all__ = [
    "Dispatcher",
    "NeighborsQuery",
    "NeighborsResult",
    "Request",
    "RequestKind",
    "Response",
    "ResponseKind",
    "RiskWorker",
]
