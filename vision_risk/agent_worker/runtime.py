"""
Command-line runtime for the risk worker.

Starts one worker, sends a single request and prints every response as one
JSON line on stdout (logs go to stderr). Exit code is 1 when any ERROR
response was emitted.

Usage:
    python -m vision_risk.agent_worker.runtime score 0xabc... --network eth
    python -m vision_risk.agent_worker.runtime neighbors 0xabc... --limit 100 --cap 50
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from dataclasses import replace
from typing import Any

from vision_risk.agent_worker.dispatcher import Dispatcher
from vision_risk.agent_worker.messages import RequestKind, Response
from vision_risk.agent_worker.worker import RiskWorker
from vision_risk.config.settings import DEFAULT_CAP, DEFAULT_HOP, DEFAULT_LIMIT, WorkerConfig, get_settings
from vision_risk.vision_logging import configure_logging, get_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vision-risk",
        description="Score an address or resolve its neighbor graph; prints JSON lines.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    score = sub.add_parser("score", help="Score one address (SCORE_ONE)")
    score.add_argument("address")

    neighbors = sub.add_parser("neighbors", help="Resolve, cap and score the neighbor graph (NEIGHBORS)")
    neighbors.add_argument("address")
    neighbors.add_argument("--hop", type=int, default=DEFAULT_HOP)
    neighbors.add_argument("--limit", type=int, default=DEFAULT_LIMIT)
    neighbors.add_argument("--cap", type=int, default=DEFAULT_CAP)

    for p in (score, neighbors):
        p.add_argument("--network", default=None, help="Network (default: VISION_NETWORK or eth)")
        p.add_argument("--api-base", default=None, help="Upstream base URL (default: VISION_API_BASE)")
        p.add_argument("--log-level", default=None, help="Log level for stderr logs (default: LOG_LEVEL or INFO)")
    return parser


def _config_from_args(args: argparse.Namespace) -> WorkerConfig:
    config = get_settings()
    if args.api_base is not None:
        config = replace(config, api_base=args.api_base)
    if args.network:
        config = replace(config, network=args.network)
    return config


def _request_for(args: argparse.Namespace, network: str) -> tuple[str, dict[str, Any]]:
    if args.command == "score":
        return RequestKind.SCORE_ONE.value, {"item": {"id": args.address, "network": network}}
    return RequestKind.NEIGHBORS.value, {
        "id": args.address,
        "network": network,
        "hop": args.hop,
        "limit": args.limit,
        "cap": args.cap,
    }


def _print_response(response: Response) -> None:
    print(json.dumps(response.to_dict(), default=str), flush=True)


async def run(args: argparse.Namespace) -> int:
    config = _config_from_args(args)
    dispatcher = Dispatcher(config)
    kind, payload = _request_for(args, config.network)
    try:
        async with RiskWorker(dispatcher) as worker:
            responses = await worker.request(kind, payload, on_event=_print_response)
    finally:
        await dispatcher.aclose()
    return 1 if any(r.is_error for r in responses) else 0


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint: parse args, run one request, return the exit code."""
    args = build_parser().parse_args(argv)
    if args.log_level:
        configure_logging(level=args.log_level)
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        logger.info("runtime_shutdown_signal")
        return 0
    except Exception as e:
        logger.exception("runtime_fatal", error=str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
