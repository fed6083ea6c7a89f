"""
Structured logging for the risk worker.

Every record is one structlog event: a snake_case event_type plus keyword
context (address=, network=, branch=, request_id=...), an ISO timestamp and
the level. Output goes to stderr so the CLI can keep stdout for JSON
responses.

LOG_FORMAT=json (default) renders one JSON object per line; any other value
renders the human-readable console format. LOG_LEVEL filters (default INFO).

Imports nothing from vision_risk so every module can import it first.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

import structlog

DEFAULT_LEVEL = "INFO"
DEFAULT_FORMAT = "json"

_LEVELS = {"debug": 10, "info": 20, "warning": 30, "error": 40, "critical": 50}

# Read by _filter_level on every event, so loggers bound before a reconfigure follow it
_threshold = logging.INFO


def _add_timestamp(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
    return event_dict


def _filter_level(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    if _LEVELS.get(event_dict.get("level", "info"), logging.INFO) < _threshold:
        raise structlog.DropEvent
    return event_dict


def _event_type(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog's positional 'event' becomes event_type."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    return event_dict


def configure_logging(
    level: str | None = None,
    fmt: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """(Re)configure structlog; arguments default to LOG_LEVEL, LOG_FORMAT and stderr."""
    global _threshold
    level_name = (level or os.getenv("LOG_LEVEL") or DEFAULT_LEVEL).strip().upper()
    _threshold = getattr(logging, level_name, logging.INFO)
    render_json = (fmt or os.getenv("LOG_FORMAT") or DEFAULT_FORMAT).strip().lower() == "json"
    out = stream or sys.stderr

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        _filter_level,
        structlog.processors.format_exc_info,
        _add_timestamp,
    ]
    if render_json:
        processors += [_event_type, structlog.processors.JSONRenderer(default=str)]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=out.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=out),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_logging()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Return a structured logger for the given module name.

        logger = get_logger(__name__)
        logger.info("neighbors_resolved", address=addr, branch="primary", nodes=12)

    Output (JSON): {"event_type": "neighbors_resolved", "address": "...", "branch": "primary",
    "nodes": 12, "timestamp": "...", "level": "info", "logger": "module.name"}
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_request(request_id: str, kind: str) -> structlog.BoundLogger:
    """Logger with request_id and kind bound, for everything logged while handling one request."""
    return get_logger("vision_risk.request").bind(request_id=request_id, kind=kind)
