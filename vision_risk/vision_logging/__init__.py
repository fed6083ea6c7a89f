"""
Structured logging for the vision-risk worker.

JSON logs on stderr with timestamp, event_type and keyword context.
Use get_logger() in all modules.
"""

from vision_risk.vision_logging.logger import bind_request, configure_logging, get_logger

__all__ = ["bind_request", "configure_logging", "get_logger"]
