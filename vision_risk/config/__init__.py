"""
Configuration management for the vision-risk worker.

Loads settings from environment variables and an optional heuristics file.
WorkerConfig is an explicit value owned by the dispatcher, not a global.
"""

from vision_risk.config.heuristics import HeuristicsConfig, load_heuristics
from vision_risk.config.settings import WorkerConfig, WorkerFlags, get_settings

__all__ = [
    "HeuristicsConfig",
    "WorkerConfig",
    "WorkerFlags",
    "get_settings",
    "load_heuristics",
]
