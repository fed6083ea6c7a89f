"""
vision-risk worker.

Scores blockchain addresses from an external policy check plus local
heuristics, and resolves an address's neighbor graph with caching,
fallbacks, capping and rate-limited neighbor scoring.
"""

__version__ = "0.1.0"
