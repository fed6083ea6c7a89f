"""Process-local caches: scores by (network, address), neighbor graphs with a TTL."""

from vision_risk.cache.neighbor_cache import CacheEntry, NeighborCache
from vision_risk.cache.score_cache import ScoreCache

__all__ = ["CacheEntry", "NeighborCache", "ScoreCache"]
