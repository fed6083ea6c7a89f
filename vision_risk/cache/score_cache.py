"""
Score cache: (network, address) → latest ScoreResult.

Last writer wins; a rescore replaces the stored result, never merges into it.
Entries do not expire within the process lifetime. The stats aggregator reads
neighbor results from here, so scoring a neighbor is both a cache write and a
data dependency of later aggregation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from vision_risk.core.addresses import normalize_address

if TYPE_CHECKING:
    from vision_risk.scoring.models import ScoreResult


class ScoreCache:
    def __init__(self) -> None:
        self._entries: dict[tuple[str, str], "ScoreResult"] = {}

    @staticmethod
    def key(network: str, address: str) -> tuple[str, str]:
        return (normalize_address(network), normalize_address(address))

    def get(self, network: str, address: str) -> "ScoreResult | None":
        return self._entries.get(self.key(network, address))

    def put(self, result: "ScoreResult") -> None:
        self._entries[self.key(result.network, result.id)] = result

    def contains(self, network: str, address: str) -> bool:
        return self.key(network, address) in self._entries

    def get_many(self, network: str, addresses: Iterable[str]) -> list["ScoreResult"]:
        """Cached results for addresses, in order, skipping unknown ones."""
        out = []
        for address in addresses:
            result = self.get(network, address)
            if result is not None:
                out.append(result)
        return out

    def __len__(self) -> int:
        return len(self._entries)
