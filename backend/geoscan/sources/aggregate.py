"""
Aggregation of address sources into one deduplicated, ordered set.

Takes the caller's own public address plus the static, provider and
dynamically discovered lists and produces a single AddressSet with source
attribution.

Strategy:
1. Walk sources in fixed precedence: self -> static -> provider -> dynamic
2. Keep the first occurrence of each literal, remember every source that named it
3. Drop dynamic entries that are not IP literals (discovery output is untrusted)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from .base_source import is_ip_address

logger = logging.getLogger(__name__)

SOURCE_SELF = "self"
SOURCE_STATIC = "static"
SOURCE_PROVIDER = "provider"
SOURCE_DYNAMIC = "dynamic"


@dataclass
class AddressEntry:
    """One unique address and every source that contributed it."""
    address: str
    sources: List[str] = field(default_factory=list)


class AddressSet:
    """Insertion-ordered, duplicate-free collection of IP literals."""

    def __init__(self):
        self._entries: Dict[str, AddressEntry] = {}

    def add(self, address: str, source: str) -> bool:
        """Add address; returns False if it was already present."""
        existing = self._entries.get(address)
        if existing is not None:
            if source not in existing.sources:
                existing.sources.append(source)
            return False
        self._entries[address] = AddressEntry(address=address, sources=[source])
        return True

    def sources_for(self, address: str) -> List[str]:
        entry = self._entries.get(address)
        return list(entry.sources) if entry else []

    @property
    def addresses(self) -> List[str]:
        return list(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, address: object) -> bool:
        return address in self._entries

    def __repr__(self) -> str:
        return f"AddressSet({self.addresses!r})"


def aggregate(
    self_address: Optional[str],
    static: Sequence[str] = (),
    provider: Sequence[str] = (),
    dynamic: Iterable[str] = (),
) -> AddressSet:
    """Merge the four address lists into one AddressSet. Pure; never raises."""
    result = AddressSet()

    if self_address:
        result.add(self_address, SOURCE_SELF)
    for address in static:
        result.add(address, SOURCE_STATIC)
    for address in provider:
        result.add(address, SOURCE_PROVIDER)

    dropped = 0
    for address in dynamic:
        if not isinstance(address, str) or not is_ip_address(address):
            dropped += 1
            continue
        result.add(address, SOURCE_DYNAMIC)

    if dropped:
        logger.debug("aggregate: dropped %d malformed dynamic entries", dropped)

    return result
