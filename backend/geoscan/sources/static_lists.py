# FILE: geoscan/sources/static_lists.py
"""
Configured resolver lists: the built-in public DNS set and the optional
provider / ISP / home resolvers. Both come from Settings and never touch
the network.
"""

from __future__ import annotations

from typing import Iterable, List

from .base_source import BaseAddressSource, DiscoveredAddress


class StaticListSource(BaseAddressSource):
    name = "static"
    kind = "static"
    description = "Public DNS resolvers (Cloudflare, Google, Quad9, ...)"

    def __init__(self, addresses: Iterable[str]):
        self._addresses = tuple(addresses)

    def is_available(self) -> bool:
        return bool(self._addresses)

    def fetch(self) -> List[DiscoveredAddress]:
        return [DiscoveredAddress(address=a, source=self.name) for a in self._addresses]


class ProviderListSource(StaticListSource):
    name = "provider"
    kind = "provider"
    description = "Provider / ISP / home DNS resolvers"
