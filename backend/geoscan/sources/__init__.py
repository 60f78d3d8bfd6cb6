# FILE: geoscan/sources/__init__.py
"""
Address source registry.

Sources, in aggregation precedence:
  self:     the caller's public address (PublicAddressResolver)
  static:   built-in public DNS resolvers
  provider: user-supplied provider / ISP / home resolvers
  dynamic:  nearest OpenNIC tier-2 servers
"""
from __future__ import annotations

from typing import List

from geoscan.config import Settings

from .aggregate import AddressSet, aggregate
from .base_source import BaseAddressSource, DiscoveredAddress, SourceResult, is_ip_address
from .opennic import OpenNICSource
from .public_ip import PublicAddressResolver
from .static_lists import ProviderListSource, StaticListSource


def build_sources(settings: Settings) -> List[BaseAddressSource]:
    """Instantiate the configured sources in precedence order."""
    return [
        StaticListSource(settings.public_dns),
        ProviderListSource(settings.provider_dns),
        OpenNICSource(enabled=settings.opennic_enabled, timeout=settings.http_timeout),
    ]


__all__ = [
    "AddressSet", "aggregate",
    "BaseAddressSource", "DiscoveredAddress", "SourceResult", "is_ip_address",
    "OpenNICSource", "PublicAddressResolver",
    "ProviderListSource", "StaticListSource",
    "build_sources",
]
