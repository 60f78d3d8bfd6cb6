# geoscan/sources/base_source.py
"""
Base class for all address sources.

Every source of addresses (the built-in resolver list, the provider list,
OpenNIC discovery) implements this interface. The poller calls collect() on
each source and hands the address lists to the aggregator.
"""

from __future__ import annotations

import ipaddress
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List

logger = logging.getLogger(__name__)


def is_ip_address(value: str) -> bool:
    """True when value is an IPv4 or IPv6 literal."""
    if not isinstance(value, str):
        return False
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


@dataclass
class DiscoveredAddress:
    """
    One address reported by a source.
    The aggregator only looks at `address`; hostname is kept for the report.
    """
    address: str
    source: str                 # e.g. "static", "opennic"
    hostname: str = ""


@dataclass
class SourceResult:
    """
    Standardized output from any source run.

    Fields:
        source_name:      Which source produced this
        success:          Did the source complete without fatal errors?
        items:            Addresses in the order the source reported them
        errors:           Error messages (a failed source has at least one)
        duration_seconds: Wall-clock time the source took
    """
    source_name: str
    success: bool = True
    items: List[DiscoveredAddress] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    duration_seconds: float = 0.0

    def add_error(self, msg: str):
        self.errors.append(msg)

    @property
    def addresses(self) -> List[str]:
        return [item.address for item in self.items]


class BaseAddressSource(ABC):
    """
    Abstract base class for address sources.

    The base class handles automatically:
        - Timing (duration_seconds is set automatically)
        - Error catching (exceptions become SourceResult with success=False)
    """

    name: str = "base"
    description: str = ""
    kind: str = "dynamic"       # aggregation slot: static / provider / dynamic

    def is_available(self) -> bool:
        """Check if this source can run (enabled, configured, etc.)."""
        return True

    def collect(self) -> SourceResult:
        """
        Run the source with timing and error handling.

        DO NOT OVERRIDE THIS METHOD. Override `fetch()` instead.
        """
        start = time.monotonic()
        try:
            result = SourceResult(source_name=self.name, items=self.fetch())
        except Exception as e:
            logger.warning("Source '%s' failed: %s", self.name, e)
            result = SourceResult(
                source_name=self.name,
                success=False,
                errors=[f"{type(e).__name__}: {e}"],
            )
        result.duration_seconds = round(time.monotonic() - start, 2)
        return result

    @abstractmethod
    def fetch(self) -> List[DiscoveredAddress]:
        """Return the addresses this source knows about. May raise."""
        ...
