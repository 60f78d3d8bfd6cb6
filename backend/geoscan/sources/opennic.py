# FILE: geoscan/sources/opennic.py
"""
OpenNIC Discovery Source. Asks the OpenNIC GeoIP API for the tier-2
alternative-root DNS servers nearest to the caller.

Uses: https://api.opennicproject.org/geoip/ (free, no key)
Finds: resolver IPs plus their hostnames

The API answers either with plain text, one server per line
("<ip> <hostname...>"), or with a JSON list when asked for it. Both shapes are
parsed here; whichever the response declares wins. Malformed entries are
skipped, never fatal.
"""

from __future__ import annotations

import logging
from typing import Any, List, Set

import requests

from .base_source import BaseAddressSource, DiscoveredAddress, is_ip_address

logger = logging.getLogger(__name__)

TIMEOUT = 10
OPENNIC_GEOIP_URL = "https://api.opennicproject.org/geoip/"
HEADERS = {"User-Agent": "geoscan/1.0", "Accept": "application/json, text/plain"}


def parse_lines(text: str, source: str = "opennic") -> List[DiscoveredAddress]:
    """Parse the line format: first token is the IP, the rest is the hostname."""
    items: List[DiscoveredAddress] = []
    seen: Set[str] = set()

    for line in (text or "").splitlines():
        parts = line.split()
        if len(parts) < 2:
            continue
        ip, hostname = parts[0], " ".join(parts[1:])
        if is_ip_address(ip) and ip not in seen:
            seen.add(ip)
            items.append(DiscoveredAddress(address=ip, source=source, hostname=hostname))

    return items


def parse_json(payload: Any, source: str = "opennic") -> List[DiscoveredAddress]:
    """Parse the structured format: a list of {"ip": ..., "host": ...} objects."""
    items: List[DiscoveredAddress] = []
    seen: Set[str] = set()

    if isinstance(payload, dict):
        payload = payload.get("servers", [])
    if not isinstance(payload, list):
        return items

    for entry in payload:
        if isinstance(entry, str):
            ip, hostname = entry.strip(), ""
        elif isinstance(entry, dict):
            ip = str(entry.get("ip") or "").strip()
            hostname = str(entry.get("host") or entry.get("hostname") or "").strip()
        else:
            continue
        if is_ip_address(ip) and ip not in seen:
            seen.add(ip)
            items.append(DiscoveredAddress(address=ip, source=source, hostname=hostname))

    return items


class OpenNICSource(BaseAddressSource):
    name = "opennic"
    description = "OpenNIC: nearest tier-2 alternative-root DNS servers"

    def __init__(self, enabled: bool = True, timeout: float = TIMEOUT, url: str = OPENNIC_GEOIP_URL):
        self.enabled = enabled
        self.timeout = timeout
        self.url = url

    def is_available(self) -> bool:
        return self.enabled

    def fetch(self) -> List[DiscoveredAddress]:
        r = requests.get(self.url, timeout=self.timeout, headers=HEADERS)
        if r.status_code != 200:
            raise RuntimeError(f"OpenNIC GeoIP returned HTTP {r.status_code}")

        content_type = (r.headers.get("Content-Type") or "").lower()
        if "json" in content_type:
            items = parse_json(r.json(), source=self.name)
        else:
            items = parse_lines(r.text, source=self.name)

        logger.info("OpenNIC: %d tier-2 servers discovered", len(items))
        return items
