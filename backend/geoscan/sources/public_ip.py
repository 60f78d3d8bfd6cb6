# FILE: geoscan/sources/public_ip.py
"""
"What is my IP" resolver backed by ipify.

Returns the caller's public address, or None when it cannot be determined.
Never raises. A failed resolution only aborts the current pass.
"""

from __future__ import annotations

import logging
from typing import Optional

import requests

from .base_source import is_ip_address

logger = logging.getLogger(__name__)

TIMEOUT = 10
IPIFY_URL = "https://api.ipify.org"


class PublicAddressResolver:
    def __init__(self, timeout: float = TIMEOUT, url: str = IPIFY_URL):
        self.timeout = timeout
        self.url = url

    def resolve(self) -> Optional[str]:
        try:
            r = requests.get(self.url, params={"format": "json"}, timeout=self.timeout)
            if r.status_code != 200:
                logger.error("Could not fetch public IP: HTTP %d", r.status_code)
                return None
            data = r.json()
            ip = str(data.get("ip") or "").strip() if isinstance(data, dict) else ""
        except (requests.RequestException, ValueError) as e:
            logger.error("Could not fetch public IP: %s", e)
            return None

        if not is_ip_address(ip):
            logger.error("Could not fetch public IP: unexpected answer %r", ip)
            return None
        return ip
