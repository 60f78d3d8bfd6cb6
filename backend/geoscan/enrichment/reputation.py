# geoscan/enrichment/reputation.py
"""
Maltiverse reputation client.

Uses: Maltiverse REST API (Bearer token required)
Endpoint:
  - /ip/{ip}: classification + tags for one address

The client only translates HTTP into a ReputationReply. It never touches the
quota guard; deciding what a QUOTA_REJECTED reply means is the engine's job.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

TIMEOUT = 5
BASE_URL = "https://api.maltiverse.com"
USER_AGENT = "geoscan/1.0"

# Response text that means "you are over your quota", whatever the status code.
QUOTA_MARKERS = ("quota", "rate limit", "ratelimit", "too many requests", "limit exceeded")


class ReplyKind(Enum):
    CLASSIFIED = "classified"
    NOT_FOUND = "not_found"
    QUOTA_REJECTED = "quota_rejected"
    ERROR = "error"


@dataclass
class ReputationReply:
    kind: ReplyKind
    label: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    message: Optional[str] = None
    status_code: Optional[int] = None
    payload: Dict[str, Any] = field(default_factory=dict)


def _body_text(r: requests.Response) -> str:
    return (r.text or "")[:500]


def _mentions_quota(text: str) -> bool:
    lowered = (text or "").lower()
    return any(marker in lowered for marker in QUOTA_MARKERS)


class MaltiverseClient:
    def __init__(self, token: str, timeout: float = TIMEOUT, base_url: str = BASE_URL):
        if not token:
            raise ValueError("Maltiverse token is required")
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }

    def lookup_ip(self, ip: str) -> ReputationReply:
        try:
            r = requests.get(f"{self.base_url}/ip/{ip}", headers=self._headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.debug("Maltiverse transport error for %s: %s", ip, e)
            return ReputationReply(kind=ReplyKind.ERROR, message=f"{type(e).__name__}: {e}")

        body = _body_text(r)

        if r.status_code == 404:
            return ReputationReply(kind=ReplyKind.NOT_FOUND, status_code=404)

        if r.status_code in (403, 429) or (r.status_code != 200 and _mentions_quota(body)):
            logger.warning("Maltiverse rejected request for %s: HTTP %d", ip, r.status_code)
            return ReputationReply(
                kind=ReplyKind.QUOTA_REJECTED, status_code=r.status_code, message=body or None,
            )

        if r.status_code != 200:
            return ReputationReply(
                kind=ReplyKind.ERROR,
                status_code=r.status_code,
                message=f"HTTP {r.status_code}: {body}".strip().rstrip(":"),
            )

        try:
            data = r.json()
        except ValueError:
            return ReputationReply(kind=ReplyKind.ERROR, status_code=200, message="invalid JSON in response")

        if not isinstance(data, dict):
            return ReputationReply(kind=ReplyKind.ERROR, status_code=200, message="unexpected response shape")

        classification = data.get("classification")
        if not classification:
            message = str(data.get("message") or data.get("status") or "")
            if _mentions_quota(message):
                return ReputationReply(
                    kind=ReplyKind.QUOTA_REJECTED, status_code=200, message=message, payload=data,
                )
            if "not found" in message.lower():
                return ReputationReply(kind=ReplyKind.NOT_FOUND, status_code=200, payload=data)

        tags = data.get("tag") or []
        if isinstance(tags, str):
            tags = [tags]

        return ReputationReply(
            kind=ReplyKind.CLASSIFIED,
            label=str(classification or "unclassified"),
            tags=[str(t) for t in tags],
            status_code=200,
            payload=data,
        )
