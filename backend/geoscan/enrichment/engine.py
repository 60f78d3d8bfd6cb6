# geoscan/enrichment/engine.py
"""
Enrichment engine: turns one address into one EnrichmentResult.

What this engine does:
    1. Looks the address up in the local ASN and country databases
    2. If reputation is enabled, asks the QuotaGuard for a slot
    3. With a slot, queries Maltiverse and maps the reply to an outcome

Failure policy:
    - "not found" in a local database is a value, not an error
    - a remote quota rejection closes the guard and flags the pass, so no
      further remote calls are made for the rest of that pass
    - transport errors and unexpected responses become ERROR outcomes
    - nothing raised here ever reaches the poller
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from .base import EnrichmentResult, ReputationOutcome
from .geo_reader import GeoDatabase
from .quota import QuotaGuard
from .reputation import MaltiverseClient, ReplyKind

if TYPE_CHECKING:
    from geoscan.poller import ScanSession

logger = logging.getLogger(__name__)


class EnrichmentEngine:
    """
    Reputation is enabled exactly when both a client and a guard are given.
    Without them every result carries a DISABLED outcome and the guard is
    never consulted.
    """

    def __init__(
        self,
        geo: GeoDatabase,
        reputation: Optional[MaltiverseClient] = None,
        quota: Optional[QuotaGuard] = None,
    ):
        self.geo = geo
        self.reputation = reputation
        self.quota = quota

    @property
    def reputation_enabled(self) -> bool:
        return self.reputation is not None and self.quota is not None

    def enrich(self, address: str, session: "Optional[ScanSession]" = None) -> EnrichmentResult:
        sources = tuple(session.addresses.sources_for(address)) if session and session.addresses else ()

        asn = country = None
        try:
            asn = self.geo.lookup_asn(address)
        except Exception:
            logger.exception("GeoLite2 ASN lookup failed for %s", address)
        try:
            country = self.geo.lookup_country(address)
        except Exception:
            logger.exception("GeoLite2 country lookup failed for %s", address)

        try:
            outcome = self._reputation(address, session)
        except Exception as e:
            logger.exception("Reputation lookup failed for %s", address)
            outcome = ReputationOutcome.error(f"{type(e).__name__}: {e}")

        return EnrichmentResult(
            address=address,
            asn=asn,
            country=country,
            reputation=outcome,
            sources=sources,
        )

    def _reputation(self, address: str, session: "Optional[ScanSession]") -> ReputationOutcome:
        if not self.reputation_enabled:
            return ReputationOutcome.disabled()

        if session is not None and session.quota_rejected:
            return ReputationOutcome.skipped_quota()

        if not self.quota.try_acquire():
            logger.debug("Reputation quota denied for %s", address)
            return ReputationOutcome.skipped_quota()

        reply = self.reputation.lookup_ip(address)

        if reply.kind is ReplyKind.CLASSIFIED:
            return ReputationOutcome.classified(reply.label or "unclassified", reply.tags)
        if reply.kind is ReplyKind.NOT_FOUND:
            return ReputationOutcome.not_found()
        if reply.kind is ReplyKind.QUOTA_REJECTED:
            self.quota.mark_exhausted()
            if session is not None:
                session.quota_rejected = True
            return ReputationOutcome.skipped_quota()
        return ReputationOutcome.error(reply.message or "unknown error")
