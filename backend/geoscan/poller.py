# geoscan/poller.py
"""
Change-triggered scan poller.

One call to run_pass() is one pass:

    IDLE -> RESOLVING -> SKIPPED  -> IDLE     public address unchanged
                      -> SCANNING -> IDLE     changed, or first pass

    1. Resolve the public address (failure aborts the pass, nothing emitted)
    2. Collect every available address source
    3. Aggregate into one deduplicated AddressSet
    4. SCANNING only: enrich each address in set order, one at a time
    5. Build the Maltiverse reference link (always, even when SKIPPED)
    6. Emit the session

The only state that outlives a pass is PollerState: the last public address
and the reputation QuotaGuard. Passes never overlap; a trigger that arrives
while one is running is dropped with a warning.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional, Sequence

from geoscan.enrichment.base import EnrichmentResult, now_utc
from geoscan.enrichment.engine import EnrichmentEngine
from geoscan.enrichment.quota import QuotaGuard
from geoscan.reference import build_reference
from geoscan.sources.aggregate import AddressSet, aggregate
from geoscan.sources.base_source import BaseAddressSource
from geoscan.sources.public_ip import PublicAddressResolver

logger = logging.getLogger(__name__)


class PollerPhase(Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    SKIPPED = "skipped"
    SCANNING = "scanning"


@dataclass
class PollerState:
    """Process-lifetime state shared by the scan timer and the quota reset timer."""
    last_public_address: Optional[str] = None
    quota: Optional[QuotaGuard] = None


@dataclass
class ScanSession:
    """
    Everything produced by one pass. Built by the poller, handed to the
    emitter, then dropped.
    """
    trigger: str
    public_address: str
    changed: bool
    addresses: Optional[AddressSet] = None
    results: List[EnrichmentResult] = field(default_factory=list)
    degradations: List[str] = field(default_factory=list)
    discovered_hostnames: dict = field(default_factory=dict)
    reference_uri: Optional[str] = None
    quota_rejected: bool = False
    started_at: datetime = field(default_factory=now_utc)
    finished_at: Optional[datetime] = None

    @property
    def skipped(self) -> bool:
        return not self.changed


class ScanPoller:
    def __init__(
        self,
        resolver: PublicAddressResolver,
        sources: Sequence[BaseAddressSource],
        engine: EnrichmentEngine,
        state: Optional[PollerState] = None,
        emit: Optional[Callable[[ScanSession], None]] = None,
    ):
        self.resolver = resolver
        self.sources = list(sources)
        self.engine = engine
        self.state = state or PollerState(quota=engine.quota)
        self.emit = emit
        self.phase = PollerPhase.IDLE
        self._pass_lock = threading.Lock()

    def run_pass(self, trigger: str = "interval") -> Optional[ScanSession]:
        """Run one pass. Returns the session, or None if the pass was aborted or dropped."""
        if not self._pass_lock.acquire(blocking=False):
            logger.warning("Scan pass already in progress, dropping %s trigger", trigger)
            return None
        try:
            return self._run_pass(trigger)
        finally:
            self.phase = PollerPhase.IDLE
            self._pass_lock.release()

    def _run_pass(self, trigger: str) -> Optional[ScanSession]:
        logger.info("GeoIP scan triggered (%s)", trigger)
        self.phase = PollerPhase.RESOLVING

        public_address = self.resolver.resolve()
        if not public_address:
            logger.error("Public address unavailable, pass aborted")
            return None

        changed = public_address != self.state.last_public_address
        session = ScanSession(trigger=trigger, public_address=public_address, changed=changed)

        if changed:
            if self.state.last_public_address:
                logger.info("Public address changed: %s -> %s", self.state.last_public_address, public_address)
            self.state.last_public_address = public_address

        static, provider, dynamic = self._collect(session)
        session.addresses = aggregate(public_address, static, provider, dynamic)

        if changed:
            self.phase = PollerPhase.SCANNING
            logger.info("Scanning %d addresses", len(session.addresses))
            for address in session.addresses:
                session.results.append(self.engine.enrich(address, session))
        else:
            self.phase = PollerPhase.SKIPPED
            logger.info("No IP change detected, skipping scan.")

        session.reference_uri = build_reference(session.addresses)
        session.finished_at = now_utc()

        if self.emit is not None:
            self.emit(session)
        return session

    def _collect(self, session: ScanSession):
        static: List[str] = []
        provider: List[str] = []
        dynamic: List[str] = []
        slots = {"static": static, "provider": provider}

        for source in self.sources:
            if not source.is_available():
                continue
            result = source.collect()
            if not result.success:
                note = f"{source.name} unavailable: {'; '.join(result.errors) or 'unknown error'}"
                logger.warning("Degraded pass: %s", note)
                session.degradations.append(note)
                continue
            for item in result.items:
                if item.hostname:
                    session.discovered_hostnames.setdefault(item.address, item.hostname)
            slots.get(source.kind, dynamic).extend(result.addresses)

        return static, provider, dynamic
