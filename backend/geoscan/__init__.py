# geoscan/__init__.py
"""
Poller factory.

Wires Settings into a ready-to-run ScanPoller:
    - GeoLite2 databases opened once (missing files are fatal)
    - reputation client + quota guard only when Maltiverse is enabled AND a token is set
    - address sources built from the configured lists and OpenNIC toggle
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .config import ConfigError, Settings, load_settings
from .enrichment import EnrichmentEngine, GeoDatabase, MaltiverseClient, QuotaGuard
from .poller import PollerState, ScanPoller, ScanSession
from .sources import PublicAddressResolver, build_sources

__version__ = "1.0.0"

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    # ── Logging ──────────────────────────────────────────────────────
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-7s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # Quieten noisy libraries
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    # ─────────────────────────────────────────────────────────────────


def create_poller(
    settings: Settings,
    geo: Optional[GeoDatabase] = None,
    emit: Optional[Callable[[ScanSession], None]] = None,
) -> ScanPoller:
    if geo is None:
        geo = GeoDatabase.open(settings.asn_db_path, settings.country_db_path)

    # ── Reputation ───────────────────────────────────────────────────
    client = quota = None
    if settings.reputation_active:
        client = MaltiverseClient(settings.maltiverse_token, timeout=settings.reputation_timeout)
        quota = QuotaGuard(settings.quota_ceiling, settings.quota_window)
        logger.info(
            "Maltiverse reputation enabled (%d requests per %ds)",
            settings.quota_ceiling, settings.quota_window,
        )
    else:
        logger.info("Maltiverse reputation disabled")

    engine = EnrichmentEngine(geo, reputation=client, quota=quota)

    return ScanPoller(
        resolver=PublicAddressResolver(timeout=settings.http_timeout),
        sources=build_sources(settings),
        engine=engine,
        state=PollerState(quota=quota),
        emit=emit,
    )


__all__ = [
    "ConfigError", "Settings", "load_settings",
    "configure_logging", "create_poller",
    "PollerState", "ScanPoller", "ScanSession",
]
