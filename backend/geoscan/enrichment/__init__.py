# geoscan/enrichment/__init__.py
"""
Per-address enrichment.

Usage:
    from geoscan.enrichment import EnrichmentEngine, GeoDatabase, QuotaGuard

    engine = EnrichmentEngine(GeoDatabase.open(asn_path, country_path))
    result = engine.enrich("8.8.8.8")

Architecture:
    EnrichmentEngine
    ├── GeoDatabase       local GeoLite2 ASN + country readers
    ├── QuotaGuard        fixed-window budget for reputation calls
    └── MaltiverseClient  remote reputation lookups (optional)
"""

from geoscan.enrichment.base import (
    AsnRecord,
    EnrichmentResult,
    ReputationOutcome,
    ReputationStatus,
)
from geoscan.enrichment.engine import EnrichmentEngine
from geoscan.enrichment.geo_reader import GeoDatabase, GeoDatabaseError, GeoDatabaseMissing
from geoscan.enrichment.quota import QuotaGuard, QuotaState
from geoscan.enrichment.reputation import MaltiverseClient, ReplyKind, ReputationReply

__all__ = [
    "AsnRecord", "EnrichmentResult", "ReputationOutcome", "ReputationStatus",
    "EnrichmentEngine",
    "GeoDatabase", "GeoDatabaseError", "GeoDatabaseMissing",
    "QuotaGuard", "QuotaState",
    "MaltiverseClient", "ReplyKind", "ReputationReply",
]
