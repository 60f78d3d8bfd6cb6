# geoscan/enrichment/base.py
"""
Data structures for the enrichment pipeline.

Architecture:
    Address flows through:  GeoDatabase -> QuotaGuard -> MaltiverseClient -> EnrichmentResult

Everything here is immutable once built. A result is created once per address
per pass and never touched again; nothing is carried over between passes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def now_utc() -> datetime:
    """Timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Reputation outcomes
# ---------------------------------------------------------------------------

class ReputationStatus(Enum):
    DISABLED = "disabled"               # feature off or no token
    SKIPPED_QUOTA = "skipped_quota"     # local budget spent or remote rejected us
    NOT_FOUND = "not_found"             # Maltiverse has no record
    CLASSIFIED = "classified"
    ERROR = "error"


@dataclass(frozen=True)
class ReputationOutcome:
    """
    Tagged result of the optional reputation lookup.

    Only CLASSIFIED carries label/tags and only ERROR carries a message;
    build instances through the classmethods rather than the constructor.
    """
    status: ReputationStatus
    label: Optional[str] = None
    tags: Tuple[str, ...] = ()
    message: Optional[str] = None

    @classmethod
    def disabled(cls) -> "ReputationOutcome":
        return cls(ReputationStatus.DISABLED)

    @classmethod
    def skipped_quota(cls) -> "ReputationOutcome":
        return cls(ReputationStatus.SKIPPED_QUOTA)

    @classmethod
    def not_found(cls) -> "ReputationOutcome":
        return cls(ReputationStatus.NOT_FOUND)

    @classmethod
    def classified(cls, label: str, tags=()) -> "ReputationOutcome":
        return cls(ReputationStatus.CLASSIFIED, label=label, tags=tuple(tags))

    @classmethod
    def error(cls, message: str) -> "ReputationOutcome":
        return cls(ReputationStatus.ERROR, message=message)

    def describe(self) -> str:
        if self.status is ReputationStatus.CLASSIFIED:
            tags = ", ".join(self.tags)
            return f"{self.label} [{tags}]" if tags else str(self.label)
        if self.status is ReputationStatus.ERROR:
            return f"error: {self.message}"
        if self.status is ReputationStatus.SKIPPED_QUOTA:
            return "skipped (quota)"
        if self.status is ReputationStatus.NOT_FOUND:
            return "not found"
        return "disabled"


# ---------------------------------------------------------------------------
# Per-address result
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AsnRecord:
    organization: str
    as_number: int


@dataclass(frozen=True)
class EnrichmentResult:
    """
    Everything learned about one address during one pass.

    Fields:
        address:     The IP literal that was enriched
        asn:         ASN owner, or None when the ASN database has no entry
        country:     English country name, or None when not found
        reputation:  Outcome of the reputation lookup (DISABLED when off)
        sources:     Which address sources contributed this address
    """
    address: str
    asn: Optional[AsnRecord] = None
    country: Optional[str] = None
    reputation: ReputationOutcome = field(default_factory=ReputationOutcome.disabled)
    sources: Tuple[str, ...] = ()

    @property
    def asn_found(self) -> bool:
        return self.asn is not None

    @property
    def country_found(self) -> bool:
        return self.country is not None
