# geoscan/enrichment/geo_reader.py
"""
Local GeoLite2 lookups (ASN + country) via the MaxMind mmdb reader.

Both databases are opened once at startup. A missing file is fatal: the
poller must not start without them. Per-address misses are normal and come
back as None. No city or region lookups are made.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import maxminddb

from .base import AsnRecord

logger = logging.getLogger(__name__)


class GeoDatabaseError(RuntimeError):
    """The GeoLite2 databases could not be opened."""


class GeoDatabaseMissing(GeoDatabaseError):
    """A GeoLite2 database file does not exist."""


class GeoDatabase:
    """
    Pair of mmdb readers. Any object with a `get(ip)` method works as a
    reader, which is how tests inject in-memory fakes.
    """

    def __init__(self, asn_reader: Any, country_reader: Any):
        self._asn = asn_reader
        self._country = country_reader

    @classmethod
    def open(cls, asn_path: Path, country_path: Path) -> "GeoDatabase":
        for db_path in (asn_path, country_path):
            if not Path(db_path).is_file():
                raise GeoDatabaseMissing(f"Database not found: {db_path}")

        try:
            asn_reader = maxminddb.open_database(str(asn_path))
            country_reader = maxminddb.open_database(str(country_path))
        except (OSError, maxminddb.InvalidDatabaseError) as e:
            raise GeoDatabaseError(f"Could not open GeoLite2 database: {e}") from e

        logger.info("Opened GeoLite2 databases: %s, %s", asn_path, country_path)
        return cls(asn_reader, country_reader)

    def close(self) -> None:
        for reader in (self._asn, self._country):
            close = getattr(reader, "close", None)
            if close:
                close()

    def __enter__(self) -> "GeoDatabase":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @staticmethod
    def _get(reader: Any, address: str) -> Optional[dict]:
        try:
            record = reader.get(address)
        except ValueError as e:
            # invalid literal, or an IPv6 address against an IPv4-only database
            logger.debug("mmdb lookup rejected %s: %s", address, e)
            return None
        except maxminddb.InvalidDatabaseError as e:
            logger.warning("Corrupt mmdb record for %s: %s", address, e)
            return None
        return record if isinstance(record, dict) else None

    def lookup_asn(self, address: str) -> Optional[AsnRecord]:
        record = self._get(self._asn, address)
        if not record:
            return None
        number = record.get("autonomous_system_number")
        org = record.get("autonomous_system_organization") or ""
        if number is None and not org:
            return None
        return AsnRecord(organization=org, as_number=int(number or 0))

    def lookup_country(self, address: str) -> Optional[str]:
        record = self._get(self._country, address)
        if not record:
            return None
        for key in ("country", "registered_country"):
            name = ((record.get(key) or {}).get("names") or {}).get("en")
            if name:
                return name
        return None
