# geoscan/config.py
"""
Runtime configuration, read once from environment variables.

Every setting has a default except the Maltiverse token. Values are parsed and
validated here so the rest of the package can trust them; anything malformed
raises ConfigError before the first pass runs.

Environment:
    GEOSCAN_MMDB_DIR          directory holding the GeoLite2 .mmdb files
    GEOSCAN_ASN_DB            ASN database filename
    GEOSCAN_COUNTRY_DB        country database filename
    GEOSCAN_SCAN_INTERVAL     seconds between scan triggers
    GEOSCAN_PUBLIC_DNS        comma list replacing the built-in resolver list
    GEOSCAN_PROVIDER_DNS      comma list of provider / ISP / home resolvers
    GEOSCAN_OPENNIC_ENABLED   fetch nearest OpenNIC tier-2 servers each pass
    GEOSCAN_HTTP_TIMEOUT      timeout for ipify / OpenNIC calls
    GEOSCAN_LOG_LEVEL         logging level name
    MALTIVERSE_ENABLED        turn reputation lookups on
    MALTIVERSE_TOKEN          Maltiverse API bearer token
    MALTIVERSE_QUOTA          reputation requests allowed per window
    MALTIVERSE_QUOTA_WINDOW   window length in seconds
    MALTIVERSE_TIMEOUT        per-request timeout for reputation calls
"""

from __future__ import annotations

import ipaddress
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Tuple

logger = logging.getLogger(__name__)


PUBLIC_DNS: Tuple[str, ...] = (
    "1.1.1.1", "1.0.0.1", "8.8.8.8", "8.8.4.4",
    "185.222.222.222", "45.11.45.11", "76.76.2.0", "76.76.10.0",
    "193.110.81.254", "185.253.5.254", "194.242.2.2", "91.239.100.100",
)

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class ConfigError(ValueError):
    """Raised when an environment value cannot be used."""


@dataclass(frozen=True)
class Settings:
    mmdb_dir: Path = Path("mmdb")
    asn_db: str = "GeoLite2-ASN.mmdb"
    country_db: str = "GeoLite2-Country.mmdb"
    scan_interval: int = 3600
    public_dns: Tuple[str, ...] = PUBLIC_DNS
    provider_dns: Tuple[str, ...] = field(default_factory=tuple)
    opennic_enabled: bool = True
    http_timeout: float = 10.0
    log_level: str = "INFO"

    reputation_enabled: bool = False
    maltiverse_token: Optional[str] = None
    quota_ceiling: int = 20
    quota_window: int = 86400
    reputation_timeout: float = 5.0

    @property
    def asn_db_path(self) -> Path:
        return self.mmdb_dir / self.asn_db

    @property
    def country_db_path(self) -> Path:
        return self.mmdb_dir / self.country_db

    @property
    def reputation_active(self) -> bool:
        """Reputation lookups run only when switched on AND a token is present."""
        return self.reputation_enabled and bool(self.maltiverse_token)


def _parse_bool(name: str, raw: Optional[str], default: bool) -> bool:
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def _parse_int(name: str, raw: Optional[str], default: int, minimum: int = 1) -> int:
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")
    if value < minimum:
        raise ConfigError(f"{name} must be >= {minimum}, got {value}")
    return value


def _parse_float(name: str, raw: Optional[str], default: float) -> float:
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw.strip())
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value


def _parse_ip_list(name: str, raw: Optional[str], default: Tuple[str, ...]) -> Tuple[str, ...]:
    if raw is None:
        return default
    entries = [e.strip() for e in raw.split(",") if e.strip()]
    for entry in entries:
        try:
            ipaddress.ip_address(entry)
        except ValueError:
            raise ConfigError(f"{name} contains an invalid IP address: {entry!r}")
    return tuple(entries)


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from the given mapping (defaults to os.environ)."""
    env = os.environ if env is None else env

    log_level = (env.get("GEOSCAN_LOG_LEVEL") or "INFO").strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigError(f"GEOSCAN_LOG_LEVEL is not a logging level: {log_level!r}")

    token = (env.get("MALTIVERSE_TOKEN") or "").strip() or None

    settings = Settings(
        mmdb_dir=Path(env.get("GEOSCAN_MMDB_DIR") or "mmdb").expanduser(),
        asn_db=env.get("GEOSCAN_ASN_DB") or "GeoLite2-ASN.mmdb",
        country_db=env.get("GEOSCAN_COUNTRY_DB") or "GeoLite2-Country.mmdb",
        scan_interval=_parse_int("GEOSCAN_SCAN_INTERVAL", env.get("GEOSCAN_SCAN_INTERVAL"), 3600),
        public_dns=_parse_ip_list("GEOSCAN_PUBLIC_DNS", env.get("GEOSCAN_PUBLIC_DNS"), PUBLIC_DNS),
        provider_dns=_parse_ip_list("GEOSCAN_PROVIDER_DNS", env.get("GEOSCAN_PROVIDER_DNS"), ()),
        opennic_enabled=_parse_bool(
            "GEOSCAN_OPENNIC_ENABLED", env.get("GEOSCAN_OPENNIC_ENABLED"), True,
        ),
        http_timeout=_parse_float("GEOSCAN_HTTP_TIMEOUT", env.get("GEOSCAN_HTTP_TIMEOUT"), 10.0),
        log_level=log_level,
        reputation_enabled=_parse_bool(
            "MALTIVERSE_ENABLED", env.get("MALTIVERSE_ENABLED"), False,
        ),
        maltiverse_token=token,
        quota_ceiling=_parse_int("MALTIVERSE_QUOTA", env.get("MALTIVERSE_QUOTA"), 20),
        quota_window=_parse_int(
            "MALTIVERSE_QUOTA_WINDOW", env.get("MALTIVERSE_QUOTA_WINDOW"), 86400,
        ),
        reputation_timeout=_parse_float("MALTIVERSE_TIMEOUT", env.get("MALTIVERSE_TIMEOUT"), 5.0),
    )

    if settings.reputation_enabled and not settings.maltiverse_token:
        logger.warning("MALTIVERSE_ENABLED is set but MALTIVERSE_TOKEN is missing; reputation lookups disabled")

    return settings
