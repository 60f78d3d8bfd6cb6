# geoscan/report.py
"""
Console rendering of a finished pass.

Output per address:
    IP:         1.1.1.1  (static)
      ASN:      CLOUDFLARENET (AS13335)
      Country:  Australia
      Reputation: whitelist [dns, cloudflare]     (only when enabled)

followed by any degradation notes and the Maltiverse batch-search link.
"""

from __future__ import annotations

from typing import Callable, List, Optional

from geoscan.enrichment.base import EnrichmentResult, ReputationStatus
from geoscan.poller import ScanSession


def format_result(result: EnrichmentResult, hostname: Optional[str] = None) -> List[str]:
    sources = ", ".join(result.sources)
    header = f"IP: {result.address}"
    if sources:
        header += f"  ({sources})"
    if hostname:
        header += f"  {hostname}"

    if result.asn:
        asn = f"{result.asn.organization or 'Not found'} (AS{result.asn.as_number})"
    else:
        asn = "Not found (ASN/A)"

    lines = [
        header,
        f"  ASN:      {asn}",
        f"  Country:  {result.country or 'Not found'}",
    ]
    if result.reputation.status is not ReputationStatus.DISABLED:
        lines.append(f"  Reputation: {result.reputation.describe()}")
    return lines


def format_session(session: ScanSession) -> str:
    lines: List[str] = []

    if session.changed:
        lines.append(f"Scanned {len(session.results)} addresses (public IP {session.public_address})")
        for result in session.results:
            lines.append("")
            lines.extend(format_result(result, session.discovered_hostnames.get(result.address)))
    else:
        lines.append(f"No IP change detected ({session.public_address}), skipping scan.")

    for note in session.degradations:
        lines.append("")
        lines.append(f"Degraded: {note}")

    if session.quota_rejected:
        lines.append("")
        lines.append("Maltiverse quota exhausted; remaining reputation lookups skipped.")

    lines.append("")
    lines.append(f"Maltiverse Intel Web Search: {session.reference_uri}")
    return "\n".join(lines)


def console_emitter(echo: Callable[[str], None] = print) -> Callable[[ScanSession], None]:
    """Build an emit callback for ScanPoller that writes through `echo`."""
    def _emit(session: ScanSession) -> None:
        echo("\n" + format_session(session) + "\n")
    return _emit
