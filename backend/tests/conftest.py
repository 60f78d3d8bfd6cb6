import sys
from pathlib import Path

import pytest

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from geoscan.enrichment import GeoDatabase
from geoscan.enrichment.reputation import ReplyKind, ReputationReply
from geoscan.sources.base_source import BaseAddressSource, DiscoveredAddress


class FakeReader:
    """Stands in for a maxminddb.Reader: a dict keyed by IP literal."""

    def __init__(self, records=None):
        self.records = records or {}
        self.closed = False

    def get(self, ip):
        return self.records.get(ip)

    def close(self):
        self.closed = True


class FakeResponse:
    def __init__(self, status_code=200, json_data=None, text=None, headers=None):
        self.status_code = status_code
        self._json = json_data
        self.text = text if text is not None else ("" if json_data is None else str(json_data))
        self.headers = headers or {}

    def json(self):
        if self._json is None:
            raise ValueError("No JSON object could be decoded")
        return self._json


class FakeResolver:
    def __init__(self, *answers):
        self.answers = list(answers)
        self.calls = 0

    def resolve(self):
        self.calls += 1
        if not self.answers:
            return None
        if len(self.answers) == 1:
            return self.answers[0]
        return self.answers.pop(0)


class FakeReputationClient:
    """Returns queued replies (or CLASSIFIED 'neutral' when the queue is empty)."""

    def __init__(self, replies=None):
        self.replies = dict(replies or {})
        self.calls = []

    def lookup_ip(self, ip):
        self.calls.append(ip)
        reply = self.replies.get(ip)
        if reply is None:
            return ReputationReply(kind=ReplyKind.CLASSIFIED, label="neutral", tags=["dns"])
        return reply


class ListSource(BaseAddressSource):
    def __init__(self, name, kind, addresses, error=None):
        self.name = name
        self.kind = kind
        self.addresses = addresses
        self.error = error

    def fetch(self):
        if self.error:
            raise self.error
        return [DiscoveredAddress(address=a, source=self.name) for a in self.addresses]


ASN_RECORDS = {
    "1.1.1.1": {"autonomous_system_number": 13335, "autonomous_system_organization": "CLOUDFLARENET"},
    "8.8.8.8": {"autonomous_system_number": 15169, "autonomous_system_organization": "GOOGLE"},
    "9.9.9.9": {"autonomous_system_number": 19281, "autonomous_system_organization": "QUAD9-AS-1"},
    "198.51.100.7": {"autonomous_system_number": 64500, "autonomous_system_organization": "EXAMPLE-ISP"},
}

COUNTRY_RECORDS = {
    "1.1.1.1": {"country": {"iso_code": "AU", "names": {"en": "Australia", "de": "Australien"}}},
    "8.8.8.8": {"country": {"iso_code": "US", "names": {"en": "United States"}}},
    "9.9.9.9": {"registered_country": {"iso_code": "CH", "names": {"en": "Switzerland"}}},
    "198.51.100.7": {"country": {"iso_code": "DE", "names": {"en": "Germany"}}},
}


@pytest.fixture
def geo():
    return GeoDatabase(FakeReader(ASN_RECORDS), FakeReader(COUNTRY_RECORDS))
