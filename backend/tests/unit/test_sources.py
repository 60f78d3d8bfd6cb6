import pytest
import requests
from conftest import FakeResponse

from geoscan.config import Settings
from geoscan.sources import build_sources
from geoscan.sources import opennic as opennic_module
from geoscan.sources import public_ip as public_ip_module
from geoscan.sources.opennic import OpenNICSource, parse_json, parse_lines
from geoscan.sources.public_ip import PublicAddressResolver
from geoscan.sources.static_lists import ProviderListSource, StaticListSource


OPENNIC_TEXT = """
185.121.177.177 ns1.de.dns.opennic.glue
not-an-ip       bogus.opennic.glue
94.247.43.254
2a05:dfc7:5::53 ns2.ch.dns.opennic.glue
185.121.177.177 duplicate.opennic.glue
"""


def test_parse_lines_skips_malformed_and_duplicate_entries():
    items = parse_lines(OPENNIC_TEXT)

    assert [i.address for i in items] == ["185.121.177.177", "2a05:dfc7:5::53"]
    assert items[0].hostname == "ns1.de.dns.opennic.glue"
    assert items[0].source == "opennic"


def test_parse_json_accepts_objects_and_bare_strings():
    payload = [
        {"ip": "185.121.177.177", "host": "ns1.de.dns.opennic.glue"},
        {"ip": "garbage"},
        "94.247.43.254",
        42,
    ]

    items = parse_json(payload)

    assert [i.address for i in items] == ["185.121.177.177", "94.247.43.254"]


def test_parse_json_unwraps_servers_key():
    items = parse_json({"servers": [{"ip": "9.9.9.9", "hostname": "x"}]})

    assert items[0].address == "9.9.9.9"
    assert items[0].hostname == "x"


def test_opennic_fetch_uses_line_parser_for_text(monkeypatch):
    monkeypatch.setattr(
        opennic_module.requests, "get",
        lambda url, timeout=None, headers=None: FakeResponse(200, text=OPENNIC_TEXT, headers={"Content-Type": "text/plain"}),
    )

    result = OpenNICSource().collect()

    assert result.success
    assert result.addresses == ["185.121.177.177", "2a05:dfc7:5::53"]


def test_opennic_fetch_uses_json_parser_for_json(monkeypatch):
    monkeypatch.setattr(
        opennic_module.requests, "get",
        lambda url, timeout=None, headers=None: FakeResponse(
            200, [{"ip": "9.9.9.9", "host": "a"}], headers={"Content-Type": "application/json"},
        ),
    )

    assert OpenNICSource().collect().addresses == ["9.9.9.9"]


def test_opennic_http_error_becomes_failed_result(monkeypatch):
    monkeypatch.setattr(
        opennic_module.requests, "get",
        lambda url, timeout=None, headers=None: FakeResponse(503, text="unavailable"),
    )

    result = OpenNICSource().collect()

    assert not result.success
    assert result.items == []
    assert "HTTP 503" in result.errors[0]


def test_opennic_transport_error_becomes_failed_result(monkeypatch):
    def boom(url, timeout=None, headers=None):
        raise requests.ConnectionError("no route to host")

    monkeypatch.setattr(opennic_module.requests, "get", boom)

    result = OpenNICSource().collect()

    assert not result.success
    assert result.errors[0].startswith("ConnectionError")


def test_opennic_disabled_is_unavailable():
    assert not OpenNICSource(enabled=False).is_available()


def test_static_and_provider_sources():
    static = StaticListSource(["1.1.1.1", "8.8.8.8"])
    provider = ProviderListSource([])

    assert static.collect().addresses == ["1.1.1.1", "8.8.8.8"]
    assert static.kind == "static"
    assert provider.kind == "provider"
    assert not provider.is_available()


def test_build_sources_follows_settings():
    settings = Settings(provider_dns=("192.0.2.53",), opennic_enabled=False)

    sources = build_sources(settings)

    assert [s.kind for s in sources] == ["static", "provider", "dynamic"]
    assert sources[1].collect().addresses == ["192.0.2.53"]
    assert not sources[2].is_available()


def test_public_ip_resolves(monkeypatch):
    seen = {}

    def fake_get(url, params=None, timeout=None):
        seen.update(url=url, params=params)
        return FakeResponse(200, {"ip": "198.51.100.7"})

    monkeypatch.setattr(public_ip_module.requests, "get", fake_get)

    assert PublicAddressResolver().resolve() == "198.51.100.7"
    assert seen == {"url": "https://api.ipify.org", "params": {"format": "json"}}


@pytest.mark.parametrize("response", [
    FakeResponse(500, text="oops"),
    FakeResponse(200, {"ip": "not-an-ip"}),
    FakeResponse(200, None, text="<html>"),
    FakeResponse(200, ["198.51.100.7"]),
])
def test_public_ip_failures_return_none(monkeypatch, response):
    monkeypatch.setattr(public_ip_module.requests, "get", lambda url, params=None, timeout=None: response)

    assert PublicAddressResolver().resolve() is None


def test_public_ip_transport_error_returns_none(monkeypatch):
    def boom(url, params=None, timeout=None):
        raise requests.ConnectTimeout("timed out")

    monkeypatch.setattr(public_ip_module.requests, "get", boom)

    assert PublicAddressResolver().resolve() is None
