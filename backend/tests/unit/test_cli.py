from unittest.mock import MagicMock

import pytest
from typer.testing import CliRunner

from geoscan import cli
from geoscan.enrichment import GeoDatabaseMissing, ReplyKind, ReputationReply

runner = CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("MALTIVERSE_TOKEN", "MALTIVERSE_ENABLED", "GEOSCAN_SCAN_INTERVAL", "GEOSCAN_PROVIDER_DNS"):
        monkeypatch.delenv(name, raising=False)


def test_once_runs_single_pass(monkeypatch):
    poller = MagicMock()
    monkeypatch.setattr(cli, "create_poller", lambda settings, emit=None: poller)

    result = runner.invoke(cli.app, ["once"])

    assert result.exit_code == 0
    poller.run_pass.assert_called_once_with(trigger="manual")


def test_once_exits_nonzero_when_pass_aborted(monkeypatch):
    poller = MagicMock()
    poller.run_pass.return_value = None
    monkeypatch.setattr(cli, "create_poller", lambda settings, emit=None: poller)

    result = runner.invoke(cli.app, ["once"])

    assert result.exit_code == 1


def test_missing_database_is_fatal(monkeypatch):
    def missing(settings, emit=None):
        raise GeoDatabaseMissing("Database not found: mmdb/GeoLite2-ASN.mmdb")

    monkeypatch.setattr(cli, "create_poller", missing)

    result = runner.invoke(cli.app, ["once"])

    assert result.exit_code == 1


def test_bad_configuration_exits_with_usage_code(monkeypatch):
    monkeypatch.setenv("GEOSCAN_SCAN_INTERVAL", "soon")

    result = runner.invoke(cli.app, ["once"])

    assert result.exit_code == 2


def test_reputation_requires_token():
    result = runner.invoke(cli.app, ["reputation", "8.8.8.8"])

    assert result.exit_code == 1


def test_reputation_prints_payload(monkeypatch):
    monkeypatch.setenv("MALTIVERSE_TOKEN", "secret")
    client = MagicMock()
    client.lookup_ip.return_value = ReputationReply(
        kind=ReplyKind.CLASSIFIED, label="whitelist", payload={"classification": "whitelist"},
    )
    monkeypatch.setattr(cli, "MaltiverseClient", lambda token, timeout=None: client)

    result = runner.invoke(cli.app, ["reputation", "8.8.8.8"])

    assert result.exit_code == 0
    assert '"classification": "whitelist"' in result.output
    client.lookup_ip.assert_called_once_with("8.8.8.8")


def test_reputation_rejects_non_ip(monkeypatch):
    monkeypatch.setenv("MALTIVERSE_TOKEN", "secret")

    result = runner.invoke(cli.app, ["reputation", "example.com"])

    assert result.exit_code != 0


def test_run_starts_scheduler_and_stops_on_signal(monkeypatch):
    poller = MagicMock()
    handlers = {}
    calls = []
    monkeypatch.setattr(cli, "create_poller", lambda settings, emit=None: poller)
    monkeypatch.setattr(cli.signal, "signal", lambda signum, handler: handlers.__setitem__(signum, handler))

    def fake_init(p, settings):
        calls.append(("init", p))
        handlers[cli.signal.SIGTERM](cli.signal.SIGTERM, None)

    monkeypatch.setattr(cli, "init_scheduler", fake_init)
    monkeypatch.setattr(cli, "shutdown_scheduler", lambda: calls.append(("shutdown", None)))

    result = runner.invoke(cli.app, ["run"])

    assert result.exit_code == 0
    assert calls == [("init", poller), ("shutdown", None)]
    assert set(handlers) == {cli.signal.SIGINT, cli.signal.SIGTERM}
