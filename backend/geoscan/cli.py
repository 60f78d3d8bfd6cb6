from __future__ import annotations

import json
import signal
import threading

import typer

from geoscan import configure_logging, create_poller
from geoscan.config import ConfigError, Settings, load_settings
from geoscan.enrichment import GeoDatabaseError, MaltiverseClient, ReplyKind
from geoscan.report import console_emitter
from geoscan.scheduler import init_scheduler, shutdown_scheduler
from geoscan.sources import is_ip_address

app = typer.Typer(help="GeoIP / DNS threat-intelligence poller (GeoLite2 + OpenNIC + Maltiverse).")


def _settings() -> Settings:
    try:
        settings = load_settings()
    except ConfigError as e:
        configure_logging()
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=2)
    configure_logging(settings.log_level)
    return settings


def _poller(settings: Settings):
    try:
        return create_poller(settings, emit=console_emitter(typer.echo))
    except GeoDatabaseError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)


@app.command()
def run():
    """Scan now, then re-check on every interval until interrupted."""
    settings = _settings()
    poller = _poller(settings)

    stop = threading.Event()
    signal.signal(signal.SIGINT, lambda *_: stop.set())
    signal.signal(signal.SIGTERM, lambda *_: stop.set())

    init_scheduler(poller, settings)
    try:
        stop.wait()
    finally:
        shutdown_scheduler()


@app.command()
def once():
    """Run a single pass and exit."""
    settings = _settings()
    poller = _poller(settings)
    session = poller.run_pass(trigger="manual")
    if session is None:
        raise typer.Exit(code=1)


@app.command()
def reputation(
        ip: str = typer.Argument(..., help="IP address to look up on Maltiverse."),
):
    """Query Maltiverse once for a single address (needs MALTIVERSE_TOKEN)."""
    settings = _settings()
    if not settings.maltiverse_token:
        typer.echo("Error: MALTIVERSE_TOKEN environment variable is not set.", err=True)
        raise typer.Exit(code=1)
    if not is_ip_address(ip):
        raise typer.BadParameter(f"Not an IP address: {ip}")

    client = MaltiverseClient(settings.maltiverse_token, timeout=settings.reputation_timeout)
    reply = client.lookup_ip(ip)

    if reply.kind is ReplyKind.CLASSIFIED:
        typer.echo(json.dumps(reply.payload, indent=2))
    elif reply.kind is ReplyKind.NOT_FOUND:
        typer.echo(f"{ip}: not found on Maltiverse")
    else:
        typer.echo(f"API request failed ({reply.kind.value}): {reply.message or reply.status_code}", err=True)
        raise typer.Exit(code=1)


def main():
    app()


if __name__ == "__main__":
    main()
