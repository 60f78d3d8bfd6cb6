# geoscan/scheduler.py
"""
Background Scheduler for scan passes and the reputation quota window
────────────────────────────────────────────────────────────────────
Uses APScheduler with two independent interval jobs:

    geoscan_scan         every scan_interval seconds, first run immediately
    geoscan_quota_reset  every quota_window seconds (reputation enabled only)

The jobs share nothing but the poller's PollerState. The scan job runs with
max_instances=1 so passes never overlap; ScanPoller also guards itself.

Setup:
    from geoscan.scheduler import init_scheduler
    init_scheduler(poller, settings)
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from geoscan.config import Settings
from geoscan.poller import ScanPoller

logger = logging.getLogger("geoscan.scheduler")

_scheduler: BackgroundScheduler | None = None

SCAN_JOB_ID = "geoscan_scan"
QUOTA_JOB_ID = "geoscan_quota_reset"


def now_utc():
    return datetime.now(timezone.utc)


def _run_scan(poller: ScanPoller, first_run: list) -> None:
    trigger = "startup" if first_run else "interval"
    first_run.clear()
    try:
        poller.run_pass(trigger=trigger)
    except Exception as e:
        logger.exception(f"Scan pass failed: {e}")


def build_scheduler(poller: ScanPoller, settings: Settings) -> BackgroundScheduler:
    """Create (but do not start) a scheduler carrying both jobs."""
    scheduler = BackgroundScheduler(daemon=True, timezone=timezone.utc)

    # Startup trigger is the first run of the interval job
    scheduler.add_job(
        func=_run_scan,
        args=(poller, [True]),
        trigger=IntervalTrigger(seconds=settings.scan_interval),
        next_run_time=now_utc(),
        id=SCAN_JOB_ID,
        name="GeoIP scan pass",
        replace_existing=True,
        max_instances=1,  # Prevent overlapping passes
        coalesce=True,
    )

    quota = poller.state.quota
    if quota is not None:
        scheduler.add_job(
            func=quota.reset,
            trigger=IntervalTrigger(seconds=quota.window_seconds),
            id=QUOTA_JOB_ID,
            name="Reset reputation quota window",
            replace_existing=True,
            max_instances=1,
        )

    return scheduler


def init_scheduler(poller: ScanPoller, settings: Settings) -> BackgroundScheduler:
    """Initialize and start the background scheduler."""
    global _scheduler

    if _scheduler is not None:
        logger.info("Scheduler already running")
        return _scheduler

    _scheduler = build_scheduler(poller, settings)
    _scheduler.start()

    if poller.state.quota is not None:
        logger.info(
            f"Background scheduler started (scan every {settings.scan_interval}s, "
            f"quota window {poller.state.quota.window_seconds}s)"
        )
    else:
        logger.info(f"Background scheduler started (scan every {settings.scan_interval}s)")
    return _scheduler


def shutdown_scheduler():
    """Gracefully stop the scheduler."""
    global _scheduler
    if _scheduler:
        _scheduler.shutdown(wait=False)
        _scheduler = None
        logger.info("Scheduler stopped")
