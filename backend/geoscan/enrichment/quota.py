"""Request budget for the remote reputation service."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .base import now_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuotaState:
    used: int
    ceiling: int
    window_started_at: datetime
    exhausted: bool

    @property
    def remaining(self) -> int:
        return 0 if self.exhausted else max(self.ceiling - self.used, 0)


class QuotaGuard:
    """
    Fixed-window budget: at most `ceiling` grants between two resets.

    reset() is driven by its own recurring timer; try_acquire() never looks at
    the clock, so a window can only reopen when that timer fires. Remote quota
    rejections call mark_exhausted() and hold the guard closed until the next
    regular reset.
    """

    def __init__(self, ceiling: int, window_seconds: int, now: Optional[datetime] = None):
        if ceiling < 0:
            raise ValueError("quota ceiling must be >= 0")
        self.ceiling = ceiling
        self.window_seconds = window_seconds
        self._lock = threading.Lock()
        self._used = 0
        self._exhausted = False
        self._window_started_at = now or now_utc()

    def try_acquire(self) -> bool:
        with self._lock:
            if self._exhausted or self._used >= self.ceiling:
                return False
            self._used += 1
            return True

    def reset(self, now: Optional[datetime] = None) -> None:
        with self._lock:
            previous = self._used
            self._used = 0
            self._exhausted = False
            self._window_started_at = now or now_utc()
        logger.info("Reputation quota window reset (%d/%d used in previous window)", previous, self.ceiling)

    def mark_exhausted(self) -> None:
        with self._lock:
            already = self._exhausted
            self._exhausted = True
        if not already:
            logger.warning("Reputation quota marked exhausted until the next window reset")

    @property
    def exhausted(self) -> bool:
        with self._lock:
            return self._exhausted or self._used >= self.ceiling

    def status(self) -> QuotaState:
        with self._lock:
            return QuotaState(
                used=self._used,
                ceiling=self.ceiling,
                window_started_at=self._window_started_at,
                exhausted=self._exhausted or self._used >= self.ceiling,
            )
