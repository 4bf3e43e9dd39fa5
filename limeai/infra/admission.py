# limeai/infra/admission.py
# In-process admission control for upstream AI calls.
# Tracks a per-window request quota and a cooldown after rate-limit/auth failures.

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

log = logging.getLogger("limeai.admission")


@dataclass
class AdmissionConfig:
    limit_per_window: int = 20
    window_seconds: float = 60.0
    initial_cooldown_seconds: float = 60.0
    cooldown_growth: float = 1.5
    growth_after_failures: int = 3
    max_cooldown_seconds: float = 600.0


class AdmissionState:
    NORMAL = "normal"
    COOLDOWN = "cooldown"


class AdmissionController:
    """
    Advisory quota for upstream calls.

    Callers ask should_admit() before an upstream call, then report the
    outcome with record_attempt / record_success / record_rate_limited.
    Nothing here raises or performs I/O. Updates are plain read-modify-write;
    concurrent requests may both be admitted at the limit edge.
    """

    def __init__(self, cfg: AdmissionConfig | None = None, clock: Callable[[], float] = time.time):
        self.cfg = cfg or AdmissionConfig()
        self._clock = clock
        self._count = 0
        self._window_reset_at = self._clock() + self.cfg.window_seconds
        self._in_cooldown = False
        self._cooldown_started_at: float | None = None
        self._cooldown_seconds = self.cfg.initial_cooldown_seconds
        self._consecutive_failures = 0

    def should_admit(self) -> bool:
        """May a new upstream call be attempted right now?"""
        now = self._clock()

        if self._in_cooldown:
            if now - self._cooldown_started_at >= self._cooldown_seconds:
                log.info("cooldown_end cooldown_seconds=%s", self._cooldown_seconds)
                self._in_cooldown = False
                self._cooldown_started_at = None
                self._count = 0
                self._window_reset_at = now + self.cfg.window_seconds
                self._consecutive_failures = 0
                return True
            return False

        if now > self._window_reset_at:
            self._count = 0
            self._window_reset_at = now + self.cfg.window_seconds

        return self._count < self.cfg.limit_per_window

    def record_attempt(self) -> None:
        self._count += 1
        log.debug("upstream_attempt count=%d limit=%d", self._count, self.cfg.limit_per_window)

    def record_success(self) -> None:
        self._consecutive_failures = 0

    def record_rate_limited(self) -> None:
        self._cooldown_started_at = self._clock()
        self._in_cooldown = True
        self._consecutive_failures += 1

        # Growth only kicks in past the threshold, counting this hit.
        if self._consecutive_failures > self.cfg.growth_after_failures:
            self._cooldown_seconds = min(
                self._cooldown_seconds * self.cfg.cooldown_growth,
                self.cfg.max_cooldown_seconds,
            )

        log.warning(
            "cooldown_start cooldown_seconds=%s consecutive_failures=%d",
            self._cooldown_seconds,
            self._consecutive_failures,
        )

    @property
    def state(self) -> str:
        return AdmissionState.COOLDOWN if self._in_cooldown else AdmissionState.NORMAL

    @property
    def in_cooldown(self) -> bool:
        return self._in_cooldown

    @property
    def count(self) -> int:
        return self._count

    @property
    def cooldown_seconds(self) -> float:
        return self._cooldown_seconds

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    def next_available(self) -> str:
        """ISO-8601 instant when cooldown ends, or "now"."""
        if not self._in_cooldown or self._cooldown_started_at is None:
            return "now"
        ends = self._cooldown_started_at + self._cooldown_seconds
        return datetime.fromtimestamp(ends, UTC).isoformat()

    def snapshot(self) -> dict[str, Any]:
        return {
            "state": self.state,
            "count": self._count,
            "limit": self.cfg.limit_per_window,
            "in_cooldown": self._in_cooldown,
            "cooldown_seconds": self._cooldown_seconds,
            "consecutive_failures": self._consecutive_failures,
            "next_available": self.next_available(),
        }
