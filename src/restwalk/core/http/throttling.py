"""
Admission control for outgoing requests.

A fixed pool of permits bounds how many requests may be issued in one
burst. Every granted permit returns to the pool on its own timer, after
a cooldown derived from the configured requests-per-second ceiling, so
the sustained rate never exceeds that ceiling.
"""

from __future__ import annotations

import asyncio
import logging

logger = logging.getLogger(__name__)


# How many requests can go out at once before waiting for a cooldown
BATCH_THRESHOLD = 5
DEFAULT_MAX_REQUESTS_PER_SECOND = 10


class AdmissionGate:
    """Counting permit pool with timed permit release.

    Features:
    - At most ``batch_threshold`` permits cooling down at any instant
    - Cooldown computed per grant from the current rate ceiling
    - Release scheduled on the event loop, independent of request completion
    """

    def __init__(
        self,
        max_requests_per_second: int = DEFAULT_MAX_REQUESTS_PER_SECOND,
        batch_threshold: int = BATCH_THRESHOLD,
    ):
        """Initialize admission gate.

        Args:
            max_requests_per_second: Rate ceiling imposed by the remote service
            batch_threshold: Number of permits in the pool
        """
        if batch_threshold < 1:
            raise ValueError("batch_threshold must be positive")

        self.batch_threshold = batch_threshold
        self.max_requests_per_second = max_requests_per_second

        self._semaphore = asyncio.Semaphore(batch_threshold)
        self._cooling = 0
        self._granted = 0

    @property
    def max_requests_per_second(self) -> int:
        """Requests-per-second ceiling, read on every grant."""
        return self._max_requests_per_second

    @max_requests_per_second.setter
    def max_requests_per_second(self, value: int) -> None:
        if value <= 0:
            raise ValueError("max_requests_per_second must be positive")
        self._max_requests_per_second = value

    @property
    def cooldown(self) -> float:
        """Seconds a permit granted now stays out of the pool."""
        return self.batch_threshold / float(self._max_requests_per_second)

    @property
    def cooling(self) -> int:
        """Number of permits currently waiting for their release."""
        return self._cooling

    async def acquire(self) -> float:
        """Wait for a permit and schedule its release.

        Does not wait for the release itself; the caller proceeds with
        its request as soon as the permit is granted.

        Returns:
            Cooldown in seconds applied to the granted permit
        """
        if self._semaphore.locked():
            logger.debug(
                "All %d permits cooling down, waiting for release",
                self.batch_threshold,
            )
        await self._semaphore.acquire()

        delay = self.cooldown
        self._cooling += 1
        self._granted += 1
        asyncio.get_running_loop().call_later(delay, self._release)

        return delay

    def _release(self) -> None:
        self._cooling -= 1
        self._semaphore.release()

    def stats(self) -> dict[str, float | int]:
        """Get gate statistics."""
        return {
            "batch_threshold": self.batch_threshold,
            "max_requests_per_second": self._max_requests_per_second,
            "cooldown_seconds": self.cooldown,
            "cooling": self._cooling,
            "granted": self._granted,
        }
