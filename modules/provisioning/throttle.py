"""
Throttle for outbound provisioning calls.

Token bucket: tokens refill at `rate` per second up to `burst`. Each
remote create-user call takes one token and waits until one is available.
With rate=1 and burst=1 this spaces calls one second apart.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


class ProvisioningThrottle:
    """
    Awaitable token bucket.

    Unlike a limiter that rejects callers when empty, acquire() always
    succeeds eventually; it sleeps for the computed refill time instead.
    The clock and sleep functions are injectable for tests.
    """

    def __init__(
        self,
        rate: float,
        burst: int = 1,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if rate <= 0:
            raise ValueError("rate must be positive")
        if burst < 1:
            raise ValueError("burst must be at least 1")

        self.rate = rate
        self.burst = burst
        self._clock = clock
        self._sleep = sleep
        self._tokens = float(burst)
        self._last_update = clock()

    def _refill(self) -> None:
        """Refill tokens based on elapsed time."""
        now = self._clock()
        elapsed = now - self._last_update
        self._tokens = min(float(self.burst), self._tokens + elapsed * self.rate)
        self._last_update = now

    @property
    def available_tokens(self) -> float:
        self._refill()
        return self._tokens

    async def acquire(self) -> float:
        """
        Take one token, waiting for it if necessary.

        Returns:
            Seconds spent waiting.
        """
        waited = 0.0
        while True:
            self._refill()
            if self._tokens >= 1:
                self._tokens -= 1
                return waited
            wait_time = (1 - self._tokens) / self.rate
            logger.debug(f"Provisioning throttled, waiting {wait_time:.2f}s")
            await self._sleep(wait_time)
            waited += wait_time
