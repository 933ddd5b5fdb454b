import asyncio
import time
from typing import Callable, List

from feedbeep.services.logger import logger


class RateLimiter:
    """
    Sliding-window admission gate: at most max_requests calls in any trailing
    window of time_window seconds. Knows nothing about what it is limiting.

    Pruning and appending happen between await points, so concurrent
    coroutines on one event loop cannot interleave inside them.
    """

    def __init__(self, max_requests: int = 10, time_window: float = 60.0,
                 safety_margin: float = 0.1, clock: Callable[[], float] = time.monotonic,
                 name: str = "default"):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        self.max_requests = max_requests
        self.time_window = time_window
        self.safety_margin = safety_margin
        self.name = name
        self._clock = clock
        self._requests: List[float] = []

    def _prune(self, now: float):
        self._requests = [t for t in self._requests if now - t < self.time_window]

    def can_proceed(self) -> bool:
        self._prune(self._clock())
        return len(self._requests) < self.max_requests

    def record(self):
        self._requests.append(self._clock())

    def current_count(self) -> int:
        self._prune(self._clock())
        return len(self._requests)

    def time_until_next_slot(self) -> float:
        if self.can_proceed():
            return 0.0
        now = self._clock()
        return max(0.0, self.time_window - (now - min(self._requests)))

    async def await_slot(self):
        """Suspend until can_proceed() holds. Re-checks after every wake-up."""
        while not self.can_proceed():
            wait = self.time_until_next_slot()
            if wait > 0:
                logger.debug(f"Rate limiter [{self.name}] full, waiting {wait + self.safety_margin:.2f}s")
                await asyncio.sleep(wait + self.safety_margin)
            else:
                await asyncio.sleep(0)

    async def acquire(self):
        """Wait for a slot and claim it."""
        await self.await_slot()
        self.record()
