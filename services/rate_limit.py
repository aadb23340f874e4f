"""
Request Pacing.

Spaces out calls to the transcoding service: a fixed delay plus uniform
random jitter between consecutive calls, and a longer backoff after the
service reports throttling. Sleep and randomness are injected so tests
can record pauses instead of waiting.

Exports:
    RequestPacer: Delay-plus-jitter pacer
"""

import random
import time
from typing import Callable, List, Optional

from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "RequestPacer")


class RequestPacer:
    """
    Delay-plus-jitter pacer.

    Usage:
        pacer = RequestPacer(delay=0.5, jitter=0.5)
        for asset in window:
            submit(asset)
            pacer.pause()
    """

    def __init__(
        self,
        delay: float,
        jitter: float = 0.0,
        sleep: Callable[[float], None] = time.sleep,
        rng: Optional[random.Random] = None
    ):
        if delay < 0 or jitter < 0:
            raise ValueError(f"delay and jitter must be non-negative (got {delay}, {jitter})")
        self.delay = delay
        self.jitter = jitter
        self._sleep = sleep
        self._rng = rng or random.Random()
        self.pauses: List[float] = []

    def next_interval(self) -> float:
        """Delay plus a uniform draw from [0, jitter]."""
        if self.jitter <= 0:
            return self.delay
        return self.delay + self._rng.uniform(0, self.jitter)

    def pause(self) -> float:
        """Sleep for one interval and return how long it was."""
        return self.wait(self.next_interval())

    def backoff(self, seconds: float) -> float:
        """Sleep after a throttling response."""
        logger.info(f"⏳ Backing off {seconds:.1f}s after rate limit")
        return self.wait(seconds)

    def wait(self, seconds: float) -> float:
        if seconds > 0:
            self._sleep(seconds)
        self.pauses.append(seconds)
        return seconds
