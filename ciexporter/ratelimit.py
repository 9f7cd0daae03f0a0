"""Limits on the rate of requests made to the GitLab API."""

from __future__ import annotations

import logging
import math
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Callable

import redis

log = logging.getLogger(__name__)

_REDIS_KEY = "gcpe:gitlab:api"
_REDIS_KEY_PREFIX = "rate:"


class Limiter(ABC):
    """Something that makes callers wait for their turn to send a request."""

    @abstractmethod
    def take(self) -> float:
        """Block until a request may be sent; return the seconds spent waiting."""


def take(limiter: Limiter) -> None:
    """Wait on *limiter* until a request may be sent."""
    limiter.take()


class LocalLimiter(Limiter):
    """A token bucket shared by the threads of this process.

    The bucket holds at most *burstable_rps* tokens, starts full and refills
    at *maximum_rps* tokens per second.
    """

    def __init__(
        self,
        maximum_rps: float,
        burstable_rps: int,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Any] = time.sleep,
    ) -> None:
        self.rate = float(maximum_rps)
        self.burst = burstable_rps
        self._clock = clock
        self._sleep = sleep
        self._tokens = float(burstable_rps)
        self._last: float | None = None
        self._lock = threading.Lock()

    def _reserve(self) -> float:
        """Take a token, possibly in advance; return how long to wait for it."""
        with self._lock:
            if self.burst < 1:
                raise RuntimeError(f"rate: Wait(n=1) exceeds limiter's burst {self.burst}")
            now = self._clock()
            if self._last is not None and self.rate > 0:
                elapsed = max(0.0, now - self._last)
                self._tokens = min(float(self.burst), self._tokens + elapsed * self.rate)
            self._last = now
            if self.rate <= 0:
                if self._tokens < 1:
                    raise RuntimeError("rate: Wait(n=1) would exceed context deadline")
                self._tokens -= 1
                return 0.0
            self._tokens -= 1
            return -self._tokens / self.rate if self._tokens < 0 else 0.0

    def take(self) -> float:
        start = self._clock()
        wait = self._reserve()
        if wait > 0:
            self._sleep(wait)
        return self._clock() - start


class RedisLimiter(Limiter):
    """A limit shared by every process using the same Redis server.

    It follows the generic cell rate algorithm, allowing *max_rps* requests
    per second with bursts of the same size.
    """

    def __init__(
        self,
        client: redis.Redis,
        max_rps: int,
        *,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Any] = time.sleep,
    ) -> None:
        if max_rps <= 0:
            raise ValueError(f"max_rps must be positive, got {max_rps}")
        self.client = client
        self.max_rps = max_rps
        self._clock = clock
        self._sleep = sleep

    def _allow(self) -> float | None:
        """Try to consume one request; return None if allowed, else the seconds to retry after."""
        key = _REDIS_KEY_PREFIX + _REDIS_KEY
        emission_interval = 1.0 / self.max_rps
        burst_offset = emission_interval * self.max_rps
        with self.client.pipeline() as pipe:
            while True:
                try:
                    pipe.watch(key)
                    now = self._clock()
                    raw = pipe.get(key)
                    tat = max(float(raw), now) if raw is not None else now
                    new_tat = tat + emission_interval
                    diff = now - (new_tat - burst_offset)
                    if diff < 0:
                        return -diff
                    reset_after_ms = max(1, math.ceil((new_tat - now) * 1000))
                    pipe.multi()
                    pipe.set(key, repr(new_tat), px=reset_after_ms)
                    pipe.execute()
                    return None
                except redis.WatchError:
                    continue

    def take(self) -> float:
        start = self._clock()
        while True:
            retry_after = self._allow()
            if retry_after is None:
                break
            log.debug("throttled GitLab requests for %.3fs", retry_after)
            self._sleep(retry_after)
        return self._clock() - start