"""
Round-trip latency estimation for adaptive debouncing.
"""

from typing import Optional


class LatencyEstimator:
    """
    Running estimate of provider round-trip time in milliseconds.

    The first ``warmup`` samples are averaged arithmetically so a single slow
    first request does not skew the estimate; afterwards the estimate follows
    an exponential moving average with factor ``2 / (window + 1)``.
    """

    def __init__(self, window: int = 10, warmup: int = 10, initial_ms: float = 50.0):
        self.window = window
        self.warmup = warmup
        self._count = 0
        self._sum = 0.0
        self._value = float(initial_ms)

    @property
    def estimate(self) -> float:
        return self._value

    @property
    def warmed_up(self) -> bool:
        return self._count >= self.warmup

    def observe(self, sample_ms: float) -> float:
        """Feed one round-trip sample and return the updated estimate."""
        if self._count < self.warmup:
            self._count += 1
            self._sum += sample_ms
            self._value = self._sum / self._count
        else:
            factor = 2.0 / (self.window + 1)
            self._value = self._value * (1 - factor) + sample_ms * factor
        return self._value


def next_debounce(estimate_ms: float, last_request_ms: Optional[float], now_ms: float) -> float:
    """
    Delay before a continuation request.

    Waits out whatever remains of one estimated round trip since the last
    request; with no previous request, waits a full round trip.
    """
    if last_request_ms is None:
        return estimate_ms
    since_request = now_ms - last_request_ms
    return max(estimate_ms - since_request, 0.0)
