"""
Timer and deferral capability used by the trigger controller.
"""

import asyncio
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional


class Scheduler(ABC):
    """
    Schedules callbacks on the single completion thread of control.

    Implementations must run callbacks on the same loop that runs provider
    requests.
    """

    @abstractmethod
    def after(self, delay_ms: float, fn: Callable[[], None]) -> Any:
        """Run ``fn`` once after ``delay_ms``; returns a token for cancel()."""
        pass

    @abstractmethod
    def soon(self, fn: Callable[[], None]) -> Any:
        """Run ``fn`` on the next loop turn; returns a token for cancel()."""
        pass

    @abstractmethod
    def cancel(self, token: Any) -> None:
        """Cancel a scheduled callback. Unknown or fired tokens are ignored."""
        pass


class AsyncioScheduler(Scheduler):
    """Scheduler on top of an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def after(self, delay_ms: float, fn: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(max(delay_ms, 0) / 1000.0, fn)

    def soon(self, fn: Callable[[], None]) -> asyncio.Handle:
        return self.loop.call_soon(fn)

    def cancel(self, token: Any) -> None:
        if token is not None:
            token.cancel()


def monotonic_ms() -> float:
    """Default clock: monotonic time in milliseconds."""
    return time.monotonic() * 1000.0
