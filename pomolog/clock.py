"""One-second tick source for the countdown loop."""

import time
from typing import Callable, Optional


class Clock:
    """Deadline-based tick source.

    Each call to ``wait()`` returns at the next tick boundary, measured from
    the previous boundary rather than from the call, so time spent rendering
    and polling between ticks does not accumulate as drift.
    """

    def __init__(
        self,
        interval: float = 1.0,
        monotonic: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.interval = interval
        self._monotonic = monotonic
        self._sleep = sleep
        self._deadline: Optional[float] = None

    def reset(self) -> None:
        """Start a fresh tick interval from now."""
        self._deadline = self._monotonic() + self.interval

    def wait(self) -> None:
        """Block until the next tick boundary."""
        if self._deadline is None:
            self.reset()

        delay = self._deadline - self._monotonic()
        if delay > 0:
            self._sleep(delay)

        self._deadline += self.interval
        # Fell behind by more than a whole tick (e.g. suspended laptop)
        now = self._monotonic()
        if self._deadline < now:
            self._deadline = now + self.interval
