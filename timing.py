# Author      : Tyson Limato
# Date        : 2025-7-2
# File Name   : timing.py
import time


class RoundTimer:
    """
    Measures one round's wall-clock time on the local process.

    `start()` is called right before the integration step and `stop()` right
    after the reduction returns. Readings from different ranks are never
    comparable, so only the coordinator's elapsed time is ever reported.
    """

    def __init__(self, clock=time.perf_counter):
        self.clock = clock
        self._start = None

    def now(self) -> float:
        return self.clock()

    def start(self) -> float:
        self._start = self.now()
        return self._start

    def stop(self) -> float:
        """Return the seconds elapsed since `start()`."""
        if self._start is None:
            raise RuntimeError("RoundTimer.stop() called before start()")
        elapsed = self.now() - self._start
        self._start = None
        return elapsed
