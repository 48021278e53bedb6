from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Dict, Optional

from .interfaces import Callback


@dataclass
class _Timer:
    interval: float
    due: float
    callback: Callback


class ManualScheduler:
    """Periodic scheduler driven by an explicit clock.

    Time only moves when ``advance`` is called, which makes tick-driven play
    reproducible in tests and in the gymnasium environment.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._timers: Dict[int, _Timer] = {}
        self._ids = itertools.count(1)

    def schedule(self, interval: float, callback: Callback) -> int:
        if interval <= 0:
            raise ValueError(f"Interval must be positive, got {interval}")
        handle = next(self._ids)
        self._timers[handle] = _Timer(interval, self.now + interval, callback)
        return handle

    def cancel(self, handle: int) -> None:
        self._timers.pop(handle, None)

    @property
    def active(self) -> int:
        return len(self._timers)

    def interval_of(self, handle: int) -> Optional[float]:
        timer = self._timers.get(handle)
        return timer.interval if timer else None

    def advance(self, seconds: float) -> int:
        """Run every callback that falls due within ``seconds``; return how many fired."""
        target = self.now + seconds
        fired = 0
        while self._timers:
            handle, timer = min(self._timers.items(), key=lambda item: (item[1].due, item[0]))
            if timer.due > target:
                break
            self.now = timer.due
            timer.callback()
            fired += 1
            # The callback may have cancelled or replaced its own timer.
            if self._timers.get(handle) is timer:
                timer.due += timer.interval
        self.now = target
        return fired
