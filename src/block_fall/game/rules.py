from __future__ import annotations

from dataclasses import dataclass


@dataclass
class SpeedRules:
    initial_interval: float = 1.0
    speedup_every: int = 5
    speedup_factor: float = 0.98

    def should_speed_up(self, score: int) -> bool:
        return score > 0 and score % self.speedup_every == 0

    def next_interval(self, interval: float, score: int) -> float:
        if self.should_speed_up(score):
            return interval * self.speedup_factor
        return interval
