from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Tuning:
    gravity: float = 18.0
    flap_speed: float = 6.5
    max_fall_speed: float = 12.0


@dataclass
class BirdBody:
    """Vertical-only bird physics. The x axis is fixed; the world scrolls instead."""

    tuning: Tuning
    y: float = 0.0
    vy: float = 0.0

    def player_y(self) -> float:
        return float(self.y)

    def flap(self) -> None:
        self.vy = self.tuning.flap_speed

    def step(self, dt: float, *, time_scale: float = 1.0) -> None:
        sdt = max(0.0, float(dt)) * max(0.0, float(time_scale))
        if sdt <= 0.0:
            return
        self.vy = max(-self.tuning.max_fall_speed, self.vy - self.tuning.gravity * sdt)
        self.y += self.vy * sdt

    def reset(self) -> None:
        self.y = 0.0
        self.vy = 0.0
