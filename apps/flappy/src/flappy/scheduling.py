from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable


class ScoreCounter:
    """
    Periodic score process: each `fire()` adds one fixed step.

    The counter does not know about time. Whoever schedules it (a `Scheduler`) decides
    when to fire, which keeps it independent of the frame rate.
    """

    def __init__(self, *, step: int = 1, interval: float = 0.1) -> None:
        if int(step) <= 0:
            raise ValueError(f"score step must be > 0 (got {step})")
        if float(interval) <= 0.0:
            raise ValueError(f"score interval must be > 0 (got {interval})")
        self.step = int(step)
        self.interval = float(interval)
        self._score = 0
        self.fires = 0

    @property
    def score(self) -> int:
        return self._score

    def fire(self) -> None:
        self._score += self.step
        self.fires += 1


@dataclass
class _ManualTask:
    name: str
    interval: float
    fn: Callable[[], None]
    carry: float = 0.0
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class ManualScheduler:
    """
    Deterministic wall-clock scheduler driven by explicit `advance()` calls.

    Used by tests and the headless driver. A task registered with interval `i` fires
    floor(total_elapsed / i) times in total; leftover time carries across calls.
    """

    now: float = 0.0
    _tasks: list[_ManualTask] = field(default_factory=list)

    def call_every(self, interval: float, fn: Callable[[], None], *, name: str) -> _ManualTask:
        if float(interval) <= 0.0:
            raise ValueError(f"interval must be > 0 (got {interval})")
        task = _ManualTask(name=str(name), interval=float(interval), fn=fn)
        self._tasks.append(task)
        return task

    def active_names(self) -> list[str]:
        return [t.name for t in self._tasks if not t.cancelled]

    def advance(self, seconds: float) -> None:
        dt = max(0.0, float(seconds))
        self.now += dt
        for task in list(self._tasks):
            if task.cancelled:
                continue
            task.carry += dt
            # Small epsilon so 10 x 0.1s counts as one full second.
            while task.carry + 1e-9 >= task.interval and not task.cancelled:
                task.carry -= task.interval
                task.fn()
        self._tasks = [t for t in self._tasks if not t.cancelled]


__all__ = ["ManualScheduler", "ScoreCounter"]
