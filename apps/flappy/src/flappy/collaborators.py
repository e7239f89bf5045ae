"""
Interfaces the state machine consumes but does not implement.

The host (Panda3D app, headless driver, tests) provides concrete objects. Everything
here is structural: any object with the right methods fits.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Protocol

from flappy.phase import Phase


# Well-known names used for the fallback lookup when a collaborator was not injected.
PLAYER_NAME = "Player"
UI_NAME = "UI"


class PlayerPositionSource(Protocol):
    def player_y(self) -> float: ...


class UIPresenter(Protocol):
    def set_score_text(self, text: str) -> None: ...

    def set_ui_sequence(self, phase: Phase) -> None: ...


class TimeController(Protocol):
    def set_time_scale(self, scale: float) -> None: ...


class SceneLookup(Protocol):
    def find(self, name: str) -> object | None: ...


class ScheduledHandle(Protocol):
    @property
    def cancelled(self) -> bool: ...

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_every(self, interval: float, fn: Callable[[], None], *, name: str) -> ScheduledHandle: ...


@dataclass
class NameRegistry:
    """Name -> object map implementing `SceneLookup`; hosts register their scene objects here."""

    objects: dict[str, object] = field(default_factory=dict)

    def register(self, name: str, obj: object) -> None:
        self.objects[str(name)] = obj

    def find(self, name: str) -> object | None:
        return self.objects.get(str(name))


__all__ = [
    "NameRegistry",
    "PLAYER_NAME",
    "UI_NAME",
    "PlayerPositionSource",
    "SceneLookup",
    "ScheduledHandle",
    "Scheduler",
    "TimeController",
    "UIPresenter",
]
