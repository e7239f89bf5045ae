from __future__ import annotations

from enum import Enum


class Phase(Enum):
    """Discrete game mode, listed in progression order."""

    START = "start"
    PLAY = "play"
    PAUSE = "pause"
    DEAD = "dead"

    @classmethod
    def parse(cls, text: str) -> "Phase":
        key = str(text or "").strip().upper()
        try:
            return cls[key]
        except KeyError:
            names = ", ".join(p.name.lower() for p in cls)
            raise ValueError(f"Unknown phase: {text!r} (expected one of: {names})") from None

    @property
    def is_terminal(self) -> bool:
        return self is Phase.DEAD


# Directed edges an external caller may request. Self-edges are always fine except
# out of DEAD, which only maps to itself.
_EDGES: dict[Phase, frozenset[Phase]] = {
    Phase.START: frozenset({Phase.START, Phase.PLAY, Phase.DEAD}),
    Phase.PLAY: frozenset({Phase.PLAY, Phase.PAUSE, Phase.DEAD}),
    Phase.PAUSE: frozenset({Phase.PAUSE, Phase.PLAY, Phase.DEAD}),
    Phase.DEAD: frozenset({Phase.DEAD}),
}


def can_transition(src: Phase, dst: Phase) -> bool:
    return dst in _EDGES[src]


__all__ = ["Phase", "can_transition"]
