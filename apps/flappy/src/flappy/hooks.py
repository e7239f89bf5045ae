from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable


@dataclass
class _HookGroup:
    events: list[str] = field(default_factory=list)


class EventHooks:
    """
    Grouped Panda3D `accept`/`ignore` bindings.

    Input for a round (flap, pause, force death) lives in one group so a restart can drop
    it wholesale before the next state machine binds its own.
    """

    def __init__(self, *, base, safe_call: Callable[[str, Callable[[], None]], None]) -> None:
        self._base = base
        self._safe_call = safe_call
        self._groups: dict[str, _HookGroup] = {}

    def bind(self, *, group: str, event: str, context: str, fn: Callable[[], None]) -> None:
        g = self._groups.setdefault(str(group), _HookGroup())
        evt = str(event)
        # Hook exceptions go to the error feed instead of the frame loop.
        self._base.accept(evt, lambda: self._safe_call(str(context), fn))
        g.events.append(evt)

    def bound_events(self, group: str) -> list[str]:
        g = self._groups.get(str(group))
        return list(g.events) if g is not None else []

    def unbind_group(self, group: str) -> None:
        g = self._groups.pop(str(group), None)
        if g is None:
            return
        for evt in g.events:
            self._base.ignore(evt)


__all__ = ["EventHooks"]
