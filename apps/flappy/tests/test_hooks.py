from __future__ import annotations

from typing import Callable

from flappy.hooks import EventHooks


class _FakeBase:
    def __init__(self) -> None:
        self.accepted: dict[str, Callable[[], None]] = {}
        self.ignored: list[str] = []

    def accept(self, event: str, fn: Callable[[], None]) -> None:
        self.accepted[event] = fn

    def ignore(self, event: str) -> None:
        self.ignored.append(event)
        self.accepted.pop(event, None)


def test_bound_events_route_through_safe_call() -> None:
    base = _FakeBase()
    calls: list[str] = []

    def _safe_call(context: str, fn: Callable[[], None]) -> None:
        calls.append(context)
        fn()

    hooks = EventHooks(base=base, safe_call=_safe_call)
    flapped: list[int] = []
    hooks.bind(group="round", event="space", context="input.flap", fn=lambda: flapped.append(1))

    base.accepted["space"]()

    assert calls == ["input.flap"]
    assert flapped == [1]


def test_unbind_group_drops_only_that_group() -> None:
    base = _FakeBase()
    hooks = EventHooks(base=base, safe_call=lambda _ctx, fn: fn())
    hooks.bind(group="round", event="space", context="a", fn=lambda: None)
    hooks.bind(group="round", event="p", context="b", fn=lambda: None)
    hooks.bind(group="app", event="f12", context="c", fn=lambda: None)

    hooks.unbind_group("round")
    hooks.unbind_group("round")

    assert sorted(base.ignored) == ["p", "space"]
    assert list(base.accepted) == ["f12"]
    assert hooks.bound_events("round") == []
    assert hooks.bound_events("app") == ["f12"]
