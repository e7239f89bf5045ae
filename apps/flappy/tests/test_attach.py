from __future__ import annotations

import logging

import pytest

from flappy.common.error_log import ErrorLog
from flappy.errors import CollaboratorMissingError, NotAttachedError
from flappy.collaborators import NameRegistry
from flappy.headless import RecordingPresenter
from flappy.phase import Phase
from flappy.scheduling import ManualScheduler
from flappy.state_machine import GameStateMachine


class _PlayerStub:
    def __init__(self, y: float = 0.0) -> None:
        self.y = y

    def player_y(self) -> float:
        return self.y


def test_attach_discovers_collaborators_by_name(caplog: pytest.LogCaptureFixture) -> None:
    registry = NameRegistry()
    player = _PlayerStub()
    ui = RecordingPresenter()
    registry.register("Player", player)
    registry.register("UI", ui)

    with caplog.at_level(logging.INFO, logger="flappy.state_machine"):
        sm = GameStateMachine(scheduler=ManualScheduler(), lookup=registry).attach()

    assert sm.attached
    assert sm.position_source is player
    assert sm.ui is ui
    assert "'Player' found" in caplog.text
    assert "'UI' found" in caplog.text


def test_injected_collaborators_skip_lookup() -> None:
    class _ExplodingLookup:
        def find(self, name: str) -> object | None:
            raise AssertionError(f"unexpected lookup for {name}")

    sm = GameStateMachine(
        position_source=_PlayerStub(),
        ui=RecordingPresenter(),
        scheduler=ManualScheduler(),
        lookup=_ExplodingLookup(),
    ).attach()
    assert sm.attached


def test_attach_fails_closed_when_player_is_missing() -> None:
    registry = NameRegistry()
    registry.register("UI", RecordingPresenter())
    errors = ErrorLog()
    sm = GameStateMachine(scheduler=ManualScheduler(), lookup=registry, error_log=errors)

    with pytest.raises(CollaboratorMissingError) as exc_info:
        sm.attach()

    assert exc_info.value.missing == ["position_source"]
    assert not sm.attached
    assert errors.contexts() == ["state_machine.attach"]
    with pytest.raises(NotAttachedError):
        sm.tick(0.016)


def test_attach_rejects_objects_without_the_expected_interface() -> None:
    registry = NameRegistry()
    registry.register("Player", object())
    registry.register("UI", _PlayerStub())
    sm = GameStateMachine(scheduler=ManualScheduler(), lookup=registry)

    with pytest.raises(CollaboratorMissingError) as exc_info:
        sm.attach()

    assert exc_info.value.missing == ["position_source", "ui"]


def test_attach_without_lookup_or_scheduler_reports_everything_missing() -> None:
    sm = GameStateMachine()
    with pytest.raises(CollaboratorMissingError) as exc_info:
        sm.attach()
    assert exc_info.value.missing == ["position_source", "ui", "scheduler"]


def test_attach_starts_score_counter_once_and_detach_cancels_it() -> None:
    sched = ManualScheduler()
    sm = GameStateMachine(position_source=_PlayerStub(), ui=RecordingPresenter(), scheduler=sched)

    sm.attach()
    sm.attach()
    assert sched.active_names() == ["score-counter"]

    sched.advance(0.5)
    score = sm.score
    assert score == 5

    sm.detach()
    sm.detach()
    sched.advance(10.0)
    assert sm.score == score
    assert sched.active_names() == []
    assert not sm.attached


def test_phase_changes_work_before_attach_but_tick_does_not() -> None:
    sm = GameStateMachine(position_source=_PlayerStub(), scheduler=ManualScheduler())
    assert sm.set_phase(Phase.PLAY) is True
    assert sm.is_dead() is False
    with pytest.raises(NotAttachedError):
        sm.tick(0.016)


def test_is_dead_without_any_position_needs_a_source() -> None:
    sm = GameStateMachine()
    with pytest.raises(NotAttachedError):
        sm.is_dead()
    assert sm.is_dead(1.0) is False
    sm.set_dead()
    assert sm.is_dead() is True
