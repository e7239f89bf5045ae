from __future__ import annotations

import pytest

from flappy.phase import Phase, can_transition


def test_phase_parse_is_case_insensitive() -> None:
    assert Phase.parse("play") is Phase.PLAY
    assert Phase.parse(" PAUSE ") is Phase.PAUSE
    assert Phase.parse("Dead") is Phase.DEAD


def test_phase_parse_rejects_unknown_names() -> None:
    with pytest.raises(ValueError):
        Phase.parse("respawn")


def test_only_dead_is_terminal() -> None:
    assert [p for p in Phase if p.is_terminal] == [Phase.DEAD]


def test_nothing_leaves_dead() -> None:
    for p in Phase:
        assert can_transition(Phase.DEAD, p) is (p is Phase.DEAD)


def test_play_and_pause_toggle_both_ways() -> None:
    assert can_transition(Phase.PLAY, Phase.PAUSE)
    assert can_transition(Phase.PAUSE, Phase.PLAY)


def test_start_cannot_jump_to_pause_and_play_cannot_go_back_to_start() -> None:
    assert not can_transition(Phase.START, Phase.PAUSE)
    assert not can_transition(Phase.PLAY, Phase.START)
    assert not can_transition(Phase.PAUSE, Phase.START)


def test_every_phase_can_reach_dead() -> None:
    assert all(can_transition(p, Phase.DEAD) for p in Phase)
