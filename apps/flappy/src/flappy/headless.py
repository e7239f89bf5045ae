from __future__ import annotations

import logging
from dataclasses import dataclass, field

from flappy.app_config import GameConfig
from flappy.bird import BirdBody, Tuning
from flappy.collaborators import PLAYER_NAME, UI_NAME, NameRegistry
from flappy.common.error_log import ErrorLog
from flappy.phase import Phase
from flappy.scheduling import ManualScheduler
from flappy.state_machine import GameStateMachine

logger = logging.getLogger(__name__)


@dataclass
class RecordingPresenter:
    score_texts: list[str] = field(default_factory=list)
    sequences: list[Phase] = field(default_factory=list)

    def set_score_text(self, text: str) -> None:
        self.score_texts.append(str(text))

    def set_ui_sequence(self, phase: Phase) -> None:
        self.sequences.append(phase)


@dataclass
class TimeScale:
    value: float = 1.0

    def set_time_scale(self, scale: float) -> None:
        self.value = float(scale)


@dataclass(frozen=True)
class HeadlessResult:
    phase: Phase
    score: int
    frames: int
    play_time: float
    final_y: float
    last_score_text: str | None


def run_headless(
    *,
    config: GameConfig | None = None,
    tuning: Tuning | None = None,
    dt: float = 1.0 / 60.0,
    max_seconds: float = 10.0,
    flap_every: float | None = None,
    error_log: ErrorLog | None = None,
) -> HeadlessResult:
    """
    Play one round without a window: start, optionally flap on a fixed cadence, stop on death.

    Collaborators are found through a `NameRegistry` the same way the windowed host
    registers its scene objects.
    """

    if dt <= 0.0:
        raise ValueError(f"dt must be > 0 (got {dt})")
    bird = BirdBody(tuning=tuning or Tuning())
    ui = RecordingPresenter()
    clock = TimeScale()
    registry = NameRegistry()
    registry.register(PLAYER_NAME, bird)
    registry.register(UI_NAME, ui)
    scheduler = ManualScheduler()

    sm = GameStateMachine(
        config=config,
        time_controller=clock,
        scheduler=scheduler,
        lookup=registry,
        error_log=error_log,
    ).attach()

    frames = 0
    since_flap = 0.0
    try:
        sm.set_phase(Phase.PLAY)
        max_frames = int(max_seconds / dt)
        while frames < max_frames:
            frames += 1
            if flap_every is not None:
                since_flap += dt
                if since_flap >= flap_every:
                    since_flap = 0.0
                    bird.flap()
            bird.step(dt, time_scale=clock.value)
            scheduler.advance(dt)
            if sm.tick(dt).phase is Phase.DEAD:
                break
    finally:
        sm.detach()

    logger.info("Headless round ended in %s after %d frames, score %d", sm.phase.name, frames, sm.score)
    return HeadlessResult(
        phase=sm.phase,
        score=sm.score,
        frames=frames,
        play_time=sm.play_time,
        final_y=bird.y,
        last_score_text=ui.score_texts[-1] if ui.score_texts else None,
    )


__all__ = ["HeadlessResult", "RecordingPresenter", "TimeScale", "run_headless"]
