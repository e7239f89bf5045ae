from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from flappy.app_config import GameConfig
from flappy.collaborators import (
    PLAYER_NAME,
    UI_NAME,
    PlayerPositionSource,
    SceneLookup,
    ScheduledHandle,
    Scheduler,
    TimeController,
    UIPresenter,
)
from flappy.common.error_log import ErrorLog
from flappy.errors import CollaboratorMissingError, NotAttachedError
from flappy.phase import Phase, can_transition
from flappy.scheduling import ScoreCounter

logger = logging.getLogger(__name__)

PAUSED_TEXT = "Paused"


@dataclass(frozen=True)
class TickOutcome:
    phase: Phase
    # True only on the tick that moved PLAY -> DEAD.
    died: bool = False
    # Time-scale request for the external timing authority (0.0 while paused).
    time_scale: float | None = None


@dataclass(frozen=True)
class DebugLine:
    start: tuple[float, float, float]
    end: tuple[float, float, float]


def _looks_like_position_source(obj: object) -> bool:
    return callable(getattr(obj, "player_y", None))


def _looks_like_presenter(obj: object) -> bool:
    return callable(getattr(obj, "set_score_text", None)) and callable(getattr(obj, "set_ui_sequence", None))


class GameStateMachine:
    """
    Game phase holder: START -> PLAY <-> PAUSE, and DEAD from anywhere.

    DEAD is terminal; a new round means a new instance. The score comes from a periodic
    `ScoreCounter` started once by `attach()`; `tick()` only surfaces it while playing.
    """

    def __init__(
        self,
        *,
        config: GameConfig | None = None,
        position_source: PlayerPositionSource | None = None,
        ui: UIPresenter | None = None,
        time_controller: TimeController | None = None,
        scheduler: Scheduler | None = None,
        lookup: SceneLookup | None = None,
        error_log: ErrorLog | None = None,
    ) -> None:
        self.config = (config or GameConfig()).validate()
        self.phase: Phase = self.config.initial_phase
        self.position_source = position_source
        self.ui = ui
        self.time_controller = time_controller
        self.scheduler = scheduler
        self.lookup = lookup
        self.error_log = error_log if error_log is not None else ErrorLog()
        self.debug_enabled: bool = bool(self.config.debug_enabled)
        self.play_time = 0.0
        self._counter = ScoreCounter(step=self.config.score_step, interval=self.config.score_interval)
        self._score_handle: ScheduledHandle | None = None
        self._attached = False

    @property
    def score(self) -> int:
        return self._counter.score

    @property
    def attached(self) -> bool:
        return self._attached

    @property
    def death_boundary(self) -> float:
        return float(self.config.death_boundary)

    # ── lifecycle ───────────────────────────────────────────

    def attach(self) -> "GameStateMachine":
        if self._attached:
            return self

        if self.position_source is None:
            self.position_source = self._discover(PLAYER_NAME, _looks_like_position_source)
        if self.ui is None:
            self.ui = self._discover(UI_NAME, _looks_like_presenter)

        missing: list[str] = []
        if self.position_source is None:
            missing.append("position_source")
        if self.ui is None:
            missing.append("ui")
        if self.scheduler is None:
            missing.append("scheduler")
        if missing:
            err = CollaboratorMissingError(missing)
            self.error_log.log_message(
                context="state_machine.attach",
                message=f"{err}; state machine disabled",
            )
            raise err

        self._score_handle = self.scheduler.call_every(
            self.config.score_interval,
            self._counter.fire,
            name="score-counter",
        )
        self._attached = True
        logger.debug(
            "Attached: boundary=%.2f score_step=%d interval=%.3fs",
            self.death_boundary,
            self.config.score_step,
            self.config.score_interval,
        )
        return self

    def detach(self) -> None:
        handle = self._score_handle
        self._score_handle = None
        if handle is not None and not handle.cancelled:
            handle.cancel()
        self._attached = False

    def _discover(self, name: str, accepts: Callable[[object], bool]) -> object | None:
        logger.info("%s collaborator was not provided; looking it up by name", name)
        if self.lookup is None:
            logger.warning("No scene lookup available to locate %r", name)
            return None
        found = self.lookup.find(name)
        if found is None:
            logger.warning("No object named %r was found", name)
            return None
        if not accepts(found):
            logger.warning("Object named %r does not provide the expected interface", name)
            return None
        logger.info("Object named %r found and is now used by the state machine", name)
        return found

    def _require_attached(self) -> None:
        if not self._attached:
            raise NotAttachedError("GameStateMachine.attach() must succeed before ticking")

    # ── queries ─────────────────────────────────────────────

    def _read_player_y(self, player_y: float | None) -> float:
        if player_y is not None:
            return float(player_y)
        if self.position_source is None:
            raise NotAttachedError("No player position given and no position source attached")
        return float(self.position_source.player_y())

    def is_dead(self, player_y: float | None = None) -> bool:
        if self.phase is Phase.DEAD:
            return True
        return abs(self._read_player_y(player_y)) > self.death_boundary

    def debug_lines(self, player_y: float | None = None) -> list[DebugLine]:
        if not self.debug_enabled or self.is_dead(player_y):
            return []
        w = float(self.config.debug_line_width)
        b = self.death_boundary
        return [
            DebugLine(start=(w, b, 0.0), end=(-w, b, 0.0)),
            DebugLine(start=(w, -b, 0.0), end=(-w, -b, 0.0)),
        ]

    # ── updates ─────────────────────────────────────────────

    def tick(self, dt: float, player_y: float | None = None) -> TickOutcome:
        self._require_attached()
        ui = self.ui
        assert ui is not None

        if self.phase is Phase.START:
            return TickOutcome(phase=self.phase)

        if self.phase is Phase.PLAY:
            self.play_time += max(0.0, float(dt))
            ui.set_score_text(f"Score: {self.score}")
            if self.is_dead(player_y):
                self.phase = Phase.DEAD
                logger.info("Player is dead (score %d, %.1fs played)", self.score, self.play_time)
                ui.set_ui_sequence(Phase.DEAD)
                return TickOutcome(phase=self.phase, died=True)
            return TickOutcome(phase=self.phase)

        if self.phase is Phase.PAUSE:
            ui.set_score_text(PAUSED_TEXT)
            self._signal_time_scale(0.0)
            ui.set_ui_sequence(Phase.PAUSE)
            return TickOutcome(phase=self.phase, time_scale=0.0)

        ui.set_ui_sequence(Phase.DEAD)
        return TickOutcome(phase=self.phase)

    def set_dead(self) -> None:
        if self.phase is Phase.DEAD:
            return
        prev = self.phase
        self.phase = Phase.DEAD
        logger.info("Player forced dead from %s", prev.name)
        if prev is Phase.PAUSE:
            self._signal_time_scale(1.0)
        if self.ui is not None:
            self.ui.set_ui_sequence(Phase.DEAD)

    def set_phase(self, phase: Phase | str) -> bool:
        """
        External transition request (input, menus). Returns False when rejected.

        Leaving DEAD is always rejected. Moving into DEAD behaves like `set_dead()`.
        """

        target = phase if isinstance(phase, Phase) else Phase.parse(phase)
        current = self.phase
        if target is current:
            return True
        if not can_transition(current, target):
            logger.warning("Rejected phase transition %s -> %s", current.name, target.name)
            return False
        if target is Phase.DEAD:
            self.set_dead()
            return True

        self.phase = target
        if target is Phase.PAUSE:
            self._signal_time_scale(0.0)
        elif current is Phase.PAUSE:
            self._signal_time_scale(1.0)
        if self.ui is not None:
            self.ui.set_ui_sequence(target)
        return True

    def toggle_pause(self) -> bool:
        if self.phase is Phase.PLAY:
            return self.set_phase(Phase.PAUSE)
        if self.phase is Phase.PAUSE:
            return self.set_phase(Phase.PLAY)
        return False

    def _signal_time_scale(self, scale: float) -> None:
        if self.time_controller is not None:
            self.time_controller.set_time_scale(float(scale))


__all__ = ["DebugLine", "GameStateMachine", "PAUSED_TEXT", "TickOutcome"]
