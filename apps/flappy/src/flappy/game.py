from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Callable

from direct.gui.OnscreenText import OnscreenText
from direct.showbase.ShowBase import ShowBase
from panda3d.core import (
    AmbientLight,
    ClockObject,
    DirectionalLight,
    LineSegs,
    LVector4,
    NodePath,
    TextNode,
    loadPrcFileData,
)

from flappy.app_config import GameConfig, RunConfig, load_game_config
from flappy.bird import BirdBody, Tuning
from flappy.collaborators import PLAYER_NAME, UI_NAME, NameRegistry
from flappy.common.error_log import ErrorLog
from flappy.errors import CollaboratorMissingError
from flappy.hooks import EventHooks
from flappy.paths import default_settings_path
from flappy.phase import Phase
from flappy.state_machine import DebugLine, GameStateMachine

logger = logging.getLogger(__name__)

_BANNERS = {
    Phase.START: "Press SPACE to start",
    Phase.PLAY: "",
    Phase.PAUSE: "Paused - press P to resume",
    Phase.DEAD: "Game over - press R to restart",
}


class _PandaHandle:
    def __init__(self, task_mgr, task) -> None:  # type: ignore[no-untyped-def]
        self._task_mgr = task_mgr
        self._task = task
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._task_mgr.remove(self._task)


class PandaScheduler:
    """`Scheduler` on top of `taskMgr.doMethodLater`; runs on real time, not the game time scale."""

    def __init__(self, task_mgr) -> None:  # type: ignore[no-untyped-def]
        self._task_mgr = task_mgr

    def call_every(self, interval: float, fn: Callable[[], None], *, name: str) -> _PandaHandle:
        def _fire(task):  # type: ignore[no-untyped-def]
            fn()
            return task.again

        task = self._task_mgr.doMethodLater(float(interval), _fire, str(name))
        return _PandaHandle(self._task_mgr, task)


class HudPresenter:
    def __init__(self, *, parent: NodePath) -> None:
        self._score = OnscreenText(
            text="",
            parent=parent,
            pos=(-1.30, 0.88),
            align=TextNode.ALeft,
            scale=0.07,
            fg=(1, 1, 1, 1),
            shadow=(0, 0, 0, 0.6),
        )
        self._banner = OnscreenText(
            text=_BANNERS[Phase.START],
            parent=parent,
            pos=(0.0, 0.0),
            align=TextNode.ACenter,
            scale=0.08,
            fg=(1, 0.9, 0.4, 1),
            shadow=(0, 0, 0, 0.6),
        )
        self._errors = OnscreenText(
            text="",
            parent=parent,
            pos=(-1.30, -0.90),
            align=TextNode.ALeft,
            scale=0.04,
            fg=(1, 0.4, 0.4, 1),
        )
        self.phase = Phase.START

    def set_score_text(self, text: str) -> None:
        self._score.setText(str(text))

    def set_ui_sequence(self, phase: Phase) -> None:
        self.phase = phase
        self._banner.setText(_BANNERS.get(phase, ""))

    def set_error_text(self, text: str) -> None:
        self._errors.setText(str(text))


class FlappyApp(ShowBase):
    def __init__(self, cfg: RunConfig) -> None:
        loadPrcFileData("", "audio-library-name null")
        if cfg.smoke:
            loadPrcFileData("", "window-type offscreen")

        super().__init__()

        self.disableMouse()
        self.cfg = cfg
        self.settings_path = cfg.settings_path or default_settings_path()
        self.game_config = self._load_config()
        self.error_log = ErrorLog()
        self.time_scale = 1.0
        self.bird = BirdBody(tuning=Tuning())
        self.hooks = EventHooks(base=self, safe_call=self._safe_call)
        self.lookup = NameRegistry()
        self.state: GameStateMachine | None = None
        self._debug_np: NodePath | None = None
        self._debug_key: tuple[tuple[float, float, float], ...] | None = None

        self._setup_scene()
        self.hud = HudPresenter(parent=self.aspect2d)
        self.lookup.register(PLAYER_NAME, self.bird)
        self.lookup.register(UI_NAME, self.hud)

        self._new_round()
        self.taskMgr.add(self._update, "update-loop")

        if cfg.smoke:
            self._frames_left = 8
            if self.state is not None:
                self.state.set_phase(Phase.PLAY)
            self.taskMgr.add(self._smoke_task, "smoke-exit")

    def _load_config(self) -> GameConfig:
        cfg = load_game_config(self.settings_path)
        if self.cfg.debug is not None:
            cfg = replace(cfg, debug_enabled=bool(self.cfg.debug))
        return cfg

    def _setup_scene(self) -> None:
        self.setBackgroundColor(0.44, 0.77, 0.81, 1)

        self.player_model = self.loader.loadModel("models/box")
        self.player_model.setName(PLAYER_NAME)
        self.player_model.reparentTo(self.render)
        self.player_model.setScale(0.5)
        self.player_model.setColor(1.0, 0.85, 0.1, 1)

        # Side view: the bird's vertical axis is Panda's z.
        self.camera.setPos(0, -30, 0)
        self.camera.lookAt(0, 0, 0)

        ambient = AmbientLight("ambient")
        ambient.setColor(LVector4(0.35, 0.35, 0.35, 1))
        self.render.setLight(self.render.attachNewNode(ambient))

        sun = DirectionalLight("sun")
        sun.setColor(LVector4(0.9, 0.9, 0.9, 1))
        sun_np = self.render.attachNewNode(sun)
        sun_np.setHpr(30, -40, 0)
        self.render.setLight(sun_np)

    # ── TimeController ──────────────────────────────────────

    def set_time_scale(self, scale: float) -> None:
        self.time_scale = max(0.0, float(scale))

    # ── rounds ──────────────────────────────────────────────

    def _new_round(self) -> None:
        if self.state is not None:
            self.state.detach()
        self.hooks.unbind_group("round")
        self.bird.reset()
        self.time_scale = 1.0
        self.hud.set_score_text("")
        self.hud.set_ui_sequence(Phase.START)

        sm = GameStateMachine(
            config=self.game_config,
            time_controller=self,
            scheduler=PandaScheduler(self.taskMgr),
            lookup=self.lookup,
            error_log=self.error_log,
        )
        try:
            self.state = sm.attach()
        except CollaboratorMissingError:
            # The machine stays unusable; keep the window up so the error is visible.
            self.state = None
            self._refresh_errors()
            return

        self.hooks.bind(group="round", event="space", context="input.flap", fn=self._on_flap)
        self.hooks.bind(group="round", event="p", context="input.pause", fn=self._on_pause)
        self.hooks.bind(group="round", event="escape", context="input.pause", fn=self._on_pause)
        self.hooks.bind(group="round", event="k", context="input.kill", fn=sm.set_dead)
        self.hooks.bind(group="round", event="f3", context="input.debug", fn=self._toggle_debug)
        self.hooks.bind(group="round", event="r", context="input.restart", fn=self._new_round)

    def _on_flap(self) -> None:
        sm = self.state
        if sm is None:
            return
        if sm.phase is Phase.START:
            sm.set_phase(Phase.PLAY)
        if sm.phase is Phase.PLAY:
            self.bird.flap()

    def _on_pause(self) -> None:
        if self.state is not None:
            self.state.toggle_pause()

    def _toggle_debug(self) -> None:
        if self.state is not None:
            self.state.debug_enabled = not self.state.debug_enabled

    # ── frame loop ──────────────────────────────────────────

    def _safe_call(self, context: str, fn: Callable[[], None]) -> None:
        try:
            fn()
        except Exception as e:
            self.error_log.log_exception(context=context, exc=e)
            self._refresh_errors()

    def _refresh_errors(self) -> None:
        item = self.error_log.latest()
        self.hud.set_error_text(item.summary_line() if item is not None else "")

    def _update(self, task):  # type: ignore[no-untyped-def]
        dt = min(ClockObject.getGlobalClock().getDt(), 0.05)
        self._safe_call("update.tick", lambda: self._tick(dt))
        return task.cont

    def _tick(self, dt: float) -> None:
        sm = self.state
        if sm is None:
            return
        if sm.phase is Phase.PLAY:
            self.bird.step(dt, time_scale=self.time_scale)
        outcome = sm.tick(dt, self.bird.y)
        if outcome.time_scale is not None:
            self.set_time_scale(outcome.time_scale)
        self.player_model.setPos(0, 0, self.bird.y)
        self._draw_debug_lines(sm.debug_lines(self.bird.y))

    def _draw_debug_lines(self, lines: list[DebugLine]) -> None:
        key = tuple(pt for line in lines for pt in (line.start, line.end))
        if key == self._debug_key:
            return
        self._debug_key = key
        if self._debug_np is not None:
            self._debug_np.removeNode()
            self._debug_np = None
        if not lines:
            return
        ls = LineSegs("death-zone")
        ls.setThickness(2.0)
        ls.setColor(1.0, 0.2, 0.2, 1.0)
        for line in lines:
            # (x, y) in game space -> (x, 0, z) in Panda space.
            ls.moveTo(line.start[0], line.start[2], line.start[1])
            ls.drawTo(line.end[0], line.end[2], line.end[1])
        self._debug_np = self.render.attachNewNode(ls.create())
        self._debug_np.setLightOff(1)

    def _smoke_task(self, task):  # type: ignore[no-untyped-def]
        self._frames_left -= 1
        if self._frames_left <= 0:
            if self.state is not None:
                logger.info("Smoke run finished in %s, score %d", self.state.phase.name, self.state.score)
                self.state.detach()
            self.userExit()
            return task.done
        return task.cont


def run(*, smoke: bool = False, settings_path: Path | None = None, debug: bool | None = None) -> None:
    app = FlappyApp(RunConfig(smoke=smoke, settings_path=settings_path, debug=debug))
    app.run()
