from __future__ import annotations

import json
import logging
import os
import secrets
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any

from flappy.phase import Phase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameConfig:
    # Vertical distance from origin beyond which the player is dead (both above and below).
    death_boundary: float = 5.0
    # Draw the death zone lines while the player is alive.
    debug_enabled: bool = False
    # Half-width of the death zone debug lines.
    debug_line_width: float = 3.0
    # Score counter: add `score_step` every `score_interval` wall-clock seconds.
    score_step: int = 1
    score_interval: float = 0.1
    initial_phase: Phase = Phase.START

    def validate(self) -> "GameConfig":
        if not float(self.death_boundary) > 0.0:
            raise ValueError(f"death_boundary must be > 0 (got {self.death_boundary})")
        if int(self.score_step) <= 0:
            raise ValueError(f"score_step must be > 0 (got {self.score_step})")
        if not float(self.score_interval) > 0.0:
            raise ValueError(f"score_interval must be > 0 (got {self.score_interval})")
        if float(self.debug_line_width) < 0.0:
            raise ValueError(f"debug_line_width must be >= 0 (got {self.debug_line_width})")
        return self

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        out["initial_phase"] = self.initial_phase.name.lower()
        return out

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "GameConfig":
        # Unknown keys and wrongly typed values fall back to defaults.
        updates: dict[str, Any] = {}
        for key in ("death_boundary", "debug_line_width", "score_interval"):
            value = payload.get(key)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                updates[key] = float(value)
        step = payload.get("score_step")
        if isinstance(step, int) and not isinstance(step, bool):
            updates["score_step"] = int(step)
        debug = payload.get("debug_enabled")
        if isinstance(debug, bool):
            updates["debug_enabled"] = debug
        phase = payload.get("initial_phase")
        if isinstance(phase, str) and phase.strip():
            updates["initial_phase"] = Phase.parse(phase)
        return replace(cls(), **updates).validate()


@dataclass(frozen=True)
class RunConfig:
    smoke: bool = False
    # Drive the state machine without a window (scripted fall, prints the outcome).
    headless: bool = False
    settings_path: Path | None = None
    # CLI override for `GameConfig.debug_enabled`. None keeps the settings value.
    debug: bool | None = None


def load_game_config(path: Path) -> GameConfig:
    p = Path(path)
    if not p.exists():
        return GameConfig()
    try:
        payload = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring unreadable settings %s: %s", p, exc)
        return GameConfig()
    if not isinstance(payload, dict):
        logger.warning("Ignoring settings %s: expected a JSON object", p)
        return GameConfig()
    try:
        return GameConfig.from_dict(payload)
    except ValueError as exc:
        logger.warning("Ignoring invalid settings %s: %s", p, exc)
        return GameConfig()


def save_game_config(path: Path, cfg: GameConfig) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    # Unique tmp name so parallel smoke runs never clobber each other.
    tmp = p.with_name(f"{p.name}.{os.getpid()}.{secrets.token_hex(6)}.tmp")
    tmp.write_text(json.dumps(cfg.to_dict(), indent=2, sort_keys=True) + "\n", encoding="utf-8")
    tmp.replace(p)


__all__ = ["GameConfig", "RunConfig", "load_game_config", "save_game_config"]
