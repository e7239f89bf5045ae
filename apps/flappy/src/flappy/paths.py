from __future__ import annotations

import os
from pathlib import Path

import flappy


def app_root() -> Path:
    """
    Return the app root directory: <repo>/apps/flappy.

    Derived from the installed package location so it stays correct for editable installs.
    """

    return Path(flappy.__file__).resolve().parents[2]


def default_settings_path() -> Path:
    """
    Settings JSON used when `--settings` is not passed.

    Override for tests/dev via `FLAPPY_SETTINGS`.
    """

    override = os.environ.get("FLAPPY_SETTINGS")
    if override:
        return Path(override)
    return app_root() / "settings.json"
