#!/usr/bin/env python3
from __future__ import annotations

import argparse
import os
from pathlib import Path
import shlex
import subprocess
import sys
from typing import Iterable


REPO_ROOT = Path(__file__).resolve().parent
APPS_DIR = REPO_ROOT / "apps"

DEFAULT_APP = "flappy"


def _app_dir(app: str) -> Path:
    return (APPS_DIR / app).resolve()


def _python_for(app_dir: Path) -> str:
    venv_py = app_dir / ".venv" / "bin" / "python"
    if venv_py.exists() and os.access(venv_py, os.X_OK):
        return str(venv_py)
    venv_py = REPO_ROOT / ".venv" / "bin" / "python"
    if venv_py.exists() and os.access(venv_py, os.X_OK):
        return str(venv_py)
    return sys.executable or "python3"


def _with_pythonpath(env: dict[str, str], app_dir: Path) -> dict[str, str]:
    """Make `apps/<app>/src` importable even without `pip install -e .`."""

    app_src = app_dir / "src"
    if not app_src.is_dir():
        return env
    cur = env.get("PYTHONPATH", "")
    out = dict(env)
    out["PYTHONPATH"] = os.pathsep.join([str(app_src)] + ([cur] if cur else []))
    return out


def _run(cmd: list[str], *, cwd: Path, env: dict[str, str]) -> int:
    p = subprocess.run(cmd, cwd=str(cwd), env=env)
    return int(p.returncode)


def _resolve_app(app: str) -> Path | None:
    app_dir = _app_dir(app)
    if not app_dir.is_dir():
        print(f"Unknown app: {app} (expected folder: {app_dir})", file=sys.stderr)
        return None
    return app_dir


def cmd_list_apps(_args: argparse.Namespace) -> int:
    if not APPS_DIR.is_dir():
        print("apps/ folder not found", file=sys.stderr)
        return 2
    for a in sorted(p.name for p in APPS_DIR.iterdir() if p.is_dir() and not p.name.startswith(".")):
        print(a)
    return 0


def cmd_runapp(args: argparse.Namespace) -> int:
    app = str(args.app)
    app_dir = _resolve_app(app)
    if app_dir is None:
        return 2

    # Accept runner flags after <app> too: `./runner flappy --print-cmd --headless`.
    app_args = list(args.app_args or [])
    print_cmd = bool(args.print_cmd)
    if "--print-cmd" in app_args:
        app_args = [a for a in app_args if a != "--print-cmd"]
        print_cmd = True

    cmd = [_python_for(app_dir), "-m", str(args.module or app), *app_args]
    if print_cmd:
        print("+", " ".join(shlex.quote(x) for x in cmd))
        return 0
    return _run(cmd, cwd=app_dir, env=_with_pythonpath(dict(os.environ), app_dir))


def cmd_test(args: argparse.Namespace) -> int:
    app_dir = _resolve_app(str(args.app))
    if app_dir is None:
        return 2
    cmd = [_python_for(app_dir), "-m", "pytest", "tests", *(args.pytest_args or [])]
    return _run(cmd, cwd=app_dir, env=_with_pythonpath(dict(os.environ), app_dir))


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="runner.py",
        description="Repo helper (run and test apps under apps/).",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("list", help="List apps under apps/.")
    sp.set_defaults(fn=cmd_list_apps)

    sp = sub.add_parser("runapp", help="Run an app module from apps/<app>/, passing through arguments.")
    sp.add_argument("app", help=f"App folder name under apps/ (e.g. {DEFAULT_APP}).")
    sp.add_argument("--module", default=None, help="Python module to run (default: <app>).")
    sp.add_argument("--print-cmd", action="store_true", help="Print the resolved command and exit.")
    sp.add_argument("app_args", nargs=argparse.REMAINDER, help="Arguments forwarded to the app.")
    sp.set_defaults(fn=cmd_runapp)

    sp = sub.add_parser("test", help="Run an app's pytest suite.")
    sp.add_argument("app", nargs="?", default=DEFAULT_APP)
    sp.add_argument("pytest_args", nargs=argparse.REMAINDER, help="Arguments forwarded to pytest.")
    sp.set_defaults(fn=cmd_test)

    return p


def main(argv: Iterable[str] | None = None) -> int:
    parser = build_parser()
    raw = list(argv) if argv is not None else sys.argv[1:]
    # `./runner flappy --headless` is shorthand for `./runner runapp flappy --headless`.
    if raw and not raw[0].startswith("-") and raw[0] not in {"list", "runapp", "test"}:
        raw = ["runapp", *raw]
    args = parser.parse_args(raw)
    return int(args.fn(args))


if __name__ == "__main__":
    raise SystemExit(main())
