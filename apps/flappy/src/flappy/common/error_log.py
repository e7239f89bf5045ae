from __future__ import annotations

import logging
import time
import traceback
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger("flappy.errors")


@dataclass
class ErrorItem:
    ts: float
    context: str
    message: str
    tb: str | None
    count: int = 1

    def summary_line(self) -> str:
        base = f"{self.context}: {self.message}".strip()
        if self.count > 1:
            base += f" (x{self.count})"
        return base


class ErrorLog:
    """
    Recent-failure feed for the HUD, mirrored to the `flappy.errors` logger.

    Repeats of the same (context, message) collapse into one item with a counter, since
    a failing per-frame task would otherwise flood the buffer.
    """

    def __init__(self, *, max_items: int = 20, persist_path: Path | None = None) -> None:
        self.enabled: bool = True
        self._max_items = max(1, int(max_items))
        self._items: list[ErrorItem] = []
        self._last_key: tuple[str, str] | None = None
        self._persist_path = Path(persist_path) if persist_path is not None else None

    def items(self) -> list[ErrorItem]:
        return list(self._items)

    def contexts(self) -> list[str]:
        return [it.context for it in self._items]

    def latest(self) -> ErrorItem | None:
        return self._items[-1] if self._items else None

    def clear(self) -> None:
        self._items.clear()
        self._last_key = None

    def log_message(self, *, context: str, message: str) -> None:
        if not self.enabled:
            return
        context = str(context or "unknown")
        message = str(message or "").strip() or "Unknown error"
        self._append(context=context, message=message, tb=None)
        self._persist(context=context, message=message, tb=None)
        logger.error("%s: %s", context, message)

    def log_exception(self, *, context: str, exc: BaseException) -> None:
        if not self.enabled:
            return
        context = str(context or "unknown")
        msg = f"{type(exc).__name__}: {exc}".strip()
        tb = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        self._append(context=context, message=msg, tb=tb)
        self._persist(context=context, message=msg, tb=tb)
        logger.error("%s: %s\n%s", context, msg, tb.rstrip())

    def _append(self, *, context: str, message: str, tb: str | None) -> None:
        ts = time.time()
        key = (context, message)
        if self._items and self._last_key == key:
            self._items[-1].ts = ts
            self._items[-1].count += 1
            return

        self._items.append(ErrorItem(ts=ts, context=context, message=message, tb=tb))
        self._last_key = key
        if len(self._items) > self._max_items:
            self._items = self._items[-self._max_items :]

    def _persist(self, *, context: str, message: str, tb: str | None) -> None:
        p = self._persist_path
        if p is None:
            return
        ts = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime())
        lines = [f"[{ts}] {context}: {message}"]
        if tb and tb.strip():
            lines.append(tb.rstrip())
        lines.append("")
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            with p.open("a", encoding="utf-8") as fh:
                fh.write("\n".join(lines))
        except OSError as exc:
            # Never let the error feed take the game down.
            logger.warning("Could not persist error log to %s: %s", p, exc)


__all__ = ["ErrorItem", "ErrorLog"]
