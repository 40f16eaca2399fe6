"""Cancellable auto-play timer and speed presets."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

SPEED_PRESETS: Dict[str, int] = {
    "slow": 1000,
    "normal": 500,
    "fast": 100,
}
DEFAULT_SPEED = "normal"

TickCallback = Callable[["AutoPlayTimer"], bool]


def resolve_speed(value: Any) -> int:
    """Map a preset name or a millisecond value to a positive interval."""

    if isinstance(value, bool):
        raise ValueError(f"invalid speed: {value!r}")
    if isinstance(value, str):
        text = value.strip().lower()
        if text in SPEED_PRESETS:
            return SPEED_PRESETS[text]
        if text.endswith("ms"):
            text = text[:-2].strip()
        try:
            value = int(text, 10)
        except ValueError:
            raise ValueError(f"unknown speed preset: {value!r}") from None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int) or value <= 0:
        raise ValueError(f"speed must be a positive number of milliseconds, got {value!r}")
    return value


def speed_name(interval_ms: int) -> Optional[str]:
    for name, ms in SPEED_PRESETS.items():
        if ms == interval_ms:
            return name
    return None


class AutoPlayTimer:
    """Repeating tick driven by a daemon worker thread.

    Each timer owns its own cancellation event, so a cancelled timer can be
    told apart from its replacement.  The first tick fires one full interval
    after :meth:`start`.  The callback returns ``False`` to end the loop.
    """

    def __init__(self, interval_ms: int, callback: TickCallback, *, name: str = "svmdbg-autoplay") -> None:
        self.interval_ms = resolve_speed(interval_ms)
        self.name = name
        self.ticks = 0
        self._callback = callback
        self._cancelled = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def alive(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError("auto-play timer already started")
        if self.cancelled:
            raise RuntimeError("auto-play timer was cancelled")
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        logger.debug("auto-play timer started (%d ms)", self.interval_ms)

    def cancel(self) -> None:
        """Signal the worker to stop; safe to call repeatedly."""
        if not self._cancelled.is_set():
            self._cancelled.set()
            logger.debug("auto-play timer cancelled after %d tick(s)", self.ticks)

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the worker to exit.  A no-op from the worker itself."""
        thread = self._thread
        if thread is None or thread is threading.current_thread():
            return
        thread.join(timeout=timeout)

    def _run(self) -> None:
        interval = self.interval_ms / 1000.0
        while not self._cancelled.wait(interval):
            self.ticks += 1
            try:
                keep_going = self._callback(self)
            except Exception:
                logger.exception("auto-play tick failed")
                break
            if not keep_going:
                break
        self._cancelled.set()


__all__ = ["AutoPlayTimer", "DEFAULT_SPEED", "SPEED_PRESETS", "resolve_speed", "speed_name"]
