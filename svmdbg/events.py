"""View publication for debugger front-ends."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Optional

from .state import DebuggerView, RunState

logger = logging.getLogger(__name__)

ViewHandler = Callable[[DebuggerView], None]


@dataclass
class ViewSubscription:
    handler: ViewHandler
    states: Optional[FrozenSet[RunState]] = None

    def matches(self, view: DebuggerView) -> bool:
        return self.states is None or view.run_state in self.states


class ViewBus:
    """Fan-out immutable views to subscribers, synchronously and in order."""

    def __init__(self) -> None:
        self._subs: Dict[int, ViewSubscription] = {}
        self._lock = threading.Lock()
        self._next_token = 1

    def __len__(self) -> int:
        with self._lock:
            return len(self._subs)

    def subscribe(self, sub: ViewSubscription | ViewHandler) -> int:
        if not isinstance(sub, ViewSubscription):
            sub = ViewSubscription(handler=sub)
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._subs[token] = sub
            return token

    def unsubscribe(self, token: int) -> None:
        with self._lock:
            self._subs.pop(token, None)

    def clear(self) -> None:
        with self._lock:
            self._subs.clear()

    def publish(self, view: DebuggerView) -> None:
        with self._lock:
            subscriptions = list(self._subs.values())
        for sub in subscriptions:
            if not sub.matches(view):
                continue
            try:
                sub.handler(view)
            except Exception:
                logger.exception("view subscriber failed")


__all__ = ["ViewBus", "ViewHandler", "ViewSubscription"]
