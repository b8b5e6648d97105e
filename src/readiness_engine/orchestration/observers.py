"""Push-on-change subscription registry for score updates."""

from __future__ import annotations

import logging
import threading
from typing import Callable

from readiness_engine.models.score import ScoreUpdate

logger = logging.getLogger(__name__)

ScoreCallback = Callable[[ScoreUpdate], None]


class ObserverRegistry:
    """Delivers every ScoreUpdate to all current subscribers.

    A failing subscriber is logged and skipped; it never prevents delivery
    to the others or breaks the computation that published.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._callbacks: list[ScoreCallback] = []

    def subscribe(self, callback: ScoreCallback) -> Callable[[], None]:
        """Register *callback*; returns a function that unsubscribes it."""
        with self._lock:
            self._callbacks.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return unsubscribe

    def publish(self, update: ScoreUpdate) -> None:
        with self._lock:
            callbacks = list(self._callbacks)
        for callback in callbacks:
            try:
                callback(update)
            except Exception:
                logger.exception(
                    "Subscriber %r failed on %s update", callback, update.score_type.name
                )

    def __len__(self) -> int:
        with self._lock:
            return len(self._callbacks)
