"""Tick drivers: the one recurring callback behind a running countdown."""

import logging
from typing import Callable, Optional


class BackgroundTickDriver:
    """Calls ``callback`` every ``interval`` seconds from a Socket.IO
    background task until cancelled.

    Each ``start`` bumps a generation counter; a worker whose generation is
    no longer current exits on its next wake-up instead of calling back.
    """

    def __init__(self, socketio, interval: float = 1.0, logger: Optional[logging.Logger] = None):
        self.socketio = socketio
        self.interval = float(interval)
        self.logger = logger or logging.getLogger(__name__)
        self._generation = 0
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def start(self, callback: Callable[[], None]) -> None:
        if self._active:
            raise RuntimeError('tick driver is already running')
        self._generation += 1
        self._active = True
        self.socketio.start_background_task(self._worker, self._generation, callback)

    def cancel(self) -> None:
        if self._active:
            self._generation += 1
            self._active = False

    def _worker(self, generation: int, callback: Callable[[], None]) -> None:
        while True:
            self.socketio.sleep(self.interval)
            if generation != self._generation:
                return
            try:
                callback()
            except Exception:
                self.logger.exception(f"[timer-tick-error] generation={generation}")


class ManualTickDriver:
    """Driver advanced by hand; used in TESTING mode and unit tests."""

    def __init__(self):
        self._callback: Optional[Callable[[], None]] = None
        self.starts = 0
        self.cancels = 0
        self.ticks = 0

    @property
    def active(self) -> bool:
        return self._callback is not None

    def start(self, callback: Callable[[], None]) -> None:
        if self._callback is not None:
            raise RuntimeError('tick driver is already running')
        self._callback = callback
        self.starts += 1

    def cancel(self) -> None:
        if self._callback is not None:
            self._callback = None
            self.cancels += 1

    def advance(self, seconds: int = 1) -> int:
        """Fire up to ``seconds`` ticks; stops early once cancelled."""
        fired = 0
        for _ in range(seconds):
            callback = self._callback
            if callback is None:
                break
            callback()
            fired += 1
            self.ticks += 1
        return fired
