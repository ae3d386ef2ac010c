import logging
import threading
import time
from typing import Callable, List, Optional

from .engine import CountdownEngine, TimerState


Listener = Callable[[TimerState], None]


class TimerService:
    """The process-wide countdown shared by every view.

    Owns one ``CountdownEngine``, its ``PersistenceAdapter`` and the single
    tick driver. Construct it once at application start and hand the same
    instance to every consumer.

    - restores exactly once, on construction
    - saves exactly once per effective mutation, tick-driven expiry included
    - runs the tick driver only while the countdown is running
    """

    def __init__(self, persistence, driver, clock: Callable[[], float] = time.time,
                 logger: Optional[logging.Logger] = None):
        self.persistence = persistence
        self.driver = driver
        self.clock = clock
        self.logger = logger or logging.getLogger(__name__)
        self._lock = threading.RLock()
        self._listeners: List[Listener] = []
        self._token = 0
        self._engine = CountdownEngine(persistence.restore(clock()))
        if self._engine.running:
            self._start_driver()

    # ---- read access ----

    def snapshot(self) -> TimerState:
        with self._lock:
            return self._engine.state

    @property
    def remaining(self) -> int:
        return self.snapshot().remaining

    @property
    def running(self) -> bool:
        return self.snapshot().running

    @property
    def preset(self) -> int:
        return self.snapshot().preset

    # ---- operations ----
    # Listeners run under the lock so broadcasts leave in commit order.

    def start(self) -> TimerState:
        with self._lock:
            if not self._engine.start(self.clock()):
                return self._engine.state
            self._start_driver()
            state = self._commit()
            self.logger.info(f"[timer-start] remaining={state.remaining} preset={state.preset}")
            self._notify(state)
        return state

    def pause(self) -> TimerState:
        with self._lock:
            if not self._engine.pause():
                return self._engine.state
            self._stop_driver()
            state = self._commit()
            self.logger.info(f"[timer-pause] remaining={state.remaining}")
            self._notify(state)
        return state

    def reset(self) -> TimerState:
        with self._lock:
            self._engine.reset()
            self._stop_driver()
            state = self._commit()
            self.logger.info(f"[timer-reset] remaining={state.remaining}")
            self._notify(state)
        return state

    def set_preset(self, seconds) -> TimerState:
        with self._lock:
            if not self._engine.set_preset(seconds):
                self.logger.warning(f"[timer-preset-rejected] seconds={seconds!r}")
                return self._engine.state
            state = self._commit()
            self.logger.info(f"[timer-preset] preset={state.preset} remaining={state.remaining} running={state.running}")
            self._notify(state)
        return state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def shutdown(self) -> None:
        with self._lock:
            self._stop_driver()

    # ---- internals ----

    def _start_driver(self) -> None:
        self._token += 1
        token = self._token
        self.driver.start(lambda: self._on_tick(token))

    def _stop_driver(self) -> None:
        # invalidate first so a tick already waiting on the lock is dropped
        self._token += 1
        self.driver.cancel()

    def _on_tick(self, token: int) -> None:
        with self._lock:
            if token != self._token or not self._engine.tick():
                return
            expired = not self._engine.running
            if expired:
                self._stop_driver()
            state = self._commit()
            if expired:
                self.logger.info(f"[timer-expire] preset={state.preset}")
            self._notify(state)

    def _commit(self) -> TimerState:
        state = self._engine.state
        self.persistence.save(state, self.clock())
        return state

    def _notify(self, state: TimerState) -> None:
        # caller holds self._lock
        for listener in list(self._listeners):
            try:
                listener(state.copy())
            except Exception:
                self.logger.exception("[timer-listener-error]")
