from dataclasses import dataclass, replace
from typing import Optional


DEFAULT_PRESET_SEC = 300

PHASE_IDLE = 'idle'
PHASE_PAUSED = 'paused'
PHASE_RUNNING = 'running'


def is_valid_preset(seconds) -> bool:
    # bool is an int subclass; True must not become a one second preset
    return isinstance(seconds, int) and not isinstance(seconds, bool) and seconds >= 1


@dataclass
class TimerState:
    remaining: int = 0
    preset: int = DEFAULT_PRESET_SEC
    running: bool = False
    anchor: Optional[float] = None  # epoch seconds, set while running

    @property
    def phase(self) -> str:
        if self.running:
            return PHASE_RUNNING
        return PHASE_PAUSED if self.remaining > 0 else PHASE_IDLE

    def copy(self) -> 'TimerState':
        return replace(self)

    def to_dict(self):
        return {
            'remaining': self.remaining,
            'preset': self.preset,
            'running': self.running,
            'phase': self.phase,
        }


class CountdownEngine:
    """Idle/paused/running state machine for a single countdown.

    The engine knows nothing about wall clocks or scheduling: callers pass
    ``now`` where an anchor is needed and call ``tick()`` once per second.
    Every operation returns True when it changed the state.
    """

    def __init__(self, state: Optional[TimerState] = None):
        self._state = state.copy() if state else TimerState()

    @property
    def state(self) -> TimerState:
        return self._state.copy()

    @property
    def running(self) -> bool:
        return self._state.running

    def start(self, now: float) -> bool:
        s = self._state
        if s.running:
            return False
        if s.remaining == 0:
            s.remaining = s.preset
        s.running = True
        s.anchor = now
        return True

    def pause(self) -> bool:
        s = self._state
        if not s.running:
            return False
        s.running = False
        s.anchor = None
        return True

    def reset(self) -> bool:
        s = self._state
        s.running = False
        s.anchor = None
        s.remaining = s.preset
        return True

    def set_preset(self, seconds) -> bool:
        if not is_valid_preset(seconds):
            return False
        s = self._state
        s.preset = seconds
        if not s.running:
            s.remaining = seconds
        return True

    def tick(self) -> bool:
        s = self._state
        if not s.running:
            return False
        s.remaining = max(0, s.remaining - 1)
        if s.remaining == 0:
            s.running = False
            s.anchor = None
        return True
