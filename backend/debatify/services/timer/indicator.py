"""View models rendered from the shared timer.

Neither view holds countdown state; they read the ``TimerService`` they
were given and forward control actions to it.
"""

from typing import Optional


WARNING_THRESHOLD_SEC = 10
QUICK_PRESETS = (
    (60, '1 min'),
    (180, '3 min'),
    (300, '5 min'),
    (420, '7 min'),
    (600, '10 min'),
    (900, '15 min'),
)
CUSTOM_MINUTES_RANGE = (1, 60)


def format_clock(seconds: int) -> str:
    mins, secs = divmod(max(0, int(seconds)), 60)
    return f"{mins:02d}:{secs:02d}"


def is_warning(remaining: int) -> bool:
    return 0 < remaining <= WARNING_THRESHOLD_SEC


class FloatingIndicator:
    """Compact always-mounted readout with a collapsed/expanded toggle."""

    def __init__(self, timer, expanded: bool = False):
        self.timer = timer
        self.expanded = expanded

    @property
    def visible(self) -> bool:
        state = self.timer.snapshot()
        return state.running or state.remaining > 0

    def toggle(self) -> bool:
        self.expanded = not self.expanded
        return self.expanded

    def controls(self, running: bool):
        if not self.expanded:
            return []
        return ['pause' if running else 'start', 'reset']

    def render(self) -> Optional[dict]:
        state = self.timer.snapshot()
        if state.remaining == 0 and not state.running:
            return None
        return {
            'display': format_clock(state.remaining),
            'warning': is_warning(state.remaining),
            'running': state.running,
            'label': 'Running' if state.running else None,
            'expanded': self.expanded,
            'controls': self.controls(state.running),
        }

    def start(self):
        return self.timer.start()

    def pause(self):
        return self.timer.pause()

    def reset(self):
        return self.timer.reset()


def timer_panel(timer) -> dict:
    """Full timer tab: readout, primary action and preset picker."""
    state = timer.snapshot()
    return {
        'title': 'Debate Timer',
        'display': format_clock(state.remaining),
        'warning': is_warning(state.remaining),
        'running': state.running,
        'phase': state.phase,
        'actions': ['pause' if state.running else 'start', 'reset'],
        'presets': [
            {
                'seconds': seconds,
                'label': label,
                'selected': state.preset == seconds,
                'disabled': state.running,
            }
            for seconds, label in QUICK_PRESETS
        ],
        'custom_minutes': {
            'min': CUSTOM_MINUTES_RANGE[0],
            'max': CUSTOM_MINUTES_RANGE[1],
            'disabled': state.running,
        },
    }
