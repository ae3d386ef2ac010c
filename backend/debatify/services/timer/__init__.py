"""Shared debate timer: countdown engine, persistence and views.

Transport code (HTTP routes, socket handlers) talks to the one
``TimerService`` built by ``build_timer_service``; nothing here imports
Flask.
"""

from .drivers import BackgroundTickDriver, ManualTickDriver
from .engine import (
    DEFAULT_PRESET_SEC,
    PHASE_IDLE,
    PHASE_PAUSED,
    PHASE_RUNNING,
    CountdownEngine,
    TimerState,
    is_valid_preset,
)
from .indicator import FloatingIndicator, format_clock, timer_panel
from .persistence import STORAGE_KEY, FileStorage, MemoryStorage, PersistenceAdapter
from .service import TimerService


def build_timer_service(config, socketio, logger=None) -> TimerService:
    """Wire the process timer from application config.

    TESTING swaps the background driver for a ``ManualTickDriver`` so tests
    advance time explicitly, the way stage timers run inline under tests.
    """
    path = config.get('TIMER_STORAGE_PATH')
    storage = FileStorage(path) if path else MemoryStorage()
    persistence = PersistenceAdapter(
        storage,
        key=config.get('TIMER_STORAGE_KEY', STORAGE_KEY),
        logger=logger,
        default_preset=int(config.get('TIMER_DEFAULT_PRESET_SEC', DEFAULT_PRESET_SEC)),
    )
    if config.get('TESTING'):
        driver = ManualTickDriver()
    else:
        driver = BackgroundTickDriver(
            socketio,
            interval=float(config.get('TIMER_TICK_INTERVAL_SEC', 1.0)),
            logger=logger,
        )
    return TimerService(persistence, driver, logger=logger)


__all__ = [
    'BackgroundTickDriver',
    'CountdownEngine',
    'DEFAULT_PRESET_SEC',
    'FileStorage',
    'FloatingIndicator',
    'ManualTickDriver',
    'MemoryStorage',
    'PHASE_IDLE',
    'PHASE_PAUSED',
    'PHASE_RUNNING',
    'PersistenceAdapter',
    'STORAGE_KEY',
    'TimerService',
    'TimerState',
    'build_timer_service',
    'format_clock',
    'is_valid_preset',
    'timer_panel',
]
