import pytest

from debatify.services.timer import (
    PHASE_IDLE,
    PHASE_PAUSED,
    PHASE_RUNNING,
    CountdownEngine,
    TimerState,
    is_valid_preset,
)


def test_default_state_is_idle():
    engine = CountdownEngine()
    state = engine.state
    assert (state.remaining, state.preset, state.running) == (0, 300, False)
    assert state.anchor is None
    assert state.phase == PHASE_IDLE


def test_start_from_idle_loads_preset_and_anchors():
    engine = CountdownEngine()
    assert engine.start(now=50.0) is True
    state = engine.state
    assert state.remaining == 300
    assert state.running is True
    assert state.anchor == 50.0
    assert state.phase == PHASE_RUNNING


def test_start_while_running_is_noop():
    engine = CountdownEngine()
    engine.start(now=1.0)
    engine.tick()
    assert engine.start(now=99.0) is False
    assert engine.state.remaining == 299
    assert engine.state.anchor == 1.0


def test_pause_then_start_resumes_from_paused_value():
    engine = CountdownEngine(TimerState(preset=60))
    engine.start(now=0.0)
    for _ in range(15):
        engine.tick()
    assert engine.pause() is True
    paused = engine.state
    assert paused.remaining == 45
    assert paused.phase == PHASE_PAUSED
    assert paused.anchor is None

    engine.start(now=100.0)
    assert engine.state.remaining == 45
    assert engine.state.running is True


def test_pause_when_not_running_is_noop():
    engine = CountdownEngine()
    assert engine.pause() is False


@pytest.mark.parametrize('setup', ['idle', 'paused', 'running'])
def test_reset_from_any_state(setup):
    engine = CountdownEngine(TimerState(preset=120))
    if setup != 'idle':
        engine.start(now=0.0)
        engine.tick()
    if setup == 'paused':
        engine.pause()
    assert engine.reset() is True
    state = engine.state
    assert state.remaining == 120
    assert state.running is False
    assert state.anchor is None


def test_tick_decrements_once_per_call():
    engine = CountdownEngine(TimerState(remaining=5, preset=300))
    engine.start(now=0.0)
    engine.tick()
    assert engine.state.remaining == 4
    assert engine.state.running is True


def test_reaching_zero_stops_running():
    engine = CountdownEngine(TimerState(remaining=2, preset=300))
    engine.start(now=0.0)
    engine.tick()
    engine.tick()
    state = engine.state
    assert state.remaining == 0
    assert state.running is False
    assert state.anchor is None
    assert state.phase == PHASE_IDLE
    # further ticks change nothing
    assert engine.tick() is False
    assert engine.state.remaining == 0


def test_tick_while_paused_is_noop():
    engine = CountdownEngine(TimerState(remaining=30))
    assert engine.tick() is False
    assert engine.state.remaining == 30


def test_set_preset_when_stopped_updates_remaining():
    engine = CountdownEngine()
    assert engine.set_preset(420) is True
    assert engine.state.preset == 420
    assert engine.state.remaining == 420


def test_set_preset_while_running_leaves_countdown_alone():
    engine = CountdownEngine()
    engine.start(now=0.0)
    engine.tick()
    engine.set_preset(420)
    state = engine.state
    assert state.preset == 420
    assert state.remaining == 299
    engine.reset()
    assert engine.state.remaining == 420


@pytest.mark.parametrize('bad', [0, -5, 1.5, '60', None, True])
def test_invalid_presets_are_ignored(bad):
    engine = CountdownEngine()
    assert engine.set_preset(bad) is False
    assert engine.state.preset == 300
    assert engine.state.remaining == 0
    assert not is_valid_preset(bad)


def test_remaining_never_negative_over_long_run():
    engine = CountdownEngine(TimerState(preset=3))
    engine.start(now=0.0)
    for _ in range(10):
        engine.tick()
        assert engine.state.remaining >= 0
    assert engine.state.running is False


def test_state_is_a_copy():
    engine = CountdownEngine()
    state = engine.state
    state.remaining = 999
    assert engine.state.remaining == 0
