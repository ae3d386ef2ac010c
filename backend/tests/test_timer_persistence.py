import json
import logging

import pytest

from debatify.services.timer import FileStorage, MemoryStorage, PersistenceAdapter, TimerState
from debatify.services.timer.persistence import (
    MalformedTimerRecord,
    decode_record,
    encode_record,
    reconcile,
)

T = 1_700_000_000.0  # epoch seconds
T_MS = int(T * 1000)


def _stored(storage, **record):
    storage.set('debatify_timer', json.dumps(record))


def test_encode_running_record_carries_start_time_in_ms():
    record = encode_record(TimerState(remaining=100, preset=300, running=True, anchor=T - 5), now=T)
    assert record == {'time': 100, 'preset': 300, 'isRunning': True, 'startTime': T_MS}


def test_encode_stopped_record_has_no_start_time():
    record = encode_record(TimerState(remaining=40, preset=60), now=T)
    assert record == {'time': 40, 'preset': 60, 'isRunning': False}


def test_reconcile_running_record_subtracts_elapsed():
    record = {'time': 100, 'preset': 300, 'isRunning': True, 'startTime': T_MS}
    state, expired = reconcile(record, now=T + 37)
    assert expired is False
    assert state.remaining == 63
    assert state.running is True
    assert state.anchor == T + 37


def test_reconcile_floors_partial_seconds():
    record = {'time': 100, 'preset': 300, 'isRunning': True, 'startTime': T_MS}
    state, _ = reconcile(record, now=T + 37.9)
    assert state.remaining == 63


def test_reconcile_expired_while_away():
    record = {'time': 10, 'preset': 300, 'isRunning': True, 'startTime': T_MS}
    state, expired = reconcile(record, now=T + 15)
    assert expired is True
    assert state.remaining == 0
    assert state.running is False
    assert state.preset == 300


def test_reconcile_clock_moved_backwards_does_not_add_time():
    record = {'time': 50, 'preset': 300, 'isRunning': True, 'startTime': T_MS}
    state, _ = reconcile(record, now=T - 30)
    assert state.remaining == 50


def test_reconcile_zero_start_time_counts_as_missing():
    record = {'time': 40, 'preset': 300, 'isRunning': True, 'startTime': 0}
    state, expired = reconcile(record, now=T)
    assert expired is False
    assert (state.remaining, state.running, state.anchor) == (40, True, T)


def test_reconcile_paused_record_is_verbatim():
    state, expired = reconcile({'time': 42, 'preset': 180, 'isRunning': False, 'startTime': None}, now=T + 999)
    assert expired is False
    assert (state.remaining, state.preset, state.running) == (42, 180, False)


@pytest.mark.parametrize('raw', [
    'not json',
    '[]',
    json.dumps({'preset': 300, 'isRunning': False}),
    json.dumps({'time': -1, 'preset': 300, 'isRunning': False}),
    json.dumps({'time': 10, 'preset': 0, 'isRunning': False}),
    json.dumps({'time': 10, 'preset': 300, 'isRunning': 'yes'}),
    json.dumps({'time': '10', 'preset': 300, 'isRunning': False}),
    json.dumps({'time': 10.5, 'preset': 300, 'isRunning': False}),
    json.dumps({'time': 10, 'preset': 300, 'isRunning': True, 'startTime': 'noon'}),
])
def test_decode_rejects_malformed_records(raw):
    with pytest.raises(MalformedTimerRecord):
        decode_record(raw)


def test_restore_without_record_gives_default():
    adapter = PersistenceAdapter(MemoryStorage())
    state = adapter.restore(now=T)
    assert (state.remaining, state.preset, state.running) == (0, 300, False)


def test_restore_running_record_resumes_with_fresh_anchor():
    storage = MemoryStorage()
    _stored(storage, time=100, preset=300, isRunning=True, startTime=T_MS)
    state = PersistenceAdapter(storage).restore(now=T + 37)
    assert state.remaining == 63
    assert state.running is True
    assert state.anchor == T + 37
    assert storage.get('debatify_timer') is not None


def test_restore_expired_record_clears_storage():
    storage = MemoryStorage()
    _stored(storage, time=10, preset=300, isRunning=True, startTime=T_MS)
    state = PersistenceAdapter(storage).restore(now=T + 15)
    assert (state.remaining, state.running) == (0, False)
    assert storage.get('debatify_timer') is None


def test_restore_malformed_record_falls_back_without_raising(caplog):
    storage = MemoryStorage({'debatify_timer': '{"time": "abc"'})
    with caplog.at_level(logging.WARNING):
        state = PersistenceAdapter(storage).restore(now=T)
    assert (state.remaining, state.preset, state.running) == (0, 300, False)
    assert 'timer-restore-malformed' in caplog.text


@pytest.mark.parametrize('start_time', ['NaN', 'Infinity', '-Infinity'])
def test_non_finite_start_time_falls_back_to_default(start_time, caplog):
    raw = '{"time": 100, "preset": 300, "isRunning": true, "startTime": %s}' % start_time
    with pytest.raises(MalformedTimerRecord):
        decode_record(raw)

    storage = MemoryStorage({'debatify_timer': raw})
    with caplog.at_level(logging.WARNING):
        state = PersistenceAdapter(storage).restore(now=T)
    assert (state.remaining, state.preset, state.running) == (0, 300, False)
    assert 'timer-restore-malformed' in caplog.text


class _BrokenStorage:
    def get(self, key):
        raise OSError('disk gone')

    def set(self, key, value):
        raise OSError('disk gone')

    def remove(self, key):
        raise OSError('disk gone')


def test_storage_failures_are_swallowed():
    adapter = PersistenceAdapter(_BrokenStorage())
    assert adapter.restore(now=T).remaining == 0
    assert adapter.save(TimerState(remaining=5), now=T) is False
    adapter.clear()


def test_save_then_restore_uses_save_instant_as_anchor():
    storage = MemoryStorage()
    adapter = PersistenceAdapter(storage)
    # started long ago, but 'time' is what remained at the save instant
    adapter.save(TimerState(remaining=30, preset=300, running=True, anchor=T - 500), now=T)
    state = adapter.restore(now=T + 10)
    assert state.remaining == 20
    assert state.running is True


def test_file_storage_round_trip_and_remove(tmp_path):
    path = tmp_path / 'nested' / 'local_storage.json'
    storage = FileStorage(str(path))
    assert storage.get('debatify_timer') is None
    storage.set('debatify_timer', '{"time": 1}')
    storage.set('other', 'x')
    assert FileStorage(str(path)).get('debatify_timer') == '{"time": 1}'
    storage.remove('debatify_timer')
    assert json.loads(path.read_text()) == {'other': 'x'}


def test_file_storage_survives_corrupt_document(tmp_path):
    path = tmp_path / 'local_storage.json'
    path.write_text('{{{')
    adapter = PersistenceAdapter(FileStorage(str(path)))
    assert adapter.restore(now=T).preset == 300
    assert adapter.save(TimerState(remaining=12, preset=60), now=T) is True
    assert json.loads(json.loads(path.read_text())['debatify_timer']) == {
        'time': 12, 'preset': 60, 'isRunning': False,
    }


def test_custom_default_preset():
    adapter = PersistenceAdapter(MemoryStorage(), default_preset=600)
    assert adapter.restore(now=T).preset == 600
