"""Timer persistence: a local-storage style key/value port plus the
record codec and restore-time reconciliation.

The stored record keeps the shape the browser client has always written
under ``debatify_timer``::

    {"time": 100, "preset": 300, "isRunning": true, "startTime": 1718000000000}

``startTime`` is epoch milliseconds and is present only while running.
"""

import json
import logging
import math
import os
import tempfile
from typing import Dict, Optional, Tuple

from .engine import DEFAULT_PRESET_SEC, TimerState, is_valid_preset


STORAGE_KEY = 'debatify_timer'


class MalformedTimerRecord(ValueError):
    pass


class MemoryStorage:
    """Process-local storage; nothing survives a restart."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove(self, key: str) -> None:
        self._items.pop(key, None)


class FileStorage:
    """JSON document on disk holding string values by key.

    Writes go to a temp file in the same directory and are moved into place,
    so a crash mid-write leaves the previous document intact.
    """

    def __init__(self, path: str):
        self.path = path

    def _read_all(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, 'r', encoding='utf-8') as fh:
            data = json.load(fh)
        if not isinstance(data, dict):
            raise ValueError(f'{self.path} does not hold a JSON object')
        return data

    def _write_all(self, data: Dict[str, str]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.storage-', suffix='.json')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as fh:
                json.dump(data, fh)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except ValueError:
            # corrupt document: start over rather than refuse every write
            data = {}
        data[key] = value
        self._write_all(data)

    def remove(self, key: str) -> None:
        try:
            data = self._read_all()
        except ValueError:
            data = {}
        if key in data:
            del data[key]
            self._write_all(data)


def encode_record(state: TimerState, now: float) -> dict:
    record = {
        'time': state.remaining,
        'preset': state.preset,
        'isRunning': state.running,
    }
    if state.running:
        # paired with 'time' as of this instant, not the original start
        record['startTime'] = int(now * 1000)
    return record


def _require_int(record: dict, field: str) -> int:
    value = record.get(field)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedTimerRecord(f'{field!r} must be a number, got {value!r}')
    if isinstance(value, float) and not value.is_integer():
        raise MalformedTimerRecord(f'{field!r} must be whole seconds, got {value!r}')
    return int(value)


def decode_record(raw: str) -> dict:
    try:
        record = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise MalformedTimerRecord(f'unreadable timer record: {exc}') from exc
    if not isinstance(record, dict):
        raise MalformedTimerRecord('timer record is not an object')

    remaining = _require_int(record, 'time')
    preset = _require_int(record, 'preset')
    if remaining < 0:
        raise MalformedTimerRecord(f'negative time {remaining}')
    if not is_valid_preset(preset):
        raise MalformedTimerRecord(f'invalid preset {preset}')

    running = record.get('isRunning')
    if not isinstance(running, bool):
        raise MalformedTimerRecord(f"'isRunning' must be a boolean, got {running!r}")

    start_time = record.get('startTime')
    if start_time is not None:
        if isinstance(start_time, bool) or not isinstance(start_time, (int, float)):
            raise MalformedTimerRecord(f"'startTime' must be epoch milliseconds, got {start_time!r}")
        if not math.isfinite(start_time):
            raise MalformedTimerRecord(f"'startTime' must be finite, got {start_time!r}")

    return {'time': remaining, 'preset': preset, 'isRunning': running, 'startTime': start_time}


def reconcile(record: dict, now: float) -> Tuple[TimerState, bool]:
    """Turn a decoded record into the state to resume with at ``now``.

    Returns ``(state, expired)``; ``expired`` means the countdown ran out
    while nobody was ticking it and the stored record should be cleared.
    """
    remaining = record['time']
    preset = record['preset']

    if not record['isRunning']:
        return TimerState(remaining=remaining, preset=preset), False

    start_time = record.get('startTime')
    # 0 is an unset start, the same as a missing one
    if not start_time:
        return TimerState(remaining=remaining, preset=preset, running=remaining > 0,
                          anchor=now if remaining > 0 else None), remaining == 0

    # floored: up to a second of absence goes unaccounted
    elapsed = max(0, math.floor((now * 1000 - start_time) / 1000))
    recovered = max(0, remaining - elapsed)
    if recovered > 0:
        return TimerState(remaining=recovered, preset=preset, running=True, anchor=now), False
    return TimerState(remaining=0, preset=preset), True


class PersistenceAdapter:
    def __init__(self, storage, key: str = STORAGE_KEY, logger: Optional[logging.Logger] = None,
                 default_preset: int = DEFAULT_PRESET_SEC):
        self.storage = storage
        self.key = key
        self.logger = logger or logging.getLogger(__name__)
        self.default_preset = default_preset if is_valid_preset(default_preset) else DEFAULT_PRESET_SEC

    def default_state(self) -> TimerState:
        return TimerState(remaining=0, preset=self.default_preset, running=False)

    def save(self, state: TimerState, now: float) -> bool:
        payload = json.dumps(encode_record(state, now))
        try:
            self.storage.set(self.key, payload)
        except OSError as exc:
            self.logger.warning(f"[timer-save-failed] key={self.key} error={exc}")
            return False
        return True

    def clear(self) -> None:
        try:
            self.storage.remove(self.key)
        except OSError as exc:
            self.logger.warning(f"[timer-clear-failed] key={self.key} error={exc}")

    def restore(self, now: float) -> TimerState:
        try:
            raw = self.storage.get(self.key)
        except (OSError, ValueError) as exc:
            self.logger.warning(f"[timer-restore-failed] key={self.key} error={exc}")
            return self.default_state()
        if raw is None:
            return self.default_state()

        try:
            record = decode_record(raw)
        except MalformedTimerRecord as exc:
            self.logger.warning(f"[timer-restore-malformed] key={self.key} error={exc}")
            return self.default_state()

        state, expired = reconcile(record, now)
        if expired:
            self.logger.info(f"[timer-restore-expired] key={self.key} stored_time={record['time']}")
            self.clear()
        else:
            self.logger.info(
                f"[timer-restore] key={self.key} remaining={state.remaining} preset={state.preset} running={state.running}"
            )
        return state
