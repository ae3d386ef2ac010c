from flask_socketio import join_room, leave_room, emit
from flask import request, current_app
from debatify import socketio
from debatify.services.timer import FloatingIndicator, format_clock, is_valid_preset
from typing import Dict, Tuple

# One indicator mounted per connected client; all share the app's TimerService
_indicators: Dict[Tuple[str, str], FloatingIndicator] = {}


def _get_sid() -> str:
    return request.sid  # type: ignore[attr-defined]


def _mount_key() -> Tuple[str, str]:
    return (request.namespace, _get_sid())  # type: ignore[attr-defined]


def _timer():
    return current_app.extensions['timer']


def _timer_payload(state):
    payload = state.to_dict()
    payload['display'] = format_clock(state.remaining)
    return payload


def broadcast_timer(state) -> None:
    """TimerService listener: push every change to all /ws clients."""
    socketio.emit('timer_update', _timer_payload(state), namespace='/ws')


def mounted_indicator_count(namespace: str = "/ws") -> int:
    return sum(1 for ns, _sid in _indicators if ns == namespace)


def _indicator() -> FloatingIndicator:
    key = _mount_key()
    indicator = _indicators.get(key)
    if indicator is None or indicator.timer is not _timer():
        indicator = FloatingIndicator(_timer())
        _indicators[key] = indicator
    return indicator


def _emit_indicator(indicator: FloatingIndicator) -> None:
    emit('indicator', {'indicator': indicator.render()})


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})
    indicator = _indicator()
    emit('timer_update', _timer_payload(_timer().snapshot()))
    _emit_indicator(indicator)


def handle_disconnect(*args):
    _indicators.pop(_mount_key(), None)


def handle_timer_start(data=None):
    _indicator().start()


def handle_timer_pause(data=None):
    _indicator().pause()


def handle_timer_reset(data=None):
    _indicator().reset()


def handle_timer_set_preset(data):
    seconds = (data or {}).get('seconds')
    if not is_valid_preset(seconds):
        emit('error', {'message': 'seconds must be a positive whole number'})
        return
    _timer().set_preset(seconds)


def handle_indicator_toggle(data=None):
    indicator = _indicator()
    indicator.toggle()
    _emit_indicator(indicator)


def handle_join_debate(data):
    debate_id = (data or {}).get('debate_id')
    if not debate_id:
        emit('error', {'message': 'debate_id is required'})
        return
    room = f"debate:{debate_id}"
    join_room(room)
    emit('joined', {'room': room})


def handle_leave_debate(data):
    debate_id = (data or {}).get('debate_id')
    if not debate_id:
        emit('error', {'message': 'debate_id is required'})
        return
    room = f"debate:{debate_id}"
    leave_room(room)
    emit('left', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


_HANDLERS = (
    ('connect', handle_connect),
    ('disconnect', handle_disconnect),
    ('timer_start', handle_timer_start),
    ('timer_pause', handle_timer_pause),
    ('timer_reset', handle_timer_reset),
    ('timer_set_preset', handle_timer_set_preset),
    ('indicator_toggle', handle_indicator_toggle),
    ('join_debate', handle_join_debate),
    ('leave_debate', handle_leave_debate),
    ('ping', handle_ping),
)


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    for event, handler in _HANDLERS:
        socketio.on_event(event, handler, namespace='/ws')

    if testing:
        for event, handler in _HANDLERS:
            socketio.on_event(event, handler, namespace='/')
