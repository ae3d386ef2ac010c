from flask import Blueprint, jsonify, request
from debatify import get_timer
from debatify.services.timer import FloatingIndicator, format_clock, is_valid_preset, timer_panel
from debatify.services.timer.indicator import CUSTOM_MINUTES_RANGE


timer_api = Blueprint('timer', __name__)


def timer_payload(state):
    payload = state.to_dict()
    payload['display'] = format_clock(state.remaining)
    return payload


def _preset_from_request(data):
    """Seconds requested by the body, or None when the input is unusable."""
    if 'seconds' in data:
        seconds = data.get('seconds')
        return seconds if is_valid_preset(seconds) else None
    if 'minutes' in data:
        minutes = data.get('minutes')
        low, high = CUSTOM_MINUTES_RANGE
        if isinstance(minutes, bool) or not isinstance(minutes, int) or not low <= minutes <= high:
            return None
        return minutes * 60
    return None


@timer_api.route('', methods=['GET'])
def get_timer_state():
    return jsonify(timer_payload(get_timer().snapshot()))


@timer_api.route('/start', methods=['POST'])
def start_timer():
    return jsonify(timer_payload(get_timer().start()))


@timer_api.route('/pause', methods=['POST'])
def pause_timer():
    return jsonify(timer_payload(get_timer().pause()))


@timer_api.route('/reset', methods=['POST'])
def reset_timer():
    return jsonify(timer_payload(get_timer().reset()))


@timer_api.route('/preset', methods=['POST'])
def set_preset():
    data = request.get_json(silent=True) or {}
    seconds = _preset_from_request(data)
    if seconds is None:
        return jsonify({'error': 'Preset must be a positive whole number of seconds or 1-60 minutes'}), 400
    return jsonify(timer_payload(get_timer().set_preset(seconds)))


@timer_api.route('/indicator', methods=['GET'])
def get_indicator():
    expanded = request.args.get('expanded', '').lower() in ('1', 'true', 'yes')
    return jsonify(FloatingIndicator(get_timer(), expanded=expanded).render())


@timer_api.route('/panel', methods=['GET'])
def get_panel():
    return jsonify(timer_panel(get_timer()))
