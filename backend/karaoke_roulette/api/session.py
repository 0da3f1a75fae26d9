from flask import Blueprint, current_app, jsonify, request

from karaoke_roulette import get_controller
from karaoke_roulette.services.loader import ensure_catalog_loaded, load_catalog


session_api = Blueprint('session', __name__)


@session_api.before_request
def _ensure_catalog():
    ensure_catalog_loaded(current_app._get_current_object())


@session_api.route('/state', methods=['GET'])
def get_state():
    return jsonify(get_controller().snapshot())


@session_api.route('/history', methods=['GET'])
def get_history():
    return jsonify(get_controller().history.to_list())


@session_api.route('/draw', methods=['POST'])
def draw_word():
    controller = get_controller()
    controller.draw()
    return jsonify(controller.snapshot())


@session_api.route('/skip', methods=['POST'])
def skip_word():
    controller = get_controller()
    controller.skip()
    return jsonify(controller.snapshot())


@session_api.route('/stop', methods=['POST'])
def stop_timer():
    controller = get_controller()
    controller.stop_timer()
    return jsonify(controller.snapshot())


@session_api.route('/validate', methods=['POST'])
def validate_round():
    controller = get_controller()
    controller.validate()
    return jsonify(controller.snapshot())


@session_api.route('/reset-raffle', methods=['POST'])
def reset_raffle():
    controller = get_controller()
    controller.reset_raffle()
    return jsonify(controller.snapshot())


@session_api.route('/reset', methods=['POST'])
def reset_session():
    controller = get_controller()
    controller.reset_session()
    return jsonify(controller.snapshot())


@session_api.route('/filter', methods=['POST'])
def change_filter():
    data = request.get_json(silent=True) or {}
    language = data.get('language')
    if not language:
        return jsonify({'error': 'language is required'}), 400
    try:
        load_catalog(current_app._get_current_object(), language)
    except ValueError as exc:
        return jsonify({'error': str(exc)}), 400
    controller = get_controller()
    # 202 while the fetch is still running in the background
    status = 202 if controller.state.loading else 200
    return jsonify(controller.snapshot()), status
