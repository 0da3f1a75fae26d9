from flask import Blueprint, jsonify, request

from karaoke_roulette import get_controller
from karaoke_roulette.services.raffle import UnknownParticipantError


participants_api = Blueprint('participants', __name__)


def _scoreboard_payload(controller):
    return jsonify(controller.scoreboard.to_dict())


@participants_api.route('', methods=['GET'])
def list_participants():
    return _scoreboard_payload(get_controller())


@participants_api.route('', methods=['POST'])
def add_participant():
    data = request.get_json(silent=True) or {}
    participant = get_controller().add_participant(data.get('name'))
    return jsonify(participant.to_dict()), 201


@participants_api.route('/<int:participant_id>/score', methods=['POST'])
def adjust_score(participant_id):
    data = request.get_json(silent=True) or {}
    delta = data.get('delta', 1)
    if isinstance(delta, bool) or not isinstance(delta, int):
        return jsonify({'error': 'delta must be an integer'}), 400
    participant = get_controller().adjust_score(participant_id, delta)
    if participant is None:
        raise UnknownParticipantError(f'Participant {participant_id} not found')
    return jsonify(participant.to_dict())


@participants_api.route('/<int:participant_id>/active', methods=['POST'])
def set_active(participant_id):
    controller = get_controller()
    if controller.set_active(participant_id) is None:
        raise UnknownParticipantError(f'Participant {participant_id} not found')
    return _scoreboard_payload(controller)


@participants_api.route('/active', methods=['DELETE'])
def clear_active():
    controller = get_controller()
    controller.set_active(None)
    return _scoreboard_payload(controller)


@participants_api.route('/<int:participant_id>', methods=['DELETE'])
def remove_participant(participant_id):
    controller = get_controller()
    if not controller.remove_participant(participant_id):
        raise UnknownParticipantError(f'Participant {participant_id} not found')
    return _scoreboard_payload(controller)
