from flask import Blueprint, current_app, jsonify, request

from karaoke_roulette import get_controller
from karaoke_roulette.services.loader import ensure_catalog_loaded, save_word


words_api = Blueprint('words', __name__)


@words_api.before_request
def _ensure_catalog():
    ensure_catalog_loaded(current_app._get_current_object())


@words_api.route('', methods=['GET'])
def list_words():
    """Words of the current catalog (respecting the language filter)."""
    controller = get_controller()
    return jsonify({
        'language_filter': controller.language_filter.value,
        'loading': controller.state.loading,
        'words': [w.to_dict() for w in controller.catalog],
    })


@words_api.route('', methods=['POST'])
def add_word():
    data = request.get_json(silent=True) or {}
    word = save_word(
        current_app._get_current_object(),
        data.get('word'),
        language=data.get('language'),
        theme=data.get('theme'),
        media_url=data.get('youtube_url'),
    )
    controller = get_controller()
    return jsonify({
        'word': word.to_dict(),
        'in_catalog': word in controller.catalog,
        'pool_size': len(controller.pool),
    }), 201
