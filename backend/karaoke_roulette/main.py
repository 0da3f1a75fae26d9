from flask import Blueprint, jsonify, request

from karaoke_roulette.services.playback import parse_media_url

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the karaoke roulette server!'})

@main.route('/api/playback')
def playback():
    """Resolve a media URL into the embeddable video id and start offset."""
    url = request.args.get('url')
    if not url:
        return jsonify({'error': 'url is required'}), 400
    parsed = parse_media_url(url)
    if parsed is None:
        return jsonify({'error': 'No playable video found in url'}), 404
    return jsonify(parsed.to_dict())
