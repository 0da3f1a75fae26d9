import atexit

import click
from flask import Flask, current_app, jsonify
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
from flask_sqlalchemy import SQLAlchemy

from config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

EXTENSION_KEY = 'karaoke_roulette'

SEED_WORDS = [
    ('amor', 'PT', 'Romance', None),
    ('saudade', 'PT', None, None),
    ('coração', 'PT', 'Romance', None),
    ('mar', 'PT', 'Natureza', None),
    ('love', 'EN', 'Romance', None),
    ('dance', 'EN', None, None),
]


def get_controller(app=None):
    """The session controller bound to ``app`` (defaults to the current app)."""
    app = app or current_app._get_current_object()
    return app.extensions[EXTENSION_KEY]


def create_app(config_class=Config, scheduler=None):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = flask_app.config.get('CORS_ORIGINS', [])
    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from karaoke_roulette.services.raffle import SessionController, SocketIOScheduler
    controller = SessionController(
        scheduler or SocketIOScheduler(socketio),
        round_duration=flask_app.config.get('ROUND_DURATION_SEC', 7),
        language_filter=flask_app.config.get('DEFAULT_LANGUAGE_FILTER', 'ALL'),
        tick_interval=flask_app.config.get('TIMER_TICK_SEC', 1.0),
        logger=flask_app.logger,
    )
    flask_app.extensions[EXTENSION_KEY] = controller
    if not flask_app.config.get('TESTING'):
        atexit.register(controller.shutdown)

    from karaoke_roulette.main import main
    flask_app.register_blueprint(main)

    from karaoke_roulette.api.session import session_api
    flask_app.register_blueprint(session_api, url_prefix='/api/session')

    from karaoke_roulette.api.participants import participants_api
    flask_app.register_blueprint(participants_api, url_prefix='/api/participants')

    from karaoke_roulette.api.words import words_api
    flask_app.register_blueprint(words_api, url_prefix='/api/words')

    from karaoke_roulette.services.raffle import RaffleError

    @flask_app.errorhandler(RaffleError)
    def handle_raffle_error(exc):
        flask_app.logger.info(f"[api-error] {type(exc).__name__}: {exc.message}")
        return jsonify({'error': exc.message, 'state': controller.snapshot()}), exc.status_code

    # Register Socket.IO handlers and forward controller events to /ws clients
    from karaoke_roulette.socketio_events import register_socketio_handlers, broadcast_session_event
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))
    controller.subscribe(broadcast_session_event)

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the words table."""
        from karaoke_roulette.models import KaraokeWord
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            for word, language, theme, youtube_url in SEED_WORDS:
                db.session.add(KaraokeWord(word=word, language=language, theme=theme, youtube_url=youtube_url))

            db.session.commit()
            print('Database has been reset and seeded!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
