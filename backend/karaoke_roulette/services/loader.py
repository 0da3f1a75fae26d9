"""Catalog fetch and word insert, wired between the store and the session.

The fetch runs as a Socket.IO background task so a slow database never
blocks the request that switched the filter; in TESTING it runs inline for
deterministic control flow. Results are keyed by the controller's load
token, so a late answer for an older filter is dropped.
"""

from karaoke_roulette import get_controller, socketio
from karaoke_roulette.services.raffle import RaffleError, StorageError, Word
from karaoke_roulette.services.storage import WordStore


def load_catalog(app, language_filter) -> int:
    controller = get_controller(app)
    store = WordStore(logger=app.logger)
    token = controller.begin_catalog_load(language_filter)
    selected = controller.language_filter

    def _worker(tok: int, flt):
        with app.app_context():
            try:
                words = store.fetch_words(flt)
            except StorageError as exc:
                controller.fail_catalog_load(tok, exc)
                return
            controller.apply_catalog(tok, words)

    if app.config.get('TESTING') and not app.config.get('ASYNC_CATALOG_LOAD_IN_TESTS'):
        _worker(token, selected)
    else:
        socketio.start_background_task(_worker, token, selected)
    return token


def ensure_catalog_loaded(app) -> None:
    """Trigger the first load for the configured default filter."""
    controller = get_controller(app)
    if not controller.catalog_requested:
        load_catalog(app, controller.language_filter)


def save_word(app, word, language=None, theme=None, media_url=None) -> Word:
    controller = get_controller(app)
    store = WordStore(logger=app.logger)
    controller.begin_word_insert()
    try:
        saved = store.insert_word(word, language=language, theme=theme, media_url=media_url)
    except RaffleError as exc:
        controller.fail_word_insert(exc)
        raise
    except Exception:
        app.logger.exception(f"[word-insert] unexpected failure word={word!r}")
        controller.fail_word_insert(StorageError('Could not save the word.'))
        raise
    controller.add_word_to_catalog(saved)
    return saved
