import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from karaoke_roulette import db
from karaoke_roulette.models import KaraokeWord
from karaoke_roulette.services.raffle import LanguageFilter, StorageError, ValidationError, Word


def _blank_to_none(value) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


class WordStore:
    """Word table access for the raffle: filtered fetch and admin insert.

    Database failures surface as ``StorageError`` with an operator-facing
    message; the session is rolled back so the next request starts clean.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger(__name__)

    def fetch_words(self, language_filter=LanguageFilter.ALL) -> List[Word]:
        language_filter = LanguageFilter.parse(language_filter)
        query = KaraokeWord.query
        if language_filter.language is not None:
            query = query.filter_by(language=language_filter.language)
        try:
            rows = query.order_by(KaraokeWord.word.asc(), KaraokeWord.id.asc()).all()
        except SQLAlchemyError as exc:
            db.session.rollback()
            self._logger.error(f"[storage-fetch] filter={language_filter.value} failed: {exc}")
            raise StorageError('Could not load words. Check the database connection and permissions.') from exc
        return [row.to_word() for row in rows]

    def insert_word(self, word, language=None, theme=None, media_url=None) -> Word:
        if word is not None and not isinstance(word, str):
            raise ValidationError('Word must be text')
        text = (word or '').strip()
        if not text:
            raise ValidationError('Word is required')
        language = _blank_to_none(language)
        row = KaraokeWord(
            word=text,
            language=language.upper() if language else None,
            theme=_blank_to_none(theme),
            youtube_url=_blank_to_none(media_url),
        )
        try:
            db.session.add(row)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            self._logger.error(f"[storage-insert] word={text!r} failed: {exc}")
            raise StorageError('Could not save the word. Check the database permissions.') from exc
        return row.to_word()
