from karaoke_roulette import db
from karaoke_roulette.services.raffle import Word


class KaraokeWord(db.Model):
    __tablename__ = 'karaoke_words'
    id = db.Column(db.Integer, primary_key=True)
    word = db.Column(db.String(128), nullable=False, index=True)
    language = db.Column(db.String(8), nullable=True, index=True)  # PT, EN, or empty
    theme = db.Column(db.String(128), nullable=True)
    youtube_url = db.Column(db.String(512), nullable=True)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    def to_word(self) -> Word:
        """Immutable view handed to the raffle core."""
        return Word(
            id=self.id,
            text=self.word,
            language=self.language,
            theme=self.theme,
            media_url=self.youtube_url,
        )
