import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Iterator, Optional

from .catalog import Word


@dataclass
class HistoryEntry:
    word_id: int
    text: str
    language: Optional[str]
    theme: Optional[str]
    drawn_at: float
    validated: bool = False

    def to_dict(self):
        return {
            'id': self.word_id,
            'word': self.text,
            'language': self.language,
            'theme': self.theme,
            'drawn_at': self.drawn_at,
            'validated': self.validated,
        }


class RoundHistory:
    """Drawn words, newest first. Entries are never reordered."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._entries: Deque[HistoryEntry] = deque()

    def record(self, word: Word) -> HistoryEntry:
        entry = HistoryEntry(
            word_id=word.id,
            text=word.text,
            language=word.language,
            theme=word.theme,
            drawn_at=self._clock(),
        )
        self._entries.appendleft(entry)
        return entry

    def mark_latest_validated(self, word: Word) -> bool:
        """Validate the newest entry if it belongs to ``word``.

        Returns True only when the flag actually flipped, so callers can use
        it to credit a round once.
        """
        latest = self.latest
        if latest is None or latest.word_id != word.id or latest.validated:
            return False
        latest.validated = True
        return True

    def clear(self) -> None:
        self._entries.clear()

    @property
    def latest(self) -> Optional[HistoryEntry]:
        return self._entries[0] if self._entries else None

    def to_list(self):
        return [entry.to_dict() for entry in self._entries]

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
