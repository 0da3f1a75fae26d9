import random
from typing import Iterable, List, Optional

from .catalog import Word
from .errors import ExhaustedError


class DrawPool:
    """Words of the catalog that have not been drawn since the last reset.

    A drawn word leaves the pool and only comes back through ``reset``.
    """

    def __init__(self, words: Iterable[Word] = (), rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()
        self._words: List[Word] = []
        self._ids = set()
        self.reset(words)

    def reset(self, catalog: Iterable[Word]) -> None:
        self._words = []
        self._ids = set()
        for word in catalog:
            self.add(word)

    def add(self, word: Word) -> bool:
        if word.id in self._ids:
            return False
        self._words.append(word)
        self._ids.add(word.id)
        return True

    def draw(self) -> Word:
        if not self._words:
            raise ExhaustedError('No words left to draw. Reset the raffle to start over.')
        index = self._rng.randrange(len(self._words))
        # swap with the tail so removal is O(1); order inside the pool carries no meaning
        self._words[index], self._words[-1] = self._words[-1], self._words[index]
        word = self._words.pop()
        self._ids.discard(word.id)
        return word

    @property
    def exhausted(self) -> bool:
        return not self._words

    def __contains__(self, word) -> bool:
        return getattr(word, 'id', word) in self._ids

    def __len__(self) -> int:
        return len(self._words)
