from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Optional, Tuple


class LanguageFilter(str, Enum):
    ALL = 'ALL'
    PT = 'PT'

    @classmethod
    def parse(cls, value) -> 'LanguageFilter':
        """Accept an enum member or its name in any case; unknown values raise ValueError."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or '').strip().upper())
        except ValueError:
            raise ValueError(f"Unknown language filter: {value!r}") from None

    @property
    def language(self) -> Optional[str]:
        """Storage-level language value for the filter, None for no restriction."""
        return None if self is LanguageFilter.ALL else self.value

    def matches(self, word: 'Word') -> bool:
        return self is LanguageFilter.ALL or word.language == self.value


@dataclass(frozen=True)
class Word:
    id: int
    text: str
    language: Optional[str] = None
    theme: Optional[str] = None
    media_url: Optional[str] = None

    def to_dict(self):
        return {
            'id': self.id,
            'word': self.text,
            'language': self.language,
            'theme': self.theme,
            'youtube_url': self.media_url,
        }


class WordCatalog:
    """All words available under the current language filter.

    The catalog is replaced wholesale when the filter changes and grows by
    one when the admin inserts a word matching the filter. Ids are unique:
    on replace the first occurrence wins, a duplicate append is ignored.
    """

    def __init__(self, words: Iterable[Word] = (), language_filter: LanguageFilter = LanguageFilter.ALL):
        self.language_filter = language_filter
        self._words: Tuple[Word, ...] = ()
        self._ids = set()
        self.replace(words, language_filter)

    def replace(self, words: Iterable[Word], language_filter: Optional[LanguageFilter] = None) -> None:
        if language_filter is not None:
            self.language_filter = language_filter
        unique = []
        seen = set()
        for word in words:
            if word.id in seen:
                continue
            seen.add(word.id)
            unique.append(word)
        self._words = tuple(unique)
        self._ids = seen

    def append(self, word: Word) -> bool:
        if word.id in self._ids:
            return False
        self._words = self._words + (word,)
        self._ids.add(word.id)
        return True

    def __contains__(self, word) -> bool:
        return getattr(word, 'id', word) in self._ids

    def __iter__(self) -> Iterator[Word]:
        return iter(self._words)

    def __len__(self) -> int:
        return len(self._words)
