"""Session orchestration.

One ``SessionController`` owns the whole raffle: catalog, draw pool, round
timer, history and scoreboard. Those parts never talk to each other; every
cross-cutting step (draw then record then start the clock, validate then
score) happens here so it can be exercised without a transport layer.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from .catalog import LanguageFilter, Word, WordCatalog
from .errors import ExhaustedError, InvalidStateError, RaffleError
from .history import RoundHistory
from .pool import DrawPool
from .scoreboard import Participant, ScoreBoard
from .timer import RoundTimer


@dataclass
class SessionState:
    current_word: Optional[Word] = None
    error_message: Optional[str] = None
    loading: bool = False
    saving: bool = False
    playback_url: Optional[str] = None


class SessionController:

    def __init__(self, scheduler, round_duration: int = 7, language_filter=LanguageFilter.ALL,
                 tick_interval: float = 1.0, rng=None, clock: Callable[[], float] = time.time,
                 logger: Optional[logging.Logger] = None):
        self._lock = threading.RLock()
        self._logger = logger or logging.getLogger(__name__)
        self._listeners: List[Callable] = []
        self._load_token = 0
        self.round_duration = int(round_duration)
        self.language_filter = LanguageFilter.parse(language_filter)
        self.catalog_requested = False
        self.catalog = WordCatalog(language_filter=self.language_filter)
        self.pool = DrawPool(rng=rng)
        self.history = RoundHistory(clock=clock)
        self.scoreboard = ScoreBoard()
        self.timer = RoundTimer(
            scheduler,
            tick_interval=tick_interval,
            on_change=self._on_timer_change,
            lock=self._lock,
            logger=self._logger,
        )
        self.state = SessionState()

    # ---- observers ----

    def subscribe(self, listener: Callable) -> None:
        """Register ``listener(event, payload)`` for state changes."""
        with self._lock:
            self._listeners.append(listener)

    def _notify(self, event: str = 'state_update', payload=None) -> None:
        if payload is None:
            payload = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(event, payload)
            except Exception:
                self._logger.exception(f"[notify-failed] event={event}")

    def _on_timer_change(self, event: str, timer: RoundTimer) -> None:
        if event == 'expired':
            self._notify('time_up', self.snapshot())
        else:
            self._notify('timer_tick', timer.to_dict())

    # ---- errors ----

    def _record_error(self, exc: RaffleError) -> None:
        self.state.error_message = exc.message
        self._notify()

    def _require_catalog_ready(self) -> None:
        if self.state.loading:
            exc = InvalidStateError('Words are still loading. Try again in a moment.')
            self._record_error(exc)
            raise exc

    # ---- rounds ----

    def draw(self) -> Word:
        with self._lock:
            self._require_catalog_ready()
            if self.state.current_word is not None and self.timer.running and not self.pool.exhausted:
                exc = InvalidStateError('A round is already running. Stop or skip it first.')
                self._record_error(exc)
                raise exc
            try:
                word = self.pool.draw()
            except ExhaustedError as exc:
                self.state.current_word = None
                self.state.playback_url = None
                self.timer.reset()
                self._logger.info(f"[draw] pool exhausted catalog={len(self.catalog)}")
                self._record_error(exc)
                raise
            self.state.error_message = None
            self.state.playback_url = None
            self.state.current_word = word
            self.history.record(word)
            self.timer.start(self.round_duration)
            self._logger.info(f"[draw] word={word.id} remaining_pool={len(self.pool)}")
            self._notify()
            return word

    def skip(self) -> None:
        """Drop the current word. It stays consumed and recorded as unvalidated."""
        with self._lock:
            self.timer.stop()
            skipped = self.state.current_word
            self.state.current_word = None
            self.state.playback_url = None
            if skipped is not None:
                self._logger.info(f"[skip] word={skipped.id}")
            self._notify()

    def stop_timer(self) -> bool:
        with self._lock:
            stopped = self.timer.stop()
            if stopped:
                self._notify()
            return stopped

    def validate(self) -> Optional[str]:
        """Close the round as a hit.

        The first validation of a draw marks its history entry and credits the
        active participant; repeating it changes nothing. Returns the media
        URL requested for playback, if any. The word stays on screen until
        the operator skips or draws again.
        """
        with self._lock:
            word = self.state.current_word
            if word is None:
                return None
            self._require_catalog_ready()
            self.timer.stop()
            if not self.history.mark_latest_validated(word):
                self._notify()
                return None
            active = self.scoreboard.active
            if active is not None:
                self.scoreboard.adjust(active.id, 1)
                self._logger.info(f"[validate] word={word.id} participant={active.id} score={active.score}")
            else:
                self._logger.info(f"[validate] word={word.id} no active participant")
            if word.media_url:
                self.state.playback_url = word.media_url
                self._notify('playback_requested', {'media_url': word.media_url, 'word_id': word.id})
            self._notify()
            return word.media_url

    # ---- resets ----

    def _reset_round_state(self) -> None:
        self.pool.reset(self.catalog)
        self.state.current_word = None
        self.state.playback_url = None
        self.state.error_message = None
        self.timer.reset()
        self.history.clear()

    def reset_raffle(self) -> None:
        with self._lock:
            self._reset_round_state()
            self._logger.info(f"[reset-raffle] pool={len(self.pool)}")
            self._notify()

    def reset_session(self) -> None:
        with self._lock:
            self._reset_round_state()
            self.scoreboard.clear()
            self._logger.info(f"[reset-session] pool={len(self.pool)}")
            self._notify()

    # ---- catalog ----

    def begin_catalog_load(self, language_filter) -> int:
        """Mark the catalog as being replaced and return the request token.

        Only the result carrying the latest token is applied; anything older
        belongs to a superseded filter selection.
        """
        with self._lock:
            self.language_filter = LanguageFilter.parse(language_filter)
            self._load_token += 1
            self.catalog_requested = True
            self.state.loading = True
            self.state.error_message = None
            self._logger.info(f"[catalog-load] filter={self.language_filter.value} token={self._load_token}")
            self._notify()
            return self._load_token

    def apply_catalog(self, token: int, words: Iterable[Word]) -> bool:
        with self._lock:
            if token != self._load_token:
                self._logger.info(f"[catalog-stale] token={token} current={self._load_token}")
                return False
            self.state.loading = False
            self.on_catalog_changed(words)
            return True

    def fail_catalog_load(self, token: int, exc: RaffleError) -> bool:
        with self._lock:
            if token != self._load_token:
                self._logger.info(f"[catalog-stale] token={token} current={self._load_token} (failed)")
                return False
            self.state.loading = False
            self._record_error(exc)
            return True

    def on_catalog_changed(self, words: Iterable[Word]) -> None:
        """Swap in the catalog for the current filter and restart the raffle.

        Participants and their scores are not touched.
        """
        with self._lock:
            self.catalog.replace(words, self.language_filter)
            self._reset_round_state()
            self._logger.info(f"[catalog-changed] filter={self.language_filter.value} words={len(self.catalog)}")
            self._notify()

    def begin_word_insert(self) -> None:
        with self._lock:
            self.state.saving = True
            self.state.error_message = None
            self._notify()

    def add_word_to_catalog(self, word: Word) -> bool:
        """Make a freshly stored word drawable right away when it fits the filter."""
        with self._lock:
            self.state.saving = False
            added = False
            if self.language_filter.matches(word) and self.catalog.append(word):
                self.pool.add(word)
                added = True
            self._logger.info(f"[word-insert] word={word.id} in_catalog={added}")
            self._notify()
            return added

    def fail_word_insert(self, exc: RaffleError) -> None:
        with self._lock:
            self.state.saving = False
            self._record_error(exc)

    # ---- participants ----

    def add_participant(self, name) -> Participant:
        with self._lock:
            try:
                participant = self.scoreboard.add(name)
            except RaffleError as exc:
                self._record_error(exc)
                raise
            self._notify()
            return participant

    def adjust_score(self, participant_id, delta: int) -> Optional[Participant]:
        with self._lock:
            participant = self.scoreboard.adjust(participant_id, delta)
            if participant is not None:
                self._notify()
            return participant

    def set_active(self, participant_id) -> Optional[Participant]:
        with self._lock:
            participant = self.scoreboard.set_active(participant_id)
            self._notify()
            return participant

    def remove_participant(self, participant_id) -> bool:
        with self._lock:
            removed = self.scoreboard.remove(participant_id)
            if removed:
                self._notify()
            return removed

    # ---- lifecycle ----

    def snapshot(self):
        with self._lock:
            word = self.state.current_word
            return {
                'current_word': word.to_dict() if word else None,
                'timer': self.timer.to_dict(),
                'round_duration': self.round_duration,
                'error_message': self.state.error_message,
                'loading': self.state.loading,
                'saving': self.state.saving,
                'language_filter': self.language_filter.value,
                'playback_url': self.state.playback_url,
                'catalog_size': len(self.catalog),
                'pool_size': len(self.pool),
                'history': self.history.to_list(),
                'scoreboard': self.scoreboard.to_dict(),
            }

    def shutdown(self) -> None:
        """Cancel the countdown and orphan any catalog fetch still in flight."""
        with self._lock:
            self.timer.reset()
            self._load_token += 1
            self.state.loading = False
            self._listeners.clear()
            self._logger.info("[shutdown] session closed")
