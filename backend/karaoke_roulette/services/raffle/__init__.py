"""Raffle session core: word pool, round timer, history and scoreboard.

Pure Python with no Flask imports, so HTTP routes and socket handlers can
share it and tests can drive it with a virtual clock.
"""

from .catalog import LanguageFilter, Word, WordCatalog
from .controller import SessionController, SessionState
from .errors import (
    ExhaustedError,
    InvalidStateError,
    RaffleError,
    StorageError,
    UnknownParticipantError,
    ValidationError,
)
from .history import HistoryEntry, RoundHistory
from .pool import DrawPool
from .scoreboard import Participant, ScoreBoard
from .timer import RoundTimer, SocketIOScheduler, TimerState
