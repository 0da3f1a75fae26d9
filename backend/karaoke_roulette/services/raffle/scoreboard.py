import itertools
from dataclasses import dataclass
from typing import Dict, Optional

from .errors import ValidationError


@dataclass
class Participant:
    id: int
    name: str
    score: int = 0

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'score': self.score}


class ScoreBoard:
    """Participants and their scores, with at most one active participant.

    The active reference does not own anything: removing the active
    participant clears it and no one else gets promoted.
    """

    def __init__(self):
        self._participants: Dict[int, Participant] = {}
        self._ids = itertools.count(1)
        self.active_id: Optional[int] = None

    def add(self, name) -> Participant:
        if name is not None and not isinstance(name, str):
            raise ValidationError('Participant name must be text')
        name = (name or '').strip()
        if not name:
            raise ValidationError('Participant name is required')
        participant = Participant(id=next(self._ids), name=name)
        self._participants[participant.id] = participant
        if self.active_id is None:
            self.active_id = participant.id
        return participant

    def adjust(self, participant_id, delta: int) -> Optional[Participant]:
        participant = self._participants.get(participant_id)
        if participant is None:
            return None
        participant.score += int(delta)
        return participant

    def set_active(self, participant_id) -> Optional[Participant]:
        participant = self._participants.get(participant_id)
        self.active_id = participant.id if participant else None
        return participant

    def remove(self, participant_id) -> bool:
        if self._participants.pop(participant_id, None) is None:
            return False
        if self.active_id == participant_id:
            self.active_id = None
        return True

    def clear(self) -> None:
        self._participants.clear()
        self.active_id = None

    def get(self, participant_id) -> Optional[Participant]:
        return self._participants.get(participant_id)

    @property
    def active(self) -> Optional[Participant]:
        if self.active_id is None:
            return None
        return self._participants.get(self.active_id)

    def to_dict(self):
        return {
            'participants': [p.to_dict() for p in self._participants.values()],
            'active_id': self.active_id,
        }

    def __contains__(self, participant_id) -> bool:
        return participant_id in self._participants

    def __len__(self) -> int:
        return len(self._participants)
