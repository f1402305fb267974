from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, NewType, Optional, Set
import random
import string
import threading

# Socket.IO session id of a connected client
ConnectionId = NewType('ConnectionId', str)

MAX_PLAYERS = 2
ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits


class RoomState(str, Enum):
    WAITING = 'waiting'
    PLAYING = 'playing'
    FINISHED = 'finished'


class ChallengeCategory(str, Enum):
    LIGHT = 'light'
    ROMANTIC = 'romantic'
    DEEP = 'deep'


def generate_room_code(length=6, rng=None):
    """Generate a short room code. Uniqueness is checked by the registry."""
    rng = rng or random
    return ''.join(rng.choices(ROOM_CODE_ALPHABET, k=length))


@dataclass(frozen=True)
class Question:
    id: int
    prompt: str
    discussion_prompt: str

    def to_dict(self):
        return {
            'id': self.id,
            'question': self.prompt,
            'discussionPrompt': self.discussion_prompt,
        }


@dataclass(frozen=True)
class Challenge:
    category: ChallengeCategory
    content: str

    def to_dict(self):
        return {
            'type': self.category.value,
            'content': self.content,
        }


@dataclass
class Player:
    connection_id: ConnectionId
    name: str

    def to_dict(self):
        return {
            'id': self.connection_id,
            'name': self.name,
            'socketId': self.connection_id,
        }


@dataclass(eq=False)
class Room:
    code: str
    players: List[Player] = field(default_factory=list)
    state: RoomState = RoomState.WAITING
    used_question_ids: Set[int] = field(default_factory=set)
    current_question: Optional[Question] = None
    pending_answers: Dict[ConnectionId, str] = field(default_factory=dict)
    score: int = 0
    round_number: int = 0
    # Runtime bookkeeping, never sent to clients
    revealed: bool = False
    closed: bool = False
    tasks: set = field(default_factory=set)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def is_full(self):
        return len(self.players) >= MAX_PLAYERS

    def find_player(self, connection_id) -> Optional[Player]:
        for player in self.players:
            if player.connection_id == connection_id:
                return player
        return None

    def remove_player(self, connection_id) -> Optional[Player]:
        player = self.find_player(connection_id)
        if player is None:
            return None
        self.players.remove(player)
        self.pending_answers.pop(connection_id, None)
        return player

    def begin_round(self, question: Question) -> None:
        self.used_question_ids.add(question.id)
        self.current_question = question
        self.pending_answers = {}
        self.revealed = False

    def all_answered(self):
        """True once every seat of a full room has a pending answer."""
        if len(self.players) < MAX_PLAYERS:
            return False
        return all(p.connection_id in self.pending_answers for p in self.players)

    def players_payload(self):
        return [p.to_dict() for p in self.players]
