from dataclasses import dataclass
from typing import List, Optional

from closer.models import Room


def normalize_answer(answer) -> str:
    return str(answer).strip().casefold()


def answers_match(first, second) -> bool:
    """Exact comparison after trimming and case-folding; no fuzzy matching."""
    return normalize_answer(first) == normalize_answer(second)


@dataclass
class RoundResult:
    match: bool
    answers: List[dict]
    score: int
    discussion_prompt: Optional[str]

    def to_dict(self):
        return {
            'match': self.match,
            'answers': self.answers,
            'score': self.score,
            'discussionPrompt': self.discussion_prompt,
        }


def score_current_round(room: Room, reward: int) -> RoundResult:
    """Apply scoring for the current round of a full room.

    +reward to the shared score when both answers match. The discussion
    prompt is only handed out when they don't.
    """
    first, second = (room.pending_answers[p.connection_id] for p in room.players)
    match = answers_match(first, second)
    if match:
        room.score += reward
    return RoundResult(
        match=match,
        answers=[
            {'name': p.name, 'answer': room.pending_answers[p.connection_id]}
            for p in room.players
        ],
        score=room.score,
        discussion_prompt=None if match else room.current_question.discussion_prompt,
    )
