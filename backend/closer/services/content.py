"""Read-only question and challenge pools.

Loaded once at startup from two JSON files and shared by every room.
"""

import json
import random
from typing import Dict, Iterable, List, Optional, Tuple

from closer.exceptions import ContentError
from closer.models import Challenge, ChallengeCategory, Question


class ContentStore:

    def __init__(self, questions: Iterable[Question], challenges: Iterable[Challenge]):
        self._questions: Tuple[Question, ...] = tuple(questions)
        by_category: Dict[ChallengeCategory, List[Challenge]] = {c: [] for c in ChallengeCategory}
        for challenge in challenges:
            by_category[challenge.category].append(challenge)
        self._challenges = {c: tuple(items) for c, items in by_category.items()}

    @classmethod
    def from_records(cls, question_records, challenge_records):
        questions = []
        seen_ids = set()
        for record in question_records:
            try:
                question = Question(
                    id=record['id'],
                    prompt=record['question'],
                    discussion_prompt=record['discussionPrompt'],
                )
            except (KeyError, TypeError) as exc:
                raise ContentError(f'Malformed question record {record!r}: missing {exc}') from exc
            if question.id in seen_ids:
                raise ContentError(f'Duplicate question id {question.id!r}')
            seen_ids.add(question.id)
            questions.append(question)

        challenges = []
        for record in challenge_records:
            try:
                challenge = Challenge(
                    category=ChallengeCategory(record['type']),
                    content=record['content'],
                )
            except (KeyError, TypeError, ValueError) as exc:
                raise ContentError(f'Malformed challenge record {record!r}: {exc}') from exc
            challenges.append(challenge)
        return cls(questions, challenges)

    @classmethod
    def from_files(cls, questions_path, challenges_path):
        return cls.from_records(_read_json(questions_path), _read_json(challenges_path))

    @property
    def questions(self) -> Tuple[Question, ...]:
        return self._questions

    def challenges(self, category: ChallengeCategory) -> Tuple[Challenge, ...]:
        return self._challenges[category]

    def pick_question(self, used_ids, rng=None) -> Optional[Question]:
        """Uniform pick among questions whose id is not in ``used_ids``.

        Returns None once the pool is exhausted for this room.
        """
        rng = rng or random
        available = [q for q in self._questions if q.id not in used_ids]
        if not available:
            return None
        return rng.choice(available)

    def random_challenge(self, category: ChallengeCategory, rng=None) -> Optional[Challenge]:
        rng = rng or random
        pool = self._challenges[category]
        if not pool:
            return None
        return rng.choice(pool)

    def stats(self):
        return {
            'questions': len(self._questions),
            'challenges': {c.value: len(items) for c, items in self._challenges.items()},
        }


def _read_json(path):
    try:
        with open(path, encoding='utf-8') as fh:
            data = json.load(fh)
    except (OSError, ValueError) as exc:
        raise ContentError(f'Could not read {path}: {exc}') from exc
    if not isinstance(data, list):
        raise ContentError(f'{path} must contain a JSON list')
    return data
