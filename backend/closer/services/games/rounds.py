"""Round flow for a two-player room: start, answer barrier, next round.

All three entry points are lenient: an event for a missing room, a room in
the wrong state or from a connection that isn't seated is dropped without
an error reaching the client. Clients are expected to gate these actions.
"""

import logging
import random

from closer.models import MAX_PLAYERS, ChallengeCategory, Room, RoomState
from .scheduler import ScheduledTask, TaskScheduler
from .scoring import score_current_round


logger = logging.getLogger(__name__)

DEFAULT_MATCH_REWARD = 10
DEFAULT_CHALLENGE_DELAY_SEC = 3


class RoomStateMachine:

    def __init__(self, registry, content, broadcaster, scheduler=None, rng=None,
                 match_reward=DEFAULT_MATCH_REWARD, challenge_delay=DEFAULT_CHALLENGE_DELAY_SEC):
        self.registry = registry
        self.content = content
        self.broadcaster = broadcaster
        self.scheduler = scheduler or TaskScheduler()
        self.rng = rng or random.Random()
        self.match_reward = match_reward
        self.challenge_delay = challenge_delay

    def start_game(self, room_code) -> None:
        with self.registry.locked(room_code) as room:
            if room is None or len(room.players) < MAX_PLAYERS or room.state is not RoomState.WAITING:
                logger.debug(f"[start-ignored] code={room_code}")
                return
            room.state = RoomState.PLAYING
            room.round_number = 1
            self._deal_question(room, 'game-started')
            logger.info(f"[game-started] code={room_code}")

    def next_round(self, room_code) -> None:
        with self.registry.locked(room_code) as room:
            if room is None or room.state is not RoomState.PLAYING:
                logger.debug(f"[next-round-ignored] code={room_code}")
                return
            room.round_number += 1
            self._deal_question(room, 'next-question')

    def submit_answer(self, room_code, connection_id, answer) -> None:
        """Record an answer; reveal once both seated players have answered.

        A second answer from the same player before the reveal replaces the
        first. Answers arriving after the reveal are ignored until the next
        round starts.
        """
        task = None
        with self.registry.locked(room_code) as room:
            if room is None or room.state is not RoomState.PLAYING or room.current_question is None:
                logger.debug(f"[answer-ignored] code={room_code} sid={connection_id}")
                return
            if room.find_player(connection_id) is None or room.revealed:
                logger.debug(f"[answer-ignored] code={room_code} sid={connection_id}")
                return
            room.pending_answers[connection_id] = answer
            if not room.all_answered():
                return

            result = score_current_round(room, self.match_reward)
            room.revealed = True
            self.broadcaster.to_room(room.code, 'answers-revealed', result.to_dict())
            logger.info(
                f"[barrier] code={room.code} round={room.round_number} match={result.match} score={result.score}"
            )
            task = ScheduledTask(f"challenge:{room.code}:{room.round_number}",
                                 self.challenge_delay, self._deliver_challenge, room.code)
            room.tasks.add(task)
        # Started outside the room lock; an inline scheduler re-enters it
        if task is not None:
            self.scheduler.start(task)

    def _deal_question(self, room: Room, event: str) -> None:
        question = self.content.pick_question(room.used_question_ids, self.rng)
        if question is None:
            room.state = RoomState.FINISHED
            rounds = room.round_number - 1
            self.broadcaster.to_room(room.code, 'game-over', {'score': room.score, 'rounds': rounds})
            logger.info(f"[finish] code={room.code} score={room.score} rounds={rounds}")
            return
        room.begin_round(question)
        self.broadcaster.to_room(room.code, event, {
            'question': question.to_dict(),
            'round': room.round_number,
        })

    def _deliver_challenge(self, task, room_code) -> None:
        with self.registry.locked(room_code) as room:
            if room is None:
                logger.info(f"[challenge-abort] code={room_code} room closed")
                return
            room.tasks.discard(task)
            if task.cancelled:
                return
            category = self.rng.choice(list(ChallengeCategory))
            challenge = self.content.random_challenge(category, self.rng)
            if challenge is None:
                logger.warning(f"[challenge-skip] code={room_code} no challenges for category={category.value}")
                return
            self.broadcaster.to_room(room_code, 'challenge-time', challenge.to_dict())
