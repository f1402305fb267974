"""Room registry: creation, lookup, membership and deletion of rooms.

Locking: every room has its own mutex; the registry lock only guards the
code -> room map and the connection -> code index and is held briefly.
Callers may take the registry lock while holding a room lock, never the
other way round.
"""

from contextlib import contextmanager
from typing import Dict, Iterator, Optional, Tuple
import logging
import threading

from closer.exceptions import RoomFull, RoomNotFound
from closer.models import ConnectionId, Player, Room, generate_room_code


logger = logging.getLogger(__name__)


class RoomRegistry:

    def __init__(self, broadcaster, code_length=6, code_generator=None, rng=None):
        self._broadcaster = broadcaster
        self._code_length = code_length
        self._rng = rng
        self._code_generator = code_generator or self._default_code
        self._lock = threading.Lock()
        self._rooms: Dict[str, Room] = {}
        # Secondary index so disconnects don't scan every room
        self._seats: Dict[ConnectionId, str] = {}

    def _default_code(self):
        return generate_room_code(self._code_length, self._rng)

    # ---- lookups ----

    def get(self, room_code) -> Optional[Room]:
        with self._lock:
            return self._rooms.get(room_code)

    def room_of(self, connection_id) -> Optional[str]:
        with self._lock:
            return self._seats.get(connection_id)

    def room_count(self) -> int:
        with self._lock:
            return len(self._rooms)

    @contextmanager
    def locked(self, room_code) -> Iterator[Optional[Room]]:
        """Yield the live room with its mutex held, or None if it is gone."""
        room = self.get(room_code)
        if room is None:
            yield None
            return
        with room.lock:
            yield None if room.closed else room

    # ---- lifecycle ----

    def create_room(self, connection_id, creator_name) -> Tuple[str, Player]:
        self._vacate(connection_id)
        player = Player(connection_id=connection_id, name=creator_name)
        with self._lock:
            code = self._code_generator()
            while code in self._rooms:
                logger.warning(f"[room-code-collision] code={code} regenerating")
                code = self._code_generator()
            room = Room(code=code, players=[player])
            self._rooms[code] = room
            self._seats[connection_id] = code
            self._broadcaster.enter(connection_id, code)
        logger.info(f"[room-created] code={code} sid={connection_id}")
        return code, player

    def join_room(self, room_code, connection_id, player_name) -> Player:
        """Seat a second player.

        Raises RoomNotFound or RoomFull, leaving any room the connection sits
        in untouched. On success every member receives the updated player
        list, and the connection then leaves its previous room.
        """
        previous = self.room_of(connection_id)
        with self.locked(room_code) as room:
            if room is None:
                raise RoomNotFound(room_code)
            existing = room.find_player(connection_id)
            if existing is not None:
                return existing
            if room.is_full:
                logger.info(f"[join-rejected] code={room_code} sid={connection_id} room full")
                raise RoomFull(room_code)
            player = Player(connection_id=connection_id, name=player_name)
            room.players.append(player)
            with self._lock:
                self._seats[connection_id] = room_code
            self._broadcaster.enter(connection_id, room_code)
            self._broadcaster.to_room(room_code, 'player-joined', {'players': room.players_payload()})
            logger.info(f"[player-joined] code={room_code} sid={connection_id} players={len(room.players)}")
        # The seat is taken; only now give up the old one
        if previous is not None and previous != room_code:
            self._remove_from(previous, connection_id)
        return player

    def delete_room(self, room_code) -> None:
        room = self.get(room_code)
        if room is None:
            return
        with room.lock:
            if room.closed:
                return
            with self._lock:
                self._close(room)
            for player in room.players:
                self._broadcaster.leave(player.connection_id, room_code)

    def remove_player(self, connection_id) -> Optional[str]:
        """Drop a connection from its room. Empty rooms are deleted.

        Returns the code of the room the connection was in, if any.
        """
        room_code = self.room_of(connection_id)
        if room_code is None:
            return None
        return self._remove_from(room_code, connection_id)

    # ---- internals ----

    def _remove_from(self, room_code, connection_id) -> Optional[str]:
        with self.locked(room_code) as room:
            if room is None:
                self._drop_seat(connection_id, room_code)
                return None
            player = room.remove_player(connection_id)
            with self._lock:
                if self._seats.get(connection_id) == room_code:
                    del self._seats[connection_id]
                if not room.players:
                    self._close(room)
            if player is None:
                return None
            self._broadcaster.leave(connection_id, room_code)
            if room.players:
                self._broadcaster.to_room(room_code, 'player-left', {'players': room.players_payload()})
                logger.info(f"[player-left] code={room_code} sid={connection_id} players={len(room.players)}")
            return room_code

    def _drop_seat(self, connection_id, room_code) -> None:
        with self._lock:
            if self._seats.get(connection_id) == room_code:
                del self._seats[connection_id]

    def _vacate(self, connection_id) -> None:
        if self.room_of(connection_id) is not None:
            self.remove_player(connection_id)

    def _close(self, room: Room) -> None:
        # Caller holds room.lock and self._lock
        room.closed = True
        for task in list(room.tasks):
            task.cancel()
        room.tasks.clear()
        if self._rooms.get(room.code) is room:
            del self._rooms[room.code]
        for player in room.players:
            if self._seats.get(player.connection_id) == room.code:
                del self._seats[player.connection_id]
        logger.info(f"[room-deleted] code={room.code}")
