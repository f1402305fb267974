from flask import current_app, request
from typing import Any, Optional

from closer.exceptions import CloserError


def _get_sid() -> str:
    return request.sid  # type: ignore


def _services():
    return current_app.extensions['closer']


def _room_code(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        value = value.get('roomCode')
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip().upper()


def _player_name(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        value = value.get('playerName')
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")


def handle_disconnect(reason=None):
    sid = _get_sid()
    room_code = _services()['registry'].remove_player(sid)
    current_app.logger.info(f"[disconnect] sid={sid} room={room_code}")


def handle_create_room(data):
    name = _player_name(data)
    if not name:
        return
    sid = _get_sid()
    services = _services()
    room_code, player = services['registry'].create_room(sid, name)
    services['broadcaster'].to_connection(
        sid, 'room-created', {'roomCode': room_code, 'player': player.to_dict()})


def handle_join_room(data):
    room_code = _room_code(data)
    name = _player_name(data)
    if not room_code or not name:
        return
    sid = _get_sid()
    services = _services()
    try:
        services['registry'].join_room(room_code, sid, name)
    except CloserError as exc:
        current_app.logger.info(f"[join-error] sid={sid} room={room_code} {exc.message}")
        services['broadcaster'].to_connection(sid, 'error', {'message': exc.message})


def handle_start_game(data):
    room_code = _room_code(data)
    if room_code:
        _services()['rounds'].start_game(room_code)


def handle_submit_answer(data):
    if not isinstance(data, dict):
        return
    room_code = _room_code(data)
    answer = data.get('answer')
    if not room_code or answer is None:
        return
    _services()['rounds'].submit_answer(room_code, _get_sid(), str(answer))


def handle_next_round(data):
    room_code = _room_code(data)
    if room_code:
        _services()['rounds'].next_round(room_code)


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers on the game namespace."""
    from closer import socketio

    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('create-room', handle_create_room, namespace=namespace)
    socketio.on_event('join-room', handle_join_room, namespace=namespace)
    socketio.on_event('start-game', handle_start_game, namespace=namespace)
    socketio.on_event('submit-answer', handle_submit_answer, namespace=namespace)
    socketio.on_event('next-round', handle_next_round, namespace=namespace)
