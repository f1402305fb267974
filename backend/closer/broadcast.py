"""Outbound side of the Socket.IO gateway.

Room services talk to clients only through a ``Broadcaster`` so they can run
without a live Socket.IO server.
"""


class Broadcaster:

    def enter(self, connection_id, room_code):
        raise NotImplementedError

    def leave(self, connection_id, room_code):
        raise NotImplementedError

    def to_room(self, room_code, event, payload):
        raise NotImplementedError

    def to_connection(self, connection_id, event, payload):
        raise NotImplementedError


class SocketIOBroadcaster(Broadcaster):
    """Delivers events through a Flask-SocketIO server.

    Works from request handlers and from background tasks alike, since it
    addresses connections by sid instead of relying on the request context.
    """

    def __init__(self, socketio, namespace='/ws'):
        self.socketio = socketio
        self.namespace = namespace

    def enter(self, connection_id, room_code):
        self.socketio.server.enter_room(connection_id, room_code, namespace=self.namespace)

    def leave(self, connection_id, room_code):
        self.socketio.server.leave_room(connection_id, room_code, namespace=self.namespace)

    def to_room(self, room_code, event, payload):
        self.socketio.emit(event, payload, to=room_code, namespace=self.namespace)

    def to_connection(self, connection_id, event, payload):
        self.socketio.emit(event, payload, to=connection_id, namespace=self.namespace)
