"""Errors raised by the room services.

Only ``RoomNotFound`` and ``RoomFull`` ever reach a client; the gateway turns
them into an ``error`` event carrying ``message``.
"""


class CloserError(Exception):
    """Base class for game server errors."""
    message = 'Something went wrong'

    def __init__(self, message=None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class RoomNotFound(CloserError):
    message = 'Room not found'

    def __init__(self, room_code):
        self.room_code = room_code
        super().__init__()


class RoomFull(CloserError):
    message = 'Room is full'

    def __init__(self, room_code):
        self.room_code = room_code
        super().__init__()


class ContentError(CloserError):
    """Question or challenge data could not be loaded."""
