import os
import random
import sys
import pytest

# Ensure the backend root (containing the `closer` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from closer import create_app, socketio
from closer.broadcast import Broadcaster
from closer.models import Challenge, ChallengeCategory, Question
from closer.services.content import ContentStore
from closer.services.games import RoomStateMachine, TaskScheduler
from closer.services.rooms import RoomRegistry
from config import Config


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret'
    CHALLENGE_DELAY_SEC = 0


class RecordingBroadcaster(Broadcaster):
    """Keeps every outbound event and room subscription in memory."""

    def __init__(self):
        self.events = []
        self.members = {}

    def enter(self, connection_id, room_code):
        self.members.setdefault(room_code, set()).add(connection_id)

    def leave(self, connection_id, room_code):
        self.members.get(room_code, set()).discard(connection_id)

    def to_room(self, room_code, event, payload):
        self.events.append((room_code, event, payload))

    def to_connection(self, connection_id, event, payload):
        self.events.append((connection_id, event, payload))

    def named(self, event):
        return [payload for _, name, payload in self.events if name == event]


class RecordingSleep:

    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


def make_questions(count):
    return [
        Question(id=i, prompt=f'Question {i}?', discussion_prompt=f'Discuss {i}.')
        for i in range(1, count + 1)
    ]


def make_challenges():
    return [
        Challenge(category=category, content=f'{category.value} challenge {n}')
        for category in ChallengeCategory
        for n in range(2)
    ]


@pytest.fixture()
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture()
def content():
    return ContentStore(make_questions(3), make_challenges())


@pytest.fixture()
def registry(broadcaster):
    return RoomRegistry(broadcaster, rng=random.Random(7))


@pytest.fixture()
def sleep():
    return RecordingSleep()


@pytest.fixture()
def rounds(registry, content, broadcaster, sleep):
    return RoomStateMachine(
        registry,
        content,
        broadcaster,
        scheduler=TaskScheduler(sleep=sleep),
        rng=random.Random(11),
    )


@pytest.fixture()
def full_room(registry):
    """A room with two seated players: sid-a (Ana) and sid-b (Ben)."""
    code, _ = registry.create_room('sid-a', 'Ana')
    registry.join_room(code, 'sid-b', 'Ben')
    return code


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    clients = []

    def _connect():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace='/ws'
        )
        clients.append(test_client)
        return test_client

    yield _connect
    for test_client in clients:
        try:
            if test_client.is_connected('/ws'):
                test_client.disconnect(namespace='/ws')
        except RuntimeError:
            pass
