from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

socketio = SocketIO(async_mode=None)


def _allowed_origins(value):
    if not value or value == '*':
        return '*'
    return [origin.strip() for origin in value.split(',') if origin.strip()]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = _allowed_origins(flask_app.config.get('CORS_ORIGINS'))
    CORS(flask_app, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from closer.broadcast import SocketIOBroadcaster
    from closer.services.content import ContentStore
    from closer.services.games import RoomStateMachine, TaskScheduler
    from closer.services.rooms import RoomRegistry

    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/ws')
    content = ContentStore.from_files(
        flask_app.config['QUESTIONS_PATH'],
        flask_app.config['CHALLENGES_PATH'],
    )
    broadcaster = SocketIOBroadcaster(socketio, namespace=namespace)
    registry = RoomRegistry(broadcaster, code_length=flask_app.config.get('ROOM_CODE_LENGTH', 6))

    # Run delayed tasks inline in tests for determinism
    if flask_app.config.get('TESTING'):
        scheduler = TaskScheduler(sleep=socketio.sleep)
    else:
        scheduler = TaskScheduler(spawn=socketio.start_background_task, sleep=socketio.sleep)

    flask_app.extensions['closer'] = {
        'content': content,
        'broadcaster': broadcaster,
        'registry': registry,
        'rounds': RoomStateMachine(
            registry,
            content,
            broadcaster,
            scheduler=scheduler,
            match_reward=flask_app.config.get('MATCH_REWARD', 10),
            challenge_delay=flask_app.config.get('CHALLENGE_DELAY_SEC', 3),
        ),
    }
    flask_app.logger.info(
        f"[content-loaded] questions={len(content.questions)} namespace={namespace}"
    )

    from closer.main import main
    flask_app.register_blueprint(main)

    # Importing here ensures the handlers bind to the initialized socketio instance
    from closer.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=namespace)

    @click.command('content-check')
    def content_check_command():
        """Loads the question and challenge files and prints their sizes."""
        stats = content.stats()
        click.echo(f"questions: {stats['questions']}")
        for category, count in stats['challenges'].items():
            click.echo(f"challenges[{category}]: {count}")

    flask_app.cli.add_command(content_check_command)

    return flask_app
