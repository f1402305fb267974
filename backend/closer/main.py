from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


@main.route('/')
def index():
    registry = current_app.extensions['closer']['registry']
    return jsonify({'status': 'Closer Game Server Running', 'rooms': registry.room_count()})


@main.route('/health')
def health():
    return jsonify({'status': 'ok'})
