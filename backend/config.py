import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))
DATA_DIR = os.path.join(BASE_DIR, 'closer', 'data')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma-separated list; '*' allows any origin
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    # Static content, loaded once at startup
    QUESTIONS_PATH = os.environ.get('QUESTIONS_PATH') or os.path.join(DATA_DIR, 'questions.json')
    CHALLENGES_PATH = os.environ.get('CHALLENGES_PATH') or os.path.join(DATA_DIR, 'challenges.json')
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '6'))
    # Points awarded when both answers match
    MATCH_REWARD = int(os.environ.get('MATCH_REWARD', '10'))
    # Pause between the answer reveal and the challenge (seconds)
    CHALLENGE_DELAY_SEC = float(os.environ.get('CHALLENGE_DELAY_SEC', '3'))
    PORT = int(os.environ.get('PORT', '3001'))
