import os
import sys
import random
from datetime import datetime, timedelta, timezone
import pytest

# Ensure the backend root (containing the `wordsmith` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from wordsmith import create_app, db, socketio
from wordsmith.services.games import GameService, MemoryRepository, words
from wordsmith.services.games.sql_repository import SqlRepository


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BCRYPT_LOG_ROUNDS = 4
    GAME_STORE = 'sql'
    ROUND_TIME_LIMIT_SEC = 300
    WORDS_PER_ROUND = 5
    MIN_PLAYERS = 2
    MAX_PLAYERS = 5
    MAX_TOTAL_ROUNDS = 10
    DEFAULT_TOTAL_ROUNDS = 3


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start=None):
        self.now = start or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import wordsmith.models  # noqa: F401
        db.create_all()
    # No context is held across the yield: each test-client request pushes
    # its own, so Flask-Login's cached user in `g` stays per request.
    yield application
    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def app_ctx(flask_app):
    """Application context for tests that talk to db.session directly."""
    with flask_app.app_context():
        yield flask_app


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture(params=['memory', 'sql'])
def service(request, clock):
    """GameService over each repository implementation."""
    rng = random.Random(1234)
    draw = lambda n: words.draw(n, rng)
    if request.param == 'memory':
        yield GameService(MemoryRepository(), draw_words=draw, clock=clock)
    else:
        request.getfixturevalue('app_ctx')
        yield GameService(SqlRepository(), draw_words=draw, clock=clock)


@pytest.fixture()
def trio(service):
    """Game with players [A (host), B, C] and three rounds, not started yet."""
    users = [service.register_user(name, 'password') for name in ('Ada', 'Basho', 'Celan')]
    game = service.create_game('Evening verses', 3, [u.id for u in users])
    a, b, c = service.roster(game.id)
    return game, a, b, c
