import os
import sys
import pytest

# Ensure the backend root (containing the `guessnumber` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from guessnumber import create_app, socketio
from guessnumber.services.rounds.engine import RoundEngine


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    # Manual mode: betting stays open until a test resolves the round
    ROUND_DURATION_SEC = 0
    ROUND_TICK_SEC = 1.0
    ALLOWED_ORIGINS = ['http://localhost:5173']
    LOG_LEVEL = 'DEBUG'
    RTP_SIMULATION_WORKERS = 2


class FixedDraw:
    """Draw source that always returns the same number."""

    def __init__(self, value):
        self.value = value
        self.calls = 0

    def draw(self):
        self.calls += 1
        return self.value


class FakeConnection:
    """Records every event sent to it."""

    def __init__(self, conn_id, open_=True, fail=False):
        self.id = conn_id
        self.open = open_
        self.fail = fail
        self.events = []

    def is_open(self):
        return self.open

    def send(self, event):
        if self.fail:
            raise ConnectionError(f'{self.id} is gone')
        self.events.append(event)

    def types(self):
        return [e.type.value for e in self.events]


class FakeClock:

    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def engine(flask_app):
    return flask_app.extensions['round_engine']


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


@pytest.fixture()
def waiting_engine(clock):
    """Timed engine that is never started; tests drive its phases by hand."""
    return RoundEngine(duration=10, draw_source=FixedDraw(5), clock=clock)


@pytest.fixture()
def manual_engine():
    return RoundEngine(duration=0, draw_source=FixedDraw(5))
