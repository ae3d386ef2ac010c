import os
import sys
import pytest

# Ensure the backend root (containing the `debatify` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from debatify import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    WTF_CSRF_ENABLED = False
    BCRYPT_LOG_ROUNDS = 4
    TIMER_STORAGE_PATH = None
    TIMER_STORAGE_KEY = 'debatify_timer'
    TIMER_DEFAULT_PRESET_SEC = 300


class FakeClock:
    """Settable wall clock in epoch seconds."""

    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import debatify.models  # noqa: F401
        db.create_all()
    # nothing stays pushed; each request gets its own app context
    yield application
    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def timer(flask_app):
    return flask_app.extensions['timer']


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def auth_client(flask_app):
    test_client = flask_app.test_client()
    res = test_client.post('/register', json={
        'email': 'organizer@example.com',
        'password': 'password',
        'full_name': 'Olive Organizer',
    })
    assert res.status_code == 201
    return test_client


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
