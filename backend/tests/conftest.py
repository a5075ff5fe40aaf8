import os
import sys
import pytest

# Ensure the backend root (containing the `scramble` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from scramble import create_app, socketio, bcrypt
from scramble.services.rounds import TargetWordEntry, WordCatalog

ADMIN_KEY = 'let-me-in'


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    TARGETS_PATH = None
    DICTIONARY_PATH = None
    ADMIN_KEY_HASH = None
    PRIORITY_WORDS = []
    LEVEL_CLEAR_DELAY_SEC = 0
    ADMIN_SKIP_DELAY_SEC = 0
    ADMIN_DEBOUNCE_MS = 0
    RESHUFFLE_INTERVAL_SEC = 0
    TARGET_QUOTA = 1
    BCRYPT_LOG_ROUNDS = 4


TARGET_LINES = ['word,count', 'stream', 'master', 'masters', 'steam', 'team', 'mates', 'teams', 'meats']
DICTIONARY_LINES = [w.upper() for w in TARGET_LINES[1:]] + ['TAMES']


@pytest.fixture()
def flask_app(tmp_path):
    targets = tmp_path / 'targets.csv'
    targets.write_text('\n'.join(TARGET_LINES) + '\n')
    dictionary = tmp_path / 'dictionary.txt'
    dictionary.write_text('\n'.join(DICTIONARY_LINES) + '\n')

    class WordListConfig(TestConfig):
        TARGETS_PATH = str(targets)
        DICTIONARY_PATH = str(dictionary)

    application = create_app(WordListConfig)
    application.config['ADMIN_KEY_HASH'] = bcrypt.generate_password_hash(ADMIN_KEY).decode('utf-8')
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def admin_headers():
    return {'X-Admin-Key': ADMIN_KEY}


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


def make_catalog(*words, ineligible=()):
    """Catalog in the given order; rank is the position."""
    return WordCatalog.from_entries(
        TargetWordEntry(word=w, rank=i, eligible=w not in ineligible) for i, w in enumerate(words)
    )


@pytest.fixture()
def catalog_of():
    return make_catalog


class RecordingDefer:
    """Stands in for the timer driver: keeps continuations until run."""

    def __init__(self):
        self.calls = []

    def __call__(self, delay, fn):
        self.calls.append((delay, fn))

    def run_all(self):
        calls, self.calls = self.calls, []
        for _, fn in calls:
            fn()


@pytest.fixture()
def recording_defer():
    return RecordingDefer()
