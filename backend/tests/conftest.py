import os
import sys
import logging
import pytest

# Ensure the backend root (containing the `boxer` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from boxer import create_app, db
from boxer.services.leaderboard import FileMedium, LocalEphemeralStore, MemoryMedium, SharedDurableStore


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LEADERBOARD_BACKEND = 'shared'
    LEADERBOARD_CAPACITY = 100
    LEADERBOARD_LIST_CAP = 100
    LEADERBOARD_TOP_N = 10
    PUNCH_INPUT_MAX_LENGTH = 50


class FakeJudge:
    """Stands in for the generative model; returns queued verdicts."""

    def __init__(self):
        self.verdicts = []
        self.inputs = []

    def queue(self, verdict):
        self.verdicts.append(verdict)

    def judge(self, user_input):
        self.inputs.append(user_input)
        verdict = self.verdicts.pop(0)
        if isinstance(verdict, Exception):
            raise verdict
        return verdict


def _make_app(config_class):
    application = create_app(config_class)
    application.extensions['punch_judge'] = FakeJudge()
    return application


@pytest.fixture()
def flask_app():
    application = _make_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import boxer.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def local_app(tmp_path):
    class LocalConfig(TestConfig):
        LEADERBOARD_BACKEND = 'local'
        LEADERBOARD_DATA_DIR = str(tmp_path / 'leaderboard')

    application = _make_app(LocalConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def local_client(local_app):
    return local_app.test_client()


@pytest.fixture()
def judge(flask_app):
    return flask_app.extensions['punch_judge']


@pytest.fixture()
def shared_store(flask_app):
    from boxer.models import LeaderboardRow
    return SharedDurableStore(db.session, LeaderboardRow, logger=logging.getLogger('tests.shared'))


@pytest.fixture()
def local_store(tmp_path):
    return LocalEphemeralStore(FileMedium(str(tmp_path / 'device')), logger=logging.getLogger('tests.local'))


@pytest.fixture(params=['local', 'shared'])
def any_store(request):
    """Each test using this runs once per store implementation."""
    if request.param == 'local':
        return LocalEphemeralStore(MemoryMedium())
    return request.getfixturevalue('shared_store')
