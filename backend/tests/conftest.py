import os
import sys
import pytest

# Ensure the backend root (containing the `quizdini` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from quizdini import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ORIGINS = '*'
    MATCH_CACHE_ENABLED = True
    TIMER_INTERVAL_MS = 1000
    BOARD_ENTER_DELAY_MS = 500
    ROUND_SETTLE_MS = 500
    GAME_OVER_SETTLE_MS = 1000


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import quizdini.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


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
def seed_match(flask_app):
    """Factory that stores a match (and its author) and returns the match id."""
    from quizdini.models import Match, User

    def _seed(pairs, match_id='abc123', title='Capitals', options=None, author='Mr. Smith'):
        user = User(title='Mr.', last_name='Smith', author=author)
        db.session.add(user)
        match = Match(
            match_id=match_id,
            title=title,
            instructions='Match each country to its capital.',
            options=options if options is not None else {'colorScheme': 'mono', 'duration': 10, 'itemsPerBoard': 2},
            pairs=pairs,
            user=user,
        )
        db.session.add(match)
        db.session.commit()
        return match.match_id

    return _seed
