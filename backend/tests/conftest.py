import os
import sys
import pytest

# Ensure the backend root (containing the `karaoke_roulette` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from karaoke_roulette import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    ROUND_DURATION_SEC = 7
    TIMER_TICK_SEC = 1
    DEFAULT_LANGUAGE_FILTER = 'ALL'
    CORS_ORIGINS = []


class ManualScheduler:
    """Virtual-time stand-in for the Socket.IO scheduler.

    Nothing runs until the test calls ``advance``; each registered callback
    fires once per elapsed interval, in registration order.
    """

    def __init__(self):
        self.now = 0.0
        self._jobs = []

    class _Job:
        def __init__(self, interval, callback, due):
            self.interval = interval
            self.callback = callback
            self.due = due
            self.cancelled = False

        def cancel(self):
            self.cancelled = True

    def call_every(self, interval, callback):
        job = self._Job(interval, callback, self.now + interval)
        self._jobs.append(job)
        return job

    @property
    def active_jobs(self):
        return [job for job in self._jobs if not job.cancelled]

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            pending = [job for job in self.active_jobs if job.due <= target]
            if not pending:
                break
            job = min(pending, key=lambda j: j.due)
            self.now = job.due
            job.due += job.interval
            job.callback()
        self.now = target


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def flask_app(scheduler):
    application = create_app(TestConfig, scheduler=scheduler)
    with application.app_context():
        # Ensure models are imported so tables are created
        import karaoke_roulette.models  # noqa: F401
        db.create_all()
        yield application
        application.extensions['karaoke_roulette'].shutdown()
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def seeded_words(flask_app):
    from karaoke_roulette.models import KaraokeWord
    rows = [
        KaraokeWord(word='saudade', language='PT'),
        KaraokeWord(word='amor', language='PT', theme='Romance',
                    youtube_url='https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=42'),
        KaraokeWord(word='love', language='EN'),
    ]
    db.session.add_all(rows)
    db.session.commit()
    return rows


@pytest.fixture()
def controller(flask_app):
    return flask_app.extensions['karaoke_roulette']


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
