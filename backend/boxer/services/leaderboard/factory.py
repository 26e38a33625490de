import os

from flask import current_app

from .gateway import SubmissionGateway
from .local_store import DEFAULT_KEY, FileMedium, LocalEphemeralStore
from .ranking import RankingEngine
from .shared_store import SharedDurableStore, run_inline
from .store import DEFAULT_CAPACITY


EXTENSION_KEY = 'leaderboard'


def background_scheduler(app, socketio):
    """Run store housekeeping off the request path.

    - Runs inline in TESTING mode unless ENABLE_BACKGROUND_TRIM_IN_TESTS is set
    - Otherwise hands the task to Socket.IO's background task runner,
      inside a fresh app context so the scoped DB session is usable
    """
    if app.config.get('TESTING') and not app.config.get('ENABLE_BACKGROUND_TRIM_IN_TESTS'):
        return run_inline

    def schedule(task):
        def _worker():
            with app.app_context():
                task()
        socketio.start_background_task(_worker)

    return schedule


def build_store(app, db, model, socketio):
    cfg = app.config
    backend = (cfg.get('LEADERBOARD_BACKEND') or 'shared').lower()
    capacity = int(cfg.get('LEADERBOARD_CAPACITY', DEFAULT_CAPACITY))

    if backend == 'local':
        directory = cfg.get('LEADERBOARD_DATA_DIR') or os.path.join(app.instance_path, 'leaderboard')
        medium = FileMedium(directory, quota_bytes=cfg.get('LOCAL_STORAGE_QUOTA_BYTES'))
        return LocalEphemeralStore(
            medium=medium,
            key=cfg.get('LEADERBOARD_KEY', DEFAULT_KEY),
            capacity=capacity,
            logger=app.logger,
        )
    if backend == 'shared':
        return SharedDurableStore(
            db.session,
            model,
            capacity=capacity,
            list_cap=int(cfg.get('LEADERBOARD_LIST_CAP', 100)),
            schedule=background_scheduler(app, socketio),
            logger=app.logger,
        )
    raise ValueError(f'unknown LEADERBOARD_BACKEND: {backend!r}')


class Leaderboard:
    """Store handle plus the engine and gateway bound to it, built once per app."""

    def __init__(self, store, top_n: int):
        self.store = store
        self.ranking = RankingEngine(store)
        self.gateway = SubmissionGateway(store, ranking=self.ranking, top_n=top_n)


def init_leaderboard(app, db, model, socketio) -> Leaderboard:
    store = build_store(app, db, model, socketio)
    leaderboard = Leaderboard(store, top_n=int(app.config.get('LEADERBOARD_TOP_N', 10)))
    app.extensions[EXTENSION_KEY] = leaderboard
    app.logger.info(f"[leaderboard] backend={store.backend} capacity={store.capacity}")
    return leaderboard


def get_leaderboard() -> Leaderboard:
    return current_app.extensions[EXTENSION_KEY]
