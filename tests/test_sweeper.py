import time
from datetime import timedelta

from storefront.app import create_app
from storefront.config import TestConfig
from storefront.services import SessionSweeper


def _make_sessions(app, expired=2):
    with app.app_context():
        store = app.extensions["storefront"]["store"]
        user = store.get_admin_user_by_username("admin")
        live = store.create_session(user["id"])["token"]
        for _ in range(expired):
            store.create_session(user["id"], ttl=timedelta(seconds=-1))
    return live


def test_sweep_once(app):
    live = _make_sessions(app)
    sweeper = SessionSweeper(app, app.extensions["storefront"]["store"], interval=60)
    assert sweeper.sweep_once() == 2
    assert sweeper.sweep_once() == 0
    with app.app_context():
        assert app.extensions["storefront"]["store"].get_session(live) is not None


class RecordingSweeper(SessionSweeper):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.swept = []

    def sweep_once(self):
        removed = super().sweep_once()
        self.swept.append(removed)
        return removed


def test_background_thread_sweeps_and_stops(app):
    _make_sessions(app, expired=3)
    sweeper = RecordingSweeper(app, app.extensions["storefront"]["store"], interval=0.01).start()
    assert sweeper.running

    deadline = time.monotonic() + 2
    while sum(sweeper.swept) < 3 and time.monotonic() < deadline:
        time.sleep(0.02)
    sweeper.stop()

    assert sum(sweeper.swept) == 3
    assert not sweeper.running


def test_app_starts_sweeper_when_enabled():
    class Sweeping(TestConfig):
        SESSION_SWEEP_SECONDS = 60

    app = create_app(Sweeping)
    sweeper = app.extensions["storefront"]["sweeper"]
    try:
        assert sweeper is not None
        assert sweeper.running
    finally:
        sweeper.stop()
    assert not sweeper.running


def test_sweeper_disabled_in_tests(app):
    assert app.extensions["storefront"]["sweeper"] is None
