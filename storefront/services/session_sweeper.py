import logging
import threading

log = logging.getLogger(__name__)


class SessionSweeper:
    """Daemon thread that drops expired admin sessions every `interval` seconds."""

    def __init__(self, app, store, interval: float):
        self.app = app
        self.store = store
        self.interval = interval
        self._stop = threading.Event()
        self._thread = None

    def sweep_once(self) -> int:
        with self.app.app_context():
            removed = self.store.sweep_expired_sessions()
        if removed:
            log.info("swept %d expired admin session(s)", removed)
        return removed

    def _run(self):
        while not self._stop.wait(self.interval):
            try:
                self.sweep_once()
            except Exception:
                log.exception("session sweep failed")

    def start(self):
        if self._thread is None:
            self._thread = threading.Thread(target=self._run, name="session-sweeper", daemon=True)
            self._thread.start()
        return self

    def stop(self, timeout: float = 2.0):
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
