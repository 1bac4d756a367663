"""
Idle-timeout controller for admin sessions.

Mirrors the back office behaviour: after `idle_timeout` seconds without a
qualifying interaction the admin is logged out and sent to the login page.
`warning_lead` seconds before that a warning with a countdown is shown; any
interaction, or an explicit "stay logged in", resets the window.

The controller is pure state plus a clock. `tick()` advances it, and
`start()` drives `tick()` from a single RepeatingTimer that `close()`
cancels.
"""
import logging
import threading
import time
from typing import Callable, Optional

log = logging.getLogger(__name__)

ACTIVITY_EVENTS = frozenset({"mousedown", "mousemove", "keypress", "keydown", "scroll", "touchstart", "click"})
LOGIN_PATH = "/admin/login"


def format_countdown(seconds: int) -> str:
    mins, secs = divmod(max(0, int(seconds)), 60)
    return f"{mins}:{secs:02d}"


class RepeatingTimer:
    """Calls `fn` every `interval` seconds on a daemon thread until cancelled."""

    def __init__(self, interval: float, fn: Callable[[], None]):
        self.interval = interval
        self.fn = fn
        self._cancelled = threading.Event()
        self._thread = threading.Thread(target=self._run, name="idle-timer", daemon=True)

    def _run(self):
        while not self._cancelled.wait(self.interval):
            try:
                self.fn()
            except Exception:
                log.exception("idle timer callback failed")

    def start(self):
        self._thread.start()
        return self

    def cancel(self):
        self._cancelled.set()
        if self._thread.is_alive() and threading.current_thread() is not self._thread:
            self._thread.join(self.interval + 1)

    @property
    def active(self) -> bool:
        return self._thread.is_alive() and not self._cancelled.is_set()


class IdleSessionController:
    def __init__(
        self,
        on_logout: Callable[[], None],
        on_redirect: Callable[[str], None],
        idle_timeout: float = 15 * 60,
        warning_lead: float = 2 * 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        if warning_lead >= idle_timeout:
            raise ValueError("warning_lead must be shorter than idle_timeout")
        self.on_logout = on_logout
        self.on_redirect = on_redirect
        self.idle_timeout = idle_timeout
        self.warning_lead = warning_lead
        self.clock = clock
        self._lock = threading.RLock()
        self._last_activity = clock()
        self._timer: Optional[RepeatingTimer] = None
        self.warning_shown = False
        self.logged_out = False

    @classmethod
    def from_config(cls, config, on_logout, on_redirect, **kw):
        """Idle window taken from the server session TTL so the two cannot drift."""
        return cls(on_logout, on_redirect,
                   idle_timeout=config["SESSION_TTL_MINUTES"] * 60,
                   warning_lead=config["SESSION_WARNING_SECONDS"], **kw)

    @property
    def remaining(self) -> float:
        with self._lock:
            if self.logged_out:
                return 0.0
            return max(0.0, self.idle_timeout - (self.clock() - self._last_activity))

    @property
    def countdown(self) -> int:
        """Whole seconds left, as shown in the warning dialog."""
        return int(-(-self.remaining // 1))

    def countdown_label(self) -> str:
        return format_countdown(self.countdown)

    def _reset(self):
        self._last_activity = self.clock()
        self.warning_shown = False

    def record_activity(self, event: str) -> bool:
        """Reset the idle window for qualifying interaction events."""
        if event not in ACTIVITY_EVENTS:
            return False
        with self._lock:
            if self.logged_out:
                return False
            self._reset()
        return True

    def stay_logged_in(self):
        with self._lock:
            if not self.logged_out:
                self._reset()

    def tick(self) -> str:
        """Advance the state machine; returns "active", "warning" or "logged_out"."""
        with self._lock:
            if self.logged_out:
                return "logged_out"
            left = self.remaining
            if left > 0:
                self.warning_shown = left <= self.warning_lead
                return "warning" if self.warning_shown else "active"
            self.logged_out = True
            self.warning_shown = False
        self._expire()
        return "logged_out"

    def _expire(self):
        self.stop()
        try:
            self.on_logout()
        except Exception:
            log.exception("auto logout failed")
        self.on_redirect(LOGIN_PATH)

    def start(self, interval: float = 1.0):
        with self._lock:
            if self._timer is None:
                self._reset()
                self._timer = RepeatingTimer(interval, self.tick).start()
        return self

    def stop(self):
        with self._lock:
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()

    close = stop

    @property
    def running(self) -> bool:
        return self._timer is not None
