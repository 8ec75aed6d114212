import logging
import threading

logger = logging.getLogger(__name__)


class Debouncer:
    """Runs only the last call of a burst, `delay` seconds after it was made.

    Each call cancels the pending one. A timer that already started running
    is not interrupted; callers that care about superseded work must check
    for it themselves.
    """

    def __init__(self, delay):
        self.delay = delay
        self._cond = threading.Condition()
        self._timer = None
        self._token = None
        self._running = 0

    def call(self, fn, *args):
        with self._cond:
            self._cancel_locked()
            token = object()
            self._token = token
            self._timer = threading.Timer(self.delay, self._fire, args=(token, fn, args))
            self._timer.daemon = True
            self._timer.start()

    def cancel(self):
        with self._cond:
            self._cancel_locked()
            self._cond.notify_all()

    @property
    def pending(self):
        with self._cond:
            return self._token is not None

    @property
    def busy(self):
        with self._cond:
            return self._token is not None or self._running > 0

    def wait_idle(self, timeout=None):
        """Block until nothing is scheduled or running. False on timeout."""
        with self._cond:
            return self._cond.wait_for(
                lambda: self._token is None and self._running == 0, timeout)

    def _cancel_locked(self):
        if self._timer is not None:
            self._timer.cancel()
        self._timer = None
        self._token = None

    def _fire(self, token, fn, args):
        with self._cond:
            if token is not self._token:
                return
            self._timer = None
            self._token = None
            self._running += 1
        try:
            fn(*args)
        except Exception:
            logger.exception('Debounced call failed')
        finally:
            with self._cond:
                self._running -= 1
                self._cond.notify_all()
