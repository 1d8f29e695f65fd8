import logging
import threading

logger = logging.getLogger(__name__)


class EventSource(object):
    """
    Dispatches events to registered handlers on the thread that fires them.
    Handlers may be added and removed from any thread.
    """

    def __init__(self):
        self._handlers = []
        self._lock = threading.Lock()

    def __iadd__(self, handler):
        return self.add(handler)

    def __isub__(self, handler):
        return self.remove(handler)

    def add(self, handler):
        with self._lock:
            if handler not in self._handlers:
                self._handlers.append(handler)
        return self

    def remove(self, handler):
        with self._lock:
            if handler in self._handlers:
                self._handlers.remove(handler)
        return self

    def handlers(self):
        with self._lock:
            return tuple(self._handlers)

    def fire(self, *args, **kwargs):
        # handlers may unsubscribe while being notified
        for handler in self.handlers():
            handler(*args, **kwargs)
