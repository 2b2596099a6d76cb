import logging
import threading
from typing import Callable, Dict, List, Optional

log = logging.getLogger(__name__)


class Subscription:
    """
    Handle returned for every registered callback.

    Releasing it detaches the callback exactly once; further calls are no-ops,
    so owners can release unconditionally on teardown.
    """

    def __init__(self, release: Callable[[], None]) -> None:
        self._release: Optional[Callable[[], None]] = release
        self._lock = threading.Lock()

    def release(self) -> None:
        with self._lock:
            release, self._release = self._release, None
        if release is not None:
            release()


class Listeners:
    """
    Registry of callbacks, optionally grouped by key.

    Callbacks registered without a key are notified for every emission, keyed
    callbacks only when their key is part of the emitted set.
    """

    def __init__(self) -> None:
        self._callbacks: Dict[Optional[str], List[Callable]] = {}
        self._lock = threading.Lock()

    def listen(self, callback: Callable, key: Optional[str] = None) -> Subscription:
        """
        Register a callback.

        :param callback: function to invoke on emission
        :param key: only notify when this key changed, None for every change
        :return: subscription that removes the callback when released
        """
        with self._lock:
            self._callbacks.setdefault(key, []).append(callback)
        return Subscription(lambda: self._unlisten(callback, key))

    def _unlisten(self, callback: Callable, key: Optional[str]) -> None:
        with self._lock:
            callbacks = self._callbacks.get(key, [])
            if callback in callbacks:
                callbacks.remove(callback)

    def count(self) -> int:
        with self._lock:
            return sum(len(callbacks) for callbacks in self._callbacks.values())

    def emit(self, *args, keys=None) -> None:
        """
        Notify registered callbacks.

        :param args: positional arguments passed to every callback
        :param keys: changed keys; keyed callbacks outside this set are skipped
        """
        with self._lock:
            targets = list(self._callbacks.get(None, []))
            for key in keys or ():
                targets.extend(self._callbacks.get(key, []))

        for cb in targets:
            try:
                cb(*args)
            except Exception as e:
                log.error("Error in listener callback %s: %s", getattr(cb, "__name__", cb), e)
