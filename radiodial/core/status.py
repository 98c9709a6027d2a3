"""
Dialing status notifications.

Pushes "currently dialing" changes to subscribers (e.g. a web UI) from a
dispatcher thread so the dialer never blocks on a slow presentation layer.
"""

import logging
import threading
from collections import deque
from typing import Callable, Deque, List, Optional

from ..types import ConnectionDescriptor

logger = logging.getLogger(__name__)

# Callback receives the descriptor being dialed, or None when idle
StatusCallback = Callable[[Optional[ConnectionDescriptor]], None]


class StatusNotifier:
    """
    Non-blocking status sink.

    Features:
    - Bounded queue (oldest updates dropped when full)
    - Dispatcher thread started lazily on first publish
    - Error isolation between misbehaving callbacks
    """

    def __init__(self, max_queue_size: int = 100) -> None:
        """
        Initialize status notifier.

        Args:
            max_queue_size: Maximum number of undelivered updates to keep
        """
        self._queue: Deque[Optional[ConnectionDescriptor]] = deque(maxlen=max_queue_size)
        self._callbacks: List[StatusCallback] = []
        self._current: Optional[ConnectionDescriptor] = None

        self._lock = threading.Lock()
        self._wakeup = threading.Event()
        self._idle = threading.Event()
        self._idle.set()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

        logger.debug(f"Initialized status notifier (max_queue_size={max_queue_size})")

    def subscribe(self, callback: StatusCallback) -> None:
        with self._lock:
            self._callbacks.append(callback)
        logger.info("Registered status callback")

    def unsubscribe(self, callback: StatusCallback) -> bool:
        """
        Remove a callback.

        Returns:
            True if callback was removed, False if not found
        """
        with self._lock:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                return False
        logger.info("Unregistered status callback")
        return True

    @property
    def current(self) -> Optional[ConnectionDescriptor]:
        """Most recently published value."""
        with self._lock:
            return self._current

    def publish(self, value: Optional[ConnectionDescriptor]) -> None:
        """
        Publish a new dialing state. Never blocks on subscribers.

        Args:
            value: Descriptor being dialed, or None when idle
        """
        with self._lock:
            self._current = value
            self._queue.append(value)
            self._idle.clear()

        logger.debug(f"Status update: dialing={value}")
        self.start()
        self._wakeup.set()

    def start(self) -> None:
        """Start the dispatcher thread if it is not running."""
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return
            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._dispatch_loop,
                daemon=True,
                name="StatusDispatcherThread"
            )
            self._thread.start()

    def stop(self) -> None:
        """Stop the dispatcher thread, delivering nothing further."""
        self._stop_event.set()
        self._wakeup.set()
        thread = self._thread
        if thread is not None:
            thread.join(timeout=1.0)
            if thread.is_alive():
                logger.warning("Status dispatcher did not terminate in time")
        self._thread = None

    def flush(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until all queued updates have been delivered.

        Returns:
            True if the queue drained before the timeout
        """
        return self._idle.wait(timeout)

    def _dispatch_loop(self) -> None:
        while not self._stop_event.is_set():
            self._wakeup.wait(0.5)
            self._wakeup.clear()

            while True:
                with self._lock:
                    if not self._queue:
                        self._idle.set()
                        break
                    value = self._queue.popleft()
                    callbacks = list(self._callbacks)

                for callback in callbacks:
                    try:
                        callback(value)
                    except Exception as e:
                        logger.error(f"Status callback failed: {e}", exc_info=True)
