"""
Dial sessions and cancellation.

A DialSession represents one in-flight dial attempt. The blocking transport
dial runs on a worker thread while the calling thread waits for either its
completion or a cancellation request from another thread.
"""

import logging
import threading
import time
from typing import Any, Callable, Optional

from ..exceptions import DialCancelledError, DialError, RadioDialError
from ..types import ConnectionDescriptor, Frequency

logger = logging.getLogger(__name__)

# How often the waiting thread checks for completion or cancellation
DIAL_POLL_INTERVAL = 0.05


class CancelToken:
    """
    Thread-safe cancellation flag handed to modem dial implementations.

    Handles that block should check ``cancelled`` or ``wait()`` on the token
    and give up promptly once it is set.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until cancelled or timeout; returns True if cancelled."""
        return self._event.wait(timeout)

    def __repr__(self) -> str:
        return f"<CancelToken cancelled={self.cancelled}>"


class DialSession:
    """
    One in-flight dial attempt.

    Attributes:
        descriptor: Descriptor being dialed
        token: Cancellation token for the dial
        revert: Frequency revert action obtained by QSY (if any)
        frequency: Rig frequency snapshot taken before dialing (if any)
        started: Monotonic start time
    """

    def __init__(
        self,
        descriptor: ConnectionDescriptor,
        revert: Optional[Callable[[], None]] = None,
        frequency: Optional[Frequency] = None
    ) -> None:
        self.descriptor = descriptor
        self.token = CancelToken()
        self.revert = revert
        self.frequency = frequency
        self.started = time.monotonic()

        self._lock = threading.Lock()
        self._finished = False
        self._abandoned = False

    def cancel(self) -> bool:
        """
        Cancel the dial.

        Returns:
            True if the session was still running, False if it had already
            finished (cancelling a finished session is a no-op)
        """
        with self._lock:
            if self._finished:
                return False
            self.token.cancel()

        logger.info(f"Dial to {self.descriptor.target} cancelled")
        return True

    def finish(self) -> None:
        with self._lock:
            self._finished = True

    @property
    def finished(self) -> bool:
        with self._lock:
            return self._finished

    @property
    def cancelled(self) -> bool:
        return self.token.cancelled

    def run(self, dial: Callable[[CancelToken], Any]) -> Any:
        """
        Run a blocking dial under this session's cancellation token.

        The dial runs on a worker thread. If the token is cancelled before
        the dial returns, this method raises immediately; a stream that
        arrives later is closed by the worker.

        Args:
            dial: Callable taking the CancelToken and returning a stream

        Returns:
            Stream returned by the dial

        Raises:
            DialCancelledError: If the session was cancelled
            DialError: If the dial failed
        """
        if self.token.cancelled:
            raise self._cancelled_error("Dial cancelled before start")

        outcome: dict[str, Any] = {}
        done = threading.Event()

        def worker() -> None:
            try:
                outcome["stream"] = dial(self.token)
            except Exception as e:
                outcome["error"] = e
            finally:
                with self._lock:
                    abandoned = self._abandoned
                    done.set()

            if abandoned and outcome.get("stream") is not None:
                logger.info("Closing stream from abandoned dial")
                close_quietly(outcome["stream"])

        thread = threading.Thread(
            target=worker,
            daemon=True,
            name=f"Dial-{self.descriptor.scheme.value}"
        )
        thread.start()

        while not done.wait(DIAL_POLL_INTERVAL):
            if self.token.cancelled:
                with self._lock:
                    if not done.is_set():
                        self._abandoned = True
                if self._abandoned:
                    raise self._cancelled_error("Dial cancelled")

        error = outcome.get("error")
        if error is None:
            stream = outcome.get("stream")
            if self.token.cancelled:
                # Cancelled between the last poll and completion
                if stream is not None:
                    logger.info("Closing stream from cancelled dial")
                    close_quietly(stream)
                raise self._cancelled_error("Dial cancelled")
            return stream

        if isinstance(error, (DialCancelledError, DialError)):
            raise error
        if self.token.cancelled:
            raise self._cancelled_error(f"Dial cancelled: {error}") from error
        if isinstance(error, RadioDialError):
            raise DialError(
                str(error), scheme=error.scheme, descriptor=error.descriptor
            ) from error
        raise DialError(
            f"Dial failed: {error}",
            scheme=self.descriptor.scheme.value,
            descriptor=self.descriptor.raw
        ) from error

    def _cancelled_error(self, message: str) -> DialCancelledError:
        return DialCancelledError(
            message,
            scheme=self.descriptor.scheme.value,
            descriptor=self.descriptor.raw
        )

    def __repr__(self) -> str:
        return f"<DialSession target={self.descriptor.target} cancelled={self.cancelled}>"


def close_quietly(resource: Any) -> None:
    """Close a resource, logging instead of raising on failure."""
    close = getattr(resource, "close", None)
    if close is None:
        return
    try:
        close()
    except Exception as e:
        logger.warning(f"Failed to close {resource!r}: {e}")
