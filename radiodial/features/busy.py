"""
Busy-channel gate.

Holds a dial back while a shared half-duplex channel is in use.
"""

import logging
import time
from typing import Callable, Optional, Protocol

from ..exceptions import ChannelBusyError

logger = logging.getLogger(__name__)

BUSY_POLL_INTERVAL = 0.3


class BusyChannel(Protocol):
    def busy(self) -> bool: ...


class BusyChannelGate:
    """Polls a channel's busy indicator until it clears."""

    def __init__(
        self,
        ignore_busy: bool = False,
        poll_interval: float = BUSY_POLL_INTERVAL,
        max_wait: Optional[float] = 300.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic
    ) -> None:
        """
        Initialize busy-channel gate.

        Args:
            ignore_busy: Log a busy channel once and proceed anyway
            poll_interval: Seconds between busy polls
            max_wait: Give up after this many seconds (None waits forever)
            sleep: Sleep function (injectable for testing)
            clock: Monotonic clock (injectable for testing)
        """
        self.ignore_busy = ignore_busy
        self.poll_interval = poll_interval
        self.max_wait = max_wait
        self._sleep = sleep
        self._clock = clock

    def wait_clear(self, channel: BusyChannel) -> None:
        """
        Block while the channel reports busy.

        A channel whose busy probe fails is treated as clear.

        Raises:
            ChannelBusyError: If the channel is still busy after max_wait
        """
        deadline = None
        if self.max_wait is not None:
            deadline = self._clock() + self.max_wait
        printed = False

        while self._is_busy(channel):
            if self.ignore_busy:
                logger.warning("Ignoring busy channel!")
                return
            if not printed:
                logger.info("Waiting for clear channel...")
                printed = True
            if deadline is not None and self._clock() >= deadline:
                raise ChannelBusyError(f"Channel still busy after {self.max_wait:.0f}s")
            self._sleep(self.poll_interval)

        if printed:
            logger.info("Channel clear")

    @staticmethod
    def _is_busy(channel: BusyChannel) -> bool:
        try:
            return bool(channel.busy())
        except Exception as e:
            logger.warning(f"Busy-channel check failed, proceeding: {e}")
            return False
