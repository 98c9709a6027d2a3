"""
Connection event log.

Receives one record per dial attempt. Writes are best-effort; the dialer
logs and ignores event-log failures.
"""

import json
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional, Union

from ..types import ConnectionRecord, Frequency

logger = logging.getLogger(__name__)


class EventLog(ABC):
    """Abstract base class for connection event logs."""

    def log_connection(
        self,
        connect_str: str,
        frequency: Optional[Frequency],
        stream: Any,
        error: Optional[BaseException]
    ) -> ConnectionRecord:
        """
        Record the outcome of one dial attempt.

        Args:
            connect_str: Descriptor string, prefixed with the action
            frequency: Rig frequency at attempt time (None if unknown)
            stream: Resulting stream (None on failure)
            error: Error raised by the dial (None on success)

        Returns:
            The written ConnectionRecord
        """
        record = ConnectionRecord(
            descriptor=connect_str,
            frequency=frequency,
            success=error is None and stream is not None,
            error=str(error) if error is not None else None,
        )
        self.write(record)
        return record

    @abstractmethod
    def write(self, record: ConnectionRecord) -> None:
        """Persist a record."""
        pass


class LoggingEventLog(EventLog):
    """Event log writing through the ``radiodial.events`` logger."""

    def __init__(self, name: str = "radiodial.events") -> None:
        self._logger = logging.getLogger(name)

    def write(self, record: ConnectionRecord) -> None:
        freq = str(record.frequency) if record.frequency is not None else "-"
        outcome = "ok" if record.success else f"failed: {record.error}"
        self._logger.info(
            f"{record.descriptor} [{freq}] {outcome}",
            extra={"connection": record.to_dict()}
        )


class JSONLinesEventLog(EventLog):
    """Event log appending one JSON object per line to a file."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def write(self, record: ConnectionRecord) -> None:
        line = json.dumps(record.to_dict())
        with self._lock:
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        logger.debug(f"Wrote event to {self.path}")
