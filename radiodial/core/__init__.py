"""
Core dialing infrastructure.

Provides the low-level building blocks the Dialer coordinates:
- Transport: Modem handle abstraction and generic handles
- Registry: One live modem handle per scheme
- Session: Cancellable dial attempts
- Status: Non-blocking dialing-state notifications
- Events: Per-attempt connection records
"""

from .transport import (
    ModemHandle,
    SerialModem,
    SerialStream,
    TcpModem,
    MockModem,
    MockStream,
)
from .registry import ModemRegistry
from .session import CancelToken, DialSession
from .status import StatusNotifier, StatusCallback
from .events import EventLog, LoggingEventLog, JSONLinesEventLog

__all__ = [
    "ModemHandle",
    "SerialModem",
    "SerialStream",
    "TcpModem",
    "MockModem",
    "MockStream",
    "ModemRegistry",
    "CancelToken",
    "DialSession",
    "StatusNotifier",
    "StatusCallback",
    "EventLog",
    "LoggingEventLog",
    "JSONLinesEventLog",
]
