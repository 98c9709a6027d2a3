"""
radiodial - Connection dispatch and radio-session orchestration.
"""

from .version import __version__
from .dialer import Dialer, DialTicket, ExchangeCallback

from .config import (
    DialerConfig,
    StationConfig,
    ArdopConfig,
    PactorConfig,
    VaraConfig,
    AX25Config,
    SerialTNCConfig,
)

from .types import (
    Scheme,
    ConnectionDescriptor,
    ConnectionRecord,
    Frequency,
)

from .core import (
    ModemHandle,
    SerialModem,
    TcpModem,
    MockModem,
    ModemRegistry,
    CancelToken,
    DialSession,
    StatusNotifier,
    EventLog,
    LoggingEventLog,
    JSONLinesEventLog,
)

from .features import (
    RigHandle,
    RigLookup,
    FrequencyController,
    BusyChannelGate,
    TransportProfile,
    default_profiles,
)

from .exceptions import (
    RadioDialError,
    ParseError,
    InitError,
    RigNotLoadedError,
    QsyError,
    DialError,
    ChannelBusyError,
    DialCancelledError,
    RadioOnlyError,
    ModemError,
)

__all__ = [
    "__version__",
    "Dialer",
    "DialTicket",
    "ExchangeCallback",
    "DialerConfig",
    "StationConfig",
    "ArdopConfig",
    "PactorConfig",
    "VaraConfig",
    "AX25Config",
    "SerialTNCConfig",
    "Scheme",
    "ConnectionDescriptor",
    "ConnectionRecord",
    "Frequency",
    "ModemHandle",
    "SerialModem",
    "TcpModem",
    "MockModem",
    "ModemRegistry",
    "CancelToken",
    "DialSession",
    "StatusNotifier",
    "EventLog",
    "LoggingEventLog",
    "JSONLinesEventLog",
    "RigHandle",
    "RigLookup",
    "FrequencyController",
    "BusyChannelGate",
    "TransportProfile",
    "default_profiles",
    "RadioDialError",
    "ParseError",
    "InitError",
    "RigNotLoadedError",
    "QsyError",
    "DialError",
    "ChannelBusyError",
    "DialCancelledError",
    "RadioOnlyError",
    "ModemError",
]
