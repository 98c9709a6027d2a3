"""
Dialing features.

Provides the components the Dialer drives for each attempt:
- profiles: Scheme-specific transport behaviour
- frequency: QSY/QSX rig control
- busy: Busy-channel gate
"""

from .profiles import (
    TransportProfile,
    ArdopProfile,
    PactorProfile,
    VaraProfile,
    AX25Profile,
    SerialTNCProfile,
    TelnetProfile,
    Opener,
    default_profiles,
    RADIO_ONLY_SUFFIX,
)
from .frequency import RigHandle, RigLookup, FrequencyController, QSY_SETTLE_DELAY, QSX_DELAY
from .busy import BusyChannelGate, BUSY_POLL_INTERVAL

__all__ = [
    "TransportProfile",
    "ArdopProfile",
    "PactorProfile",
    "VaraProfile",
    "AX25Profile",
    "SerialTNCProfile",
    "TelnetProfile",
    "Opener",
    "default_profiles",
    "RADIO_ONLY_SUFFIX",
    "RigHandle",
    "RigLookup",
    "FrequencyController",
    "QSY_SETTLE_DELAY",
    "QSX_DELAY",
    "BusyChannelGate",
    "BUSY_POLL_INTERVAL",
]
