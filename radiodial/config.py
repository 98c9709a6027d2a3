"""
Configuration for radiodial.

Plain dataclasses handed to the Dialer and its collaborators. Loading them
from files or the command line is left to the embedding application.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class StationConfig:
    """Identity of the local station."""
    mycall: str
    locator: str = ""


@dataclass
class ArdopConfig:
    """ARDOP TNC settings."""
    addr: str = "localhost:8515"
    arq_bandwidth: Optional[str] = None  # e.g. "500MAX"; None keeps TNC default
    cwid: bool = True
    ptt_control: bool = False
    rig: str = ""


@dataclass
class PactorConfig:
    """PACTOR modem settings."""
    path: str = "/dev/ttyUSB0"
    baudrate: int = 57600
    init_script: str = ""   # Path to a file of init commands, one per line
    rig: str = ""


@dataclass
class VaraConfig:
    """VARA HF/FM modem settings."""
    host: str = "localhost"
    cmd_port: int = 8300
    data_port: int = 8301
    ptt_control: bool = False
    rig: str = ""


@dataclass
class AX25Config:
    """AX.25 settings."""
    port: str = "wl2k"
    rig: str = ""


@dataclass
class SerialTNCConfig:
    """Serial KISS TNC settings."""
    path: str = "/dev/ttyUSB0"
    hbaud: int = 1200
    serial_baud: int = 9600


@dataclass
class DialerConfig:
    """
    Top-level configuration for the Dialer.

    Attributes:
        station: Local station identity
        aliases: Connect aliases (name -> descriptor string)
        radio_only: Default radio-only mode for every dial
        ignore_busy: Dial even if the channel is reported busy
        busy_timeout: Give up waiting for a clear channel after this many
            seconds (None waits forever)

    Openers receive the whole DialerConfig. Connection settings for the
    protocol stacks this package does not implement (ArdopConfig.addr,
    VaraConfig.host/cmd_port/data_port, StationConfig.locator) are read
    only by the openers the caller supplies to the Dialer.
    """
    station: StationConfig
    ardop: ArdopConfig = field(default_factory=ArdopConfig)
    pactor: PactorConfig = field(default_factory=PactorConfig)
    varahf: VaraConfig = field(default_factory=VaraConfig)
    varafm: VaraConfig = field(default_factory=VaraConfig)
    ax25: AX25Config = field(default_factory=AX25Config)
    serial_tnc: SerialTNCConfig = field(default_factory=SerialTNCConfig)
    aliases: dict[str, str] = field(default_factory=dict)
    radio_only: bool = False
    ignore_busy: bool = False
    busy_timeout: Optional[float] = 300.0

    @property
    def mycall(self) -> str:
        return self.station.mycall
