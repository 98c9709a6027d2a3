"""
Transport profiles.

One profile per scheme captures everything scheme-specific about a dial:
how its modem is opened and configured, which defaults it fills in, whether
it supports radio-only mode and whether it shares a half-duplex channel.
"""

import logging
from typing import TYPE_CHECKING, Callable, Hashable, Mapping, Optional

from ..core.transport import ModemHandle, SerialModem, TcpModem
from ..exceptions import InitError, ModemError, RadioOnlyError
from ..types import ConnectionDescriptor, Scheme

if TYPE_CHECKING:
    from ..config import DialerConfig, VaraConfig
    from .frequency import RigLookup

logger = logging.getLogger(__name__)

# Suffix appended to the callsign in radio-only mode
RADIO_ONLY_SUFFIX = "-T"

Opener = Callable[["DialerConfig", Optional[ConnectionDescriptor]], ModemHandle]


def has_ssid(callsign: str) -> bool:
    return "-" in callsign


class TransportProfile:
    """
    Base transport profile.

    Attributes:
        scheme: Scheme handled by this profile
        supports_radio_only: Whether radio-only mode is available
        shared_medium: Whether to wait for a clear channel before dialing
    """

    scheme: Scheme
    supports_radio_only = True
    shared_medium = False

    def __init__(self, opener: Optional[Opener] = None) -> None:
        """
        Initialize profile.

        Args:
            opener: Callable creating the modem handle; overrides the
                profile's built-in opener
        """
        self._opener = opener

    def open_key(self, descriptor: Optional[ConnectionDescriptor]) -> Hashable:
        """
        Open-time configuration requested by a descriptor.

        A registered handle opened with a different key is reopened.
        """
        return None

    def open(
        self,
        config: "DialerConfig",
        descriptor: Optional[ConnectionDescriptor]
    ) -> ModemHandle:
        if self._opener is not None:
            return self._opener(config, descriptor)
        return self.default_open(config, descriptor)

    def default_open(
        self,
        config: "DialerConfig",
        descriptor: Optional[ConnectionDescriptor]
    ) -> ModemHandle:
        raise InitError(f"No modem opener configured for {self.scheme}", scheme=str(self.scheme))

    def configure(
        self,
        handle: ModemHandle,
        config: "DialerConfig",
        rigs: Optional["RigLookup"]
    ) -> None:
        """Apply post-open configuration to a freshly opened handle."""
        pass

    def apply_defaults(
        self,
        descriptor: ConnectionDescriptor,
        config: "DialerConfig"
    ) -> ConnectionDescriptor:
        """Fill in user and interface defaults on a copy of the descriptor."""
        if descriptor.user is None:
            descriptor = descriptor.with_user(config.mycall)
        return descriptor

    def check_radio_only(self, mycall: str) -> None:
        """
        Raises:
            RadioOnlyError: If radio-only mode cannot be used
        """
        if has_ssid(mycall):
            raise RadioOnlyError("Radio Only does not support callsign with SSID")
        if not self.supports_radio_only:
            raise RadioOnlyError(
                f"Radio-Only is not available for {self.scheme}", scheme=str(self.scheme)
            )

    def apply_radio_only(self, descriptor: ConnectionDescriptor) -> ConnectionDescriptor:
        return descriptor.with_user(f"{descriptor.user or ''}{RADIO_ONLY_SUFFIX}")

    def _wire_ptt(self, handle: ModemHandle, rig_name: str, rigs: Optional["RigLookup"]) -> None:
        rig = rigs.get(rig_name) if rigs is not None else None
        if rig is None:
            raise InitError(
                f"Unable to set PTT rig '{rig_name}': not defined or not loaded",
                scheme=str(self.scheme)
            )
        try:
            handle.set_ptt(rig)
        except ModemError as e:
            raise InitError(f"Unable to set PTT rig '{rig_name}': {e}", scheme=str(self.scheme)) from e
        logger.info(f"{self.scheme} PTT wired to rig '{rig_name}'")

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} scheme={self.scheme}>"


class ArdopProfile(TransportProfile):
    """ARDOP TNC over TCP."""

    scheme = Scheme.ARDOP
    shared_medium = True

    def configure(self, handle, config, rigs) -> None:
        settings = {"cwid": config.ardop.cwid}
        if config.ardop.arq_bandwidth:
            settings["arq_bandwidth"] = config.ardop.arq_bandwidth

        try:
            handle.configure(**settings)
            version = handle.version()
        except ModemError as e:
            raise InitError(f"ARDOP TNC initialization failed: {e}", scheme=str(self.scheme)) from e
        logger.info(f"ARDOP TNC ({version or 'unknown version'}) initialized")

        if config.ardop.ptt_control:
            self._wire_ptt(handle, config.ardop.rig, rigs)


class PactorProfile(TransportProfile):
    """
    PACTOR modem on a serial port.

    The ``init`` descriptor parameter carries extra modem commands; a change
    in those commands reopens the modem.
    """

    scheme = Scheme.PACTOR

    def open_key(self, descriptor):
        if descriptor is None:
            return ""
        return "\n".join(descriptor.param_values("init"))

    def default_open(self, config, descriptor):
        return SerialModem(
            port=config.pactor.path,
            baudrate=config.pactor.baudrate,
            mycall=config.mycall,
            init_script=config.pactor.init_script,
            cmdline_init=self.open_key(descriptor),
        )


class VaraProfile(TransportProfile):
    """VARA HF or FM modem."""

    def __init__(self, scheme: Scheme, opener: Optional[Opener] = None) -> None:
        super().__init__(opener)
        self.scheme = scheme

    def _config(self, config: "DialerConfig") -> "VaraConfig":
        return config.varafm if self.scheme == Scheme.VARAFM else config.varahf

    def configure(self, handle, config, rigs) -> None:
        vara = self._config(config)
        if vara.ptt_control:
            self._wire_ptt(handle, vara.rig, rigs)


class AX25Profile(TransportProfile):
    """AX.25 packet radio."""

    scheme = Scheme.AX25
    supports_radio_only = False

    def apply_defaults(self, descriptor, config):
        descriptor = super().apply_defaults(descriptor, config)
        if not descriptor.host:
            descriptor = descriptor.with_host(config.ax25.port)
        return descriptor


class SerialTNCProfile(TransportProfile):
    """KISS TNC on a serial port."""

    scheme = Scheme.SERIAL_TNC
    supports_radio_only = False

    def apply_defaults(self, descriptor, config):
        descriptor = super().apply_defaults(descriptor, config)
        if descriptor.host:
            return descriptor

        tnc = config.serial_tnc
        descriptor = descriptor.with_host(tnc.path)
        if tnc.hbaud > 0:
            descriptor = descriptor.with_params(hbaud=tnc.hbaud)
        if tnc.serial_baud > 0:
            descriptor = descriptor.with_params(serial_baud=tnc.serial_baud)
        return descriptor


class TelnetProfile(TransportProfile):
    """Telnet over TCP."""

    scheme = Scheme.TELNET

    def default_open(self, config, descriptor):
        return TcpModem()


def default_profiles(
    openers: Optional[Mapping[Scheme, Opener]] = None
) -> dict[Scheme, TransportProfile]:
    """
    Build the profile set for all supported schemes.

    Args:
        openers: Modem openers by scheme; ARDOP, VARA and AX.25 handles must
            be supplied here since no built-in opener exists for them

    Returns:
        Profiles keyed by scheme
    """
    openers = dict(openers or {})
    profiles = [
        ArdopProfile(openers.get(Scheme.ARDOP)),
        PactorProfile(openers.get(Scheme.PACTOR)),
        VaraProfile(Scheme.VARAHF, openers.get(Scheme.VARAHF)),
        VaraProfile(Scheme.VARAFM, openers.get(Scheme.VARAFM)),
        AX25Profile(openers.get(Scheme.AX25)),
        SerialTNCProfile(openers.get(Scheme.SERIAL_TNC)),
        TelnetProfile(openers.get(Scheme.TELNET)),
    ]
    return {profile.scheme: profile for profile in profiles}
