"""
Modem handle abstraction.

A ModemHandle owns the connection to one physical or virtual modem and knows
how to dial a remote station through it. Protocol-specific handles (ARDOP,
VARA, AX.25) are supplied by the embedding application; this module provides
the generic serial and TCP handles and a mock for testing.
"""

import logging
import socket
import threading
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterable, Optional

import serial
from serial import SerialException

from .session import CancelToken
from ..exceptions import DialCancelledError, DialError, ModemError
from ..types import ConnectionDescriptor

logger = logging.getLogger(__name__)


class ModemHandle(ABC):
    """Abstract base class for modem handles."""

    @abstractmethod
    def dial(self, descriptor: ConnectionDescriptor, cancel: CancelToken) -> Any:
        """
        Connect to a remote station.

        Blocks until connected, failed or cancelled. Implementations should
        watch ``cancel`` and return promptly once it is set.

        Args:
            descriptor: Fully defaulted connection descriptor
            cancel: Cancellation token for this dial

        Returns:
            Connected byte stream (must provide close())

        Raises:
            DialError: If the connection fails
            DialCancelledError: If cancelled while dialing
        """
        pass

    @abstractmethod
    def is_open(self) -> bool:
        """Check if the handle is open."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Close the handle."""
        pass

    def ping(self) -> None:
        """
        Liveness probe.

        The default assumes a handle is healthy while open.

        Raises:
            ModemError: If the modem does not respond
        """
        if not self.is_open():
            raise ModemError(f"{self.__class__.__name__} is closed")

    def version(self) -> str:
        """Modem software version, if known."""
        return ""

    def busy(self) -> bool:
        """Whether the shared channel is currently occupied."""
        return False

    def configure(self, **settings: Any) -> None:
        """
        Apply post-open settings (e.g. ARQ bandwidth, CW ID).

        Raises:
            ModemError: If a setting is not supported or rejected
        """
        if settings:
            raise ModemError(
                f"{self.__class__.__name__} does not support settings: {sorted(settings)}"
            )

    def set_ptt(self, rig: Any) -> None:
        """
        Wire push-to-talk to a rig.

        Raises:
            ModemError: If the handle cannot key a rig
        """
        raise ModemError(f"{self.__class__.__name__} does not support PTT control")

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} open={self.is_open()}>"


class SerialStream:
    """Byte stream over a connected serial modem."""

    def __init__(self, port: serial.Serial, disconnect_command: Optional[str] = None) -> None:
        self._serial = port
        self._disconnect_command = disconnect_command
        self._closed = False

    def read(self, size: int = 1) -> bytes:
        return self._serial.read(size)

    def write(self, data: bytes) -> int:
        return self._serial.write(data)

    def close(self) -> None:
        """Disconnect the link; the serial port itself stays with the modem."""
        if self._closed:
            return
        self._closed = True
        if self._disconnect_command:
            try:
                self._serial.write(f"{self._disconnect_command}\r".encode("ascii"))
            except SerialException as e:
                logger.warning(f"Failed to send disconnect command: {e}")


class SerialModem(ModemHandle):
    """
    Command-mode modem on a serial port (e.g. a PACTOR controller).

    Init commands from ``init_script`` (a file, one command per line) and
    ``cmdline_init`` (newline separated) are sent after the port opens. Dialing
    writes ``connect_command`` and waits for a line containing
    ``connected_marker`` or one of ``failure_markers``.
    """

    def __init__(
        self,
        port: str,
        baudrate: int = 57600,
        mycall: str = "",
        init_script: str = "",
        cmdline_init: str = "",
        mycall_command: str = "MY {mycall}",
        connect_command: str = "C {target}",
        disconnect_command: str = "D",
        connected_marker: str = "CONNECTED",
        failure_markers: Iterable[str] = ("DISCONNECTED", "LINK FAILED", "BUSY"),
        timeout: float = 1.0,
        dial_timeout: float = 120.0
    ) -> None:
        """
        Open the serial port and initialize the modem.

        Args:
            port: Serial port path (e.g., /dev/ttyUSB0)
            baudrate: Baud rate for serial communication
            mycall: Station callsign sent with mycall_command
            init_script: Path to a file of init commands
            cmdline_init: Extra init commands, newline separated
            mycall_command: Command template for setting the callsign
            connect_command: Command template for dialing
            disconnect_command: Command used to abort or end a link
            connected_marker: Substring of the response signalling success
            failure_markers: Substrings of responses signalling failure
            timeout: Serial read timeout in seconds
            dial_timeout: Give up dialing after this many seconds

        Raises:
            ModemError: If the port cannot be opened or initialized
        """
        self.port = port
        self.baudrate = baudrate
        self.mycall = mycall
        self.cmdline_init = cmdline_init
        self.connect_command = connect_command
        self.disconnect_command = disconnect_command
        self.connected_marker = connected_marker
        self.failure_markers = tuple(failure_markers)
        self.dial_timeout = dial_timeout
        self._lock = threading.Lock()

        try:
            self._serial = serial.Serial(port=port, baudrate=baudrate, timeout=timeout)
            logger.info(f"Opened modem serial port {port} at {baudrate} baud")
        except SerialException as e:
            logger.error(f"Failed to open modem serial port {port}: {e}")
            raise ModemError(f"Failed to open serial port {port}: {e}") from e

        commands = []
        if mycall:
            commands.append(mycall_command.format(mycall=mycall))
        if init_script:
            commands.extend(self._read_script(init_script))
        commands.extend(line for line in cmdline_init.splitlines() if line.strip())

        try:
            for command in commands:
                self._send(command)
        except ModemError:
            self._serial.close()
            raise

    @staticmethod
    def _read_script(path: str) -> list[str]:
        try:
            text = Path(path).read_text()
        except OSError as e:
            raise ModemError(f"Unable to read init script {path}: {e}") from e
        return [line.strip() for line in text.splitlines() if line.strip()]

    def _send(self, command: str) -> None:
        try:
            self._serial.write(f"{command}\r".encode("ascii"))
            logger.debug(f"Sent modem command: {command}")
        except SerialException as e:
            raise ModemError(f"Serial write failed: {e}") from e

    def _read_line(self) -> str:
        try:
            data = self._serial.read_until(b"\r")
        except SerialException as e:
            raise ModemError(f"Serial read failed: {e}") from e
        return data.decode("ascii", errors="ignore").strip()

    def dial(self, descriptor: ConnectionDescriptor, cancel: CancelToken) -> SerialStream:
        """Send the connect command and wait for the link to come up."""
        with self._lock:
            try:
                self._send(self.connect_command.format(target=descriptor.target))
                deadline = time.monotonic() + self.dial_timeout
                while time.monotonic() < deadline:
                    if cancel.cancelled:
                        self._send(self.disconnect_command)
                        raise DialCancelledError("Dial cancelled", scheme=descriptor.scheme.value)

                    line = self._read_line()
                    if not line:
                        continue

                    logger.debug(f"Modem: {line}")
                    if any(marker in line for marker in self.failure_markers):
                        raise DialError(line, scheme=descriptor.scheme.value, descriptor=descriptor.raw)
                    if self.connected_marker in line:
                        return SerialStream(self._serial, self.disconnect_command)
            except ModemError as e:
                raise DialError(str(e), scheme=descriptor.scheme.value) from e

            self._send(self.disconnect_command)
            raise DialError(
                f"No answer from {descriptor.target} within {self.dial_timeout:.0f}s",
                scheme=descriptor.scheme.value
            )

    def is_open(self) -> bool:
        return bool(self._serial and self._serial.is_open)

    def close(self) -> None:
        if self._serial and self._serial.is_open:
            self._serial.close()
            logger.info(f"Closed modem serial port {self.port}")


class TcpModem(ModemHandle):
    """
    Plain TCP dialer (telnet).

    Holds no persistent connection; each dial opens a new socket to the
    descriptor's host, or to its target when no host is given.
    """

    def __init__(self, default_port: int = 8772, connect_timeout: float = 30.0) -> None:
        self.default_port = default_port
        self.connect_timeout = connect_timeout
        self._open = True

    def _address(self, descriptor: ConnectionDescriptor) -> tuple[str, int]:
        address = descriptor.host or descriptor.target
        host, sep, port = address.rpartition(":")
        if not sep:
            return address, self.default_port
        try:
            return host, int(port)
        except ValueError as e:
            raise DialError(f"Invalid port in address {address!r}", scheme=descriptor.scheme.value) from e

    def dial(self, descriptor: ConnectionDescriptor, cancel: CancelToken) -> socket.socket:
        if cancel.cancelled:
            raise DialCancelledError("Dial cancelled", scheme=descriptor.scheme.value)

        host, port = self._address(descriptor)
        try:
            sock = socket.create_connection((host, port), timeout=self.connect_timeout)
        except OSError as e:
            raise DialError(
                f"Unable to connect to {host}:{port}: {e}", scheme=descriptor.scheme.value
            ) from e

        logger.info(f"TCP connection established to {host}:{port}")
        return sock

    def is_open(self) -> bool:
        return self._open

    def close(self) -> None:
        self._open = False


class MockStream:
    """In-memory stream returned by MockModem."""

    def __init__(self, target: str) -> None:
        self.target = target
        self.written: list[bytes] = []
        self.closed = False

    def read(self, size: int = 1) -> bytes:
        return b""

    def write(self, data: bytes) -> int:
        self.written.append(data)
        return len(data)

    def close(self) -> None:
        self.closed = True


class MockModem(ModemHandle):
    """
    Mock modem for testing.

    Simulates dialing without hardware. Behaviour is driven by attributes:

    - healthy: ping() raises when False
    - busy_states: values returned by successive busy() calls (then False)
    - dial_error: exception raised by dial()
    - block_dial: dial() waits until cancelled
    """

    def __init__(self, name: str = "mock", version: str = "mock-1.0") -> None:
        self.name = name
        self._version = version
        self._open = True
        self._lock = threading.Lock()

        self.healthy = True
        self.busy_states: list[bool] = []
        self.busy_error: Optional[Exception] = None
        self.dial_error: Optional[Exception] = None
        self.block_dial = False
        self.block_timeout = 5.0

        self.close_count = 0
        self.ping_count = 0
        self.dials: list[ConnectionDescriptor] = []
        self.settings: dict[str, Any] = {}
        self.ptt_rig: Any = None
        self.dial_started = threading.Event()
        logger.info(f"Initialized MockModem {name}")

    def ping(self) -> None:
        self.ping_count += 1
        if not self._open or not self.healthy:
            raise ModemError(f"MockModem {self.name} not responding")

    def version(self) -> str:
        return self._version

    def busy(self) -> bool:
        if self.busy_error is not None:
            raise self.busy_error
        with self._lock:
            if self.busy_states:
                return self.busy_states.pop(0)
        return False

    def configure(self, **settings: Any) -> None:
        self.settings.update(settings)

    def set_ptt(self, rig: Any) -> None:
        self.ptt_rig = rig

    def dial(self, descriptor: ConnectionDescriptor, cancel: CancelToken) -> MockStream:
        if not self._open:
            raise ModemError(f"MockModem {self.name} is closed")

        self.dials.append(descriptor)
        self.dial_started.set()
        logger.debug(f"Mock dial: {descriptor}")

        if self.block_dial:
            if cancel.wait(self.block_timeout):
                raise DialCancelledError("Dial cancelled", scheme=descriptor.scheme.value)

        if self.dial_error is not None:
            raise self.dial_error

        return MockStream(descriptor.target)

    def is_open(self) -> bool:
        return self._open

    def close(self) -> None:
        self.close_count += 1
        self._open = False
        logger.info(f"Closed MockModem {self.name}")
