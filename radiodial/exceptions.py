"""
Exceptions for the radiodial library.

Every failure of a dial attempt maps onto one of these classes. The public
``Dialer.connect`` entry point catches them all and reports a boolean result,
so they mostly travel between the internal components.
"""

from typing import Optional


class RadioDialError(Exception):
    """
    Base exception for radiodial errors.

    All radiodial exceptions inherit from this class.
    """

    def __init__(
        self,
        message: str,
        scheme: Optional[str] = None,
        descriptor: Optional[str] = None
    ) -> None:
        """
        Initialize exception with context.

        Args:
            message: Error description
            scheme: Transport scheme involved (if applicable)
            descriptor: Connection descriptor being dialed (if applicable)
        """
        self.scheme = scheme
        self.descriptor = descriptor
        super().__init__(message)

    def __str__(self) -> str:
        """Format error message with context."""
        parts = [super().__str__()]

        if self.scheme:
            parts.append(f"Scheme: {self.scheme}")

        if self.descriptor:
            parts.append(f"Descriptor: {self.descriptor}")

        return " | ".join(parts)


class ParseError(RadioDialError):
    """
    Raised when a connection descriptor cannot be parsed.

    This indicates:
    - Malformed descriptor syntax
    - Unsupported transport scheme
    - Missing target
    - Alias chain too deep
    """
    pass


class InitError(RadioDialError):
    """
    Raised when a modem handle cannot be opened or configured.

    This indicates:
    - Modem device unreachable
    - Post-open configuration rejected
    - PTT rig not defined or not loaded
    """
    pass


class RigNotLoadedError(RadioDialError):
    """
    Raised when a transport has no loaded rig to control.
    """
    pass


class QsyError(RadioDialError):
    """
    Raised when changing the rig frequency fails.
    """
    pass


class DialError(RadioDialError):
    """
    Raised when the transport-level connection fails.
    """
    pass


class ChannelBusyError(DialError):
    """
    Raised when the channel stays busy longer than the configured limit.
    """
    pass


class DialCancelledError(RadioDialError):
    """
    Raised when an in-flight dial is cancelled by the operator.

    This is informational, not a failure.
    """
    pass


class RadioOnlyError(RadioDialError):
    """
    Raised when radio-only mode is requested but cannot be honoured.

    This indicates:
    - Station callsign carries an SSID
    - Transport has no radio-only concept
    """
    pass


class ModemError(RadioDialError):
    """
    Raised by modem handles when device communication fails.

    The registry reports it as InitError and the dialer as DialError.
    """
    pass
