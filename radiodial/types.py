"""
Data types and structures for radiodial.

Provides typed representations of connection targets and dial outcomes.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional
from urllib.parse import urlencode


class Scheme(str, Enum):
    """Supported transport schemes."""
    ARDOP = "ardop"
    PACTOR = "pactor"
    VARAHF = "varahf"
    VARAFM = "varafm"
    AX25 = "ax25"
    SERIAL_TNC = "serial-tnc"
    TELNET = "telnet"

    def __str__(self) -> str:
        return self.value


class Frequency(int):
    """Radio frequency in Hz, rendered in kHz."""

    @property
    def khz(self) -> float:
        return int(self) / 1e3

    def __str__(self) -> str:
        return f"{self.khz:.3f} kHz"

    def __repr__(self) -> str:
        return f"Frequency({int(self)})"


@dataclass(frozen=True)
class ConnectionDescriptor:
    """
    Parsed connection target.

    Instances are never mutated; defaults are applied on copies produced by
    the ``with_*`` helpers.

    Attributes:
        scheme: Transport scheme
        target: Remote station or service (e.g. "LA1B")
        host: Interface or address (e.g. AX.25 port name, "host:port")
        user: Callsign/user override
        password: Optional password (telnet)
        digis: Via path elements
        params: Scheme-specific parameters, each a tuple of values
        raw: Descriptor string as given by the caller
    """
    scheme: Scheme
    target: str
    host: str = ""
    user: Optional[str] = None
    password: Optional[str] = None
    digis: tuple[str, ...] = ()
    params: Mapping[str, tuple[str, ...]] = field(default_factory=dict, hash=False)
    raw: str = ""

    def __post_init__(self) -> None:
        # Read-only view over a private copy
        params = MappingProxyType(
            {name: tuple(values) for name, values in self.params.items()}
        )
        object.__setattr__(self, "params", params)

    def param(self, name: str) -> Optional[str]:
        """Get the first value of a parameter, or None if absent."""
        values = self.params.get(name)
        if not values:
            return None
        return values[0]

    def param_values(self, name: str) -> tuple[str, ...]:
        """Get all values of a parameter."""
        return tuple(self.params.get(name, ()))

    def with_user(self, user: str) -> "ConnectionDescriptor":
        return replace(self, user=user)

    def with_host(self, host: str) -> "ConnectionDescriptor":
        return replace(self, host=host)

    def with_params(self, **values: str) -> "ConnectionDescriptor":
        """
        Return a copy with the given parameters set (replacing existing values).

        Keyword names map to parameter names; use ``**{"serial-baud": ...}``
        for names that are not Python identifiers.
        """
        params = dict(self.params)
        for name, value in values.items():
            params[name] = (str(value),)
        return replace(self, params=params)

    @property
    def url(self) -> str:
        """Render back to descriptor syntax."""
        userinfo = ""
        if self.user:
            userinfo = self.user
            if self.password:
                userinfo += f":{self.password}"
            userinfo += "@"

        path = "/".join(list(self.digis) + [self.target])
        url = f"{self.scheme.value}://{userinfo}{self.host}/{path}"

        if self.params:
            query = urlencode(
                [(k, v) for k, values in self.params.items() for v in values]
            )
            url += f"?{query}"

        return url

    def __str__(self) -> str:
        return self.url


@dataclass
class ConnectionRecord:
    """One event-log entry per dial attempt."""
    descriptor: str                     # e.g. "connect ardop:///LA1B"
    frequency: Optional[Frequency]      # Rig frequency at attempt time
    success: bool
    error: Optional[str] = None
    timestamp: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def to_dict(self) -> dict:
        return {
            "time": self.timestamp.isoformat(),
            "descriptor": self.descriptor,
            "freq": int(self.frequency) if self.frequency is not None else None,
            "success": self.success,
            "error": self.error,
        }
